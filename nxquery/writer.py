"""Filesystem writes for generated artifacts and namespace scaffolding."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

from .logging import get_logger
from .models import MANIFEST_FILENAME, NAMESPACE_KEYS_FILENAME, ROOT_KEYS_FILENAME, OperationKind
from .walker import is_excluded_dir


def _empty_export(name: str) -> str:
    return "\n".join([f"export const {name} = {{}}", "", f"export default {name}", ""])


EMPTY_MANIFEST = _empty_export("NXQuery")
EMPTY_QUERY_KEYS = _empty_export("queryKeys")


class ArtifactWriter:
    """Sole mutator of generated files; writes only when content changes."""

    def __init__(self, root: Path, *, exclude_dirs: Iterable[str] = ()) -> None:
        self.root = Path(root)
        self.exclude_dirs = frozenset(exclude_dirs)
        self.logger = get_logger("writer")

    def write_if_changed(self, target: Path, content: str) -> bool:
        """Write ``content`` unless the file already holds it; return whether it wrote.

        A missing file counts as changed. Storage errors such as a full
        device propagate to the caller.
        """
        try:
            existing = target.read_text(encoding="utf-8")
        except (FileNotFoundError, UnicodeDecodeError):
            existing = None
        if existing == content:
            self.logger.debug("Unchanged %s", target)
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        self.logger.info("Wrote %s", self._display(target))
        return True

    def ensure_file(self, target: Path, default: Callable[[], str]) -> bool:
        if target.exists():
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(default(), encoding="utf-8")
        self.logger.debug("Created %s", target)
        return True

    def ensure_base_structure(self) -> None:
        """Create the root artifacts and every namespace skeleton that is missing."""
        self.root.mkdir(parents=True, exist_ok=True)
        self.ensure_file(self.root / MANIFEST_FILENAME, lambda: EMPTY_MANIFEST)
        self.ensure_file(self.root / ROOT_KEYS_FILENAME, lambda: EMPTY_QUERY_KEYS)
        for entry in sorted(self.root.iterdir()):
            if entry.is_dir():
                self.ensure_namespace_skeleton(entry)

    def ensure_namespace_skeleton(self, namespace_path: Path) -> bool:
        """Scaffold a direct child of the root; deeper or excluded folders are ignored."""
        namespace_path = Path(namespace_path)
        try:
            relative = namespace_path.resolve().relative_to(self.root.resolve())
        except ValueError:
            return False
        if len(relative.parts) != 1 or is_excluded_dir(relative.parts[0], self.exclude_dirs):
            return False

        for kind in OperationKind:
            (namespace_path / kind.folder).mkdir(parents=True, exist_ok=True)
        self.ensure_file(namespace_path / NAMESPACE_KEYS_FILENAME, lambda: EMPTY_QUERY_KEYS)
        return True

    def _display(self, target: Path) -> str:
        try:
            return target.relative_to(self.root).as_posix()
        except ValueError:
            return str(target)


__all__ = ["ArtifactWriter", "EMPTY_MANIFEST", "EMPTY_QUERY_KEYS"]
