"""Boilerplate seeding for newly created, empty operation files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .logging import get_logger
from .models import OperationKind, SOURCE_SUFFIX
from .naming import property_accessor, to_pascal_case

_TEMPLATES_DIR = Path(__file__).with_name("templates")


class TemplateSeeder:
    """Fills ``<namespace>/<queries|mutations>/<name>.ts`` when the file is blank."""

    def __init__(self, root: Path, templates_dir: Path | None = None) -> None:
        self.root = Path(root)
        self.templates_dir = templates_dir or _TEMPLATES_DIR
        self._env = self._create_env(self.templates_dir)
        self.logger = get_logger("seeder")

    def maybe_seed(self, file_path: Path) -> bool:
        """Seed ``file_path`` if it is a whitespace-only operation file; return whether it wrote."""
        target = self._locate(Path(file_path))
        if target is None:
            return False
        namespace, kind, path = target
        try:
            existing = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return False
        if existing.strip():
            return False

        path.write_text(self.render(namespace, kind, path.stem), encoding="utf-8")
        self.logger.info("Seeded %s template in %s", kind.value, path)
        return True

    def render(self, namespace: str, kind: OperationKind, name: str) -> str:
        type_prefix = f"{to_pascal_case(namespace)}{to_pascal_case(name)}"
        template = self._env.get_template(f"{kind.value}{SOURCE_SUFFIX}.j2")
        return template.render(
            args_type=f"{type_prefix}Args",
            return_type=f"{type_prefix}Return",
            accessor=property_accessor("queryKeys", name),
        )

    def _locate(self, file_path: Path) -> Optional[tuple[str, OperationKind, Path]]:
        if file_path.suffix != SOURCE_SUFFIX or file_path.name.endswith(f".d{SOURCE_SUFFIX}"):
            return None
        try:
            relative = file_path.resolve().relative_to(self.root.resolve())
        except ValueError:
            return None
        if len(relative.parts) != 3:
            return None
        namespace, folder, filename = relative.parts
        kind = OperationKind.from_folder(folder)
        if kind is None:
            return None
        return namespace, kind, self.root / namespace / folder / filename

    @staticmethod
    def _create_env(templates_dir: Path) -> Environment:
        return Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )


__all__ = ["TemplateSeeder"]
