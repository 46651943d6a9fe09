"""Namespace discovery for the scanned query root."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .extractor import StructuralExtractor
from .logging import get_logger
from .models import (
    NamespaceModel,
    OperationBucket,
    OperationDescriptor,
    OperationKind,
    SOURCE_SUFFIX,
    TreeSnapshot,
)

_EXCLUDED_DIRS = {"node_modules"}


def is_excluded_dir(name: str, extra: Iterable[str] = ()) -> bool:
    return name.startswith(".") or name in _EXCLUDED_DIRS or name in set(extra)


def _is_operation_file(entry: os.DirEntry) -> bool:
    name = entry.name
    if not name.endswith(SOURCE_SUFFIX) or name.endswith(f".d{SOURCE_SUFFIX}"):
        return False
    return entry.is_file()


def _sorted_entries(directory: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(directory) as iterator:
            entries = list(iterator)
    except (FileNotFoundError, NotADirectoryError):
        return []
    return sorted(entries, key=lambda entry: entry.name)


class TreeWalker:
    """Walks ``<root>/<namespace>/{queries,mutations}`` and builds namespace models."""

    def __init__(
        self,
        root: Path,
        *,
        extractor: StructuralExtractor | None = None,
        exclude_dirs: Iterable[str] = (),
    ) -> None:
        self.root = Path(root)
        self.extractor = extractor or StructuralExtractor()
        self.exclude_dirs = frozenset(exclude_dirs)
        self.logger = get_logger("walker")

    def collect_namespaces(self) -> TreeSnapshot:
        """Return every namespace under the root, ordered by name."""
        namespaces: List[NamespaceModel] = []
        for entry in _sorted_entries(self.root):
            if not entry.is_dir() or is_excluded_dir(entry.name, self.exclude_dirs):
                continue
            namespace_path = self.root / entry.name
            operations = self.collect_operations(entry.name, namespace_path)
            namespaces.append(
                NamespaceModel(name=entry.name, absolute_path=namespace_path, operations=operations)
            )
        self.logger.debug("Discovered %d namespace(s) under %s", len(namespaces), self.root)
        return tuple(namespaces)

    def collect_operations(self, namespace: str, namespace_path: Path) -> Dict[str, OperationBucket]:
        buckets: Dict[str, OperationBucket] = {}
        for kind in (OperationKind.QUERY, OperationKind.MUTATION):
            target_dir = namespace_path / kind.folder
            for entry in _sorted_entries(target_dir):
                if not _is_operation_file(entry):
                    continue
                descriptor = self.parse_operation_file(namespace, kind, target_dir / entry.name)
                if descriptor is None:
                    continue
                buckets.setdefault(descriptor.name, OperationBucket()).put(descriptor)
        return {name: buckets[name] for name in sorted(buckets)}

    def parse_operation_file(
        self, namespace: str, kind: OperationKind, file_path: Path
    ) -> Optional[OperationDescriptor]:
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            # Files can vanish between listing and reading while an editor saves.
            self.logger.debug("Skipping unreadable operation file %s: %s", file_path, exc)
            return None
        return self.extractor.extract(
            source,
            kind=kind,
            namespace=namespace,
            source_path=file_path,
            root=self.root,
        )


__all__ = ["TreeWalker", "is_excluded_dir"]
