"""Core data models shared across nxquery components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

SOURCE_SUFFIX = ".ts"
DEFAULT_PARAM_NAME = "args"
ARGS_TYPE_SUFFIX = "Args"

MANIFEST_FILENAME = f"index{SOURCE_SUFFIX}"
ROOT_KEYS_FILENAME = f"keys{SOURCE_SUFFIX}"
NAMESPACE_KEYS_FILENAME = f"queryKeys{SOURCE_SUFFIX}"


class OperationKind(str, Enum):
    """The two kinds of operation a namespace can declare."""

    QUERY = "query"
    MUTATION = "mutation"

    @property
    def folder(self) -> str:
        return "queries" if self is OperationKind.QUERY else "mutations"

    @property
    def canonical_factory(self) -> str:
        return "createQueryOptions" if self is OperationKind.QUERY else "createMutationOptions"

    @property
    def alias_suffix(self) -> str:
        return "QueryOptions" if self is OperationKind.QUERY else "MutationOptions"

    @classmethod
    def from_folder(cls, folder: str) -> Optional["OperationKind"]:
        for kind in cls:
            if kind.folder == folder:
                return kind
        return None


CANONICAL_FACTORIES = frozenset(kind.canonical_factory for kind in OperationKind)


@dataclass(frozen=True)
class OperationDescriptor:
    """Structural metadata extracted from one operation file."""

    kind: OperationKind
    namespace: str
    name: str
    source_path: Path
    import_path: str
    factory_name: str
    alias: str
    param_name: Optional[str] = None
    param_type: Optional[str] = None
    args_type_name: Optional[str] = None
    has_params: bool = False


@dataclass
class OperationBucket:
    """At most one query and one mutation sharing a name within a namespace."""

    query: Optional[OperationDescriptor] = None
    mutation: Optional[OperationDescriptor] = None

    def get(self, kind: OperationKind) -> Optional[OperationDescriptor]:
        return self.query if kind is OperationKind.QUERY else self.mutation

    def put(self, descriptor: OperationDescriptor) -> None:
        if descriptor.kind is OperationKind.QUERY:
            self.query = descriptor
        else:
            self.mutation = descriptor

    @property
    def is_paired(self) -> bool:
        return self.query is not None and self.mutation is not None

    def descriptors(self) -> Iterator[OperationDescriptor]:
        """Yield the populated descriptors, query first."""
        if self.query is not None:
            yield self.query
        if self.mutation is not None:
            yield self.mutation


@dataclass
class NamespaceModel:
    """One namespace directory and its operations ordered by name."""

    name: str
    absolute_path: Path
    operations: Dict[str, OperationBucket] = field(default_factory=dict)

    def descriptors(self) -> Iterator[OperationDescriptor]:
        for bucket in self.operations.values():
            yield from bucket.descriptors()


TreeSnapshot = Tuple[NamespaceModel, ...]


__all__ = [
    "ARGS_TYPE_SUFFIX",
    "CANONICAL_FACTORIES",
    "DEFAULT_PARAM_NAME",
    "MANIFEST_FILENAME",
    "NAMESPACE_KEYS_FILENAME",
    "NamespaceModel",
    "OperationBucket",
    "OperationDescriptor",
    "OperationKind",
    "ROOT_KEYS_FILENAME",
    "SOURCE_SUFFIX",
    "TreeSnapshot",
]
