"""Generate query key tables and an operation manifest from a TypeScript query tree."""

from .engine import ChangeEvent, Engine
from .errors import AliasCollisionError, ConfigError, NXQueryError
from .models import NamespaceModel, OperationBucket, OperationDescriptor, OperationKind

__all__ = [
    "AliasCollisionError",
    "ChangeEvent",
    "ConfigError",
    "Engine",
    "NXQueryError",
    "NamespaceModel",
    "OperationBucket",
    "OperationDescriptor",
    "OperationKind",
]
