"""Exception types raised by nxquery components."""

from __future__ import annotations


class NXQueryError(RuntimeError):
    """Base class for nxquery failures."""


class ConfigError(NXQueryError):
    """Raised when the configuration file cannot be parsed."""


class AliasCollisionError(NXQueryError):
    """Raised when two generated re-export aliases would shadow each other."""

    def __init__(self, alias: str, first: str, second: str) -> None:
        super().__init__(
            f"Generated alias '{alias}' is shared by {first} and {second}; "
            "rename one of the files or namespaces so the aliases differ"
        )
        self.alias = alias
        self.first = first
        self.second = second


__all__ = ["AliasCollisionError", "ConfigError", "NXQueryError"]
