"""Tree-sitter powered extraction of operation factories from TypeScript files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from .logging import get_logger
from .models import (
    ARGS_TYPE_SUFFIX,
    CANONICAL_FACTORIES,
    DEFAULT_PARAM_NAME,
    MANIFEST_FILENAME,
    OperationDescriptor,
    OperationKind,
)
from .naming import build_alias, relative_import

_FUNCTION_VALUE_TYPES = {"arrow_function", "function_expression", "function", "generator_function"}
_VARIABLE_DECLARATION_TYPES = {"lexical_declaration", "variable_declaration"}
_TYPE_DECLARATION_TYPES = {"type_alias_declaration", "interface_declaration"}
_PARAMETER_TYPES = {"required_parameter", "optional_parameter"}


@dataclass
class FactoryCandidate:
    """An exported binding whose value is a function expression."""

    name: str
    param_name: Optional[str]
    param_type: Optional[str]
    has_params: bool


@dataclass
class ExportSummary:
    """Everything the extractor needs from one parsed file."""

    factories: List[FactoryCandidate]
    args_type_name: Optional[str]

    def preferred_factory(self) -> Optional[FactoryCandidate]:
        """Exact canonical name wins; otherwise the first candidate in declaration order."""
        for candidate in self.factories:
            if candidate.name in CANONICAL_FACTORIES:
                return candidate
        return self.factories[0] if self.factories else None


class StructuralExtractor:
    """Parses operation files and reports the exported factory they declare."""

    def __init__(self) -> None:
        self._parser: Optional[Parser] = None
        self.logger = get_logger("extractor")

    def extract(
        self,
        source: str,
        *,
        kind: OperationKind,
        namespace: str,
        source_path: Path,
        root: Path,
    ) -> Optional[OperationDescriptor]:
        summary = self.parse_exports(source, source_path)
        if summary is None:
            return None
        factory = summary.preferred_factory()
        if factory is None:
            return None

        name = source_path.stem
        is_query = kind is OperationKind.QUERY
        return OperationDescriptor(
            kind=kind,
            namespace=namespace,
            name=name,
            source_path=source_path,
            import_path=relative_import(root / MANIFEST_FILENAME, source_path),
            factory_name=factory.name,
            alias=build_alias(namespace, name, kind, factory.name),
            param_name=factory.param_name if is_query else None,
            param_type=factory.param_type if is_query else None,
            args_type_name=summary.args_type_name,
            has_params=factory.has_params if is_query else False,
        )

    def parse_exports(self, source: str, path: Path | str = "<memory>") -> Optional[ExportSummary]:
        """Return the file's export summary, or None when it does not parse."""
        source_bytes = source.encode("utf-8")
        tree = self._get_parser().parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            self._report_syntax_error(path, root)
            return None

        factories: List[FactoryCandidate] = []
        args_type_name: Optional[str] = None
        for declaration in self._exported_declarations(root):
            if declaration.type in _VARIABLE_DECLARATION_TYPES:
                factories.extend(self._collect_factories(declaration, source_bytes))
            elif declaration.type in _TYPE_DECLARATION_TYPES and args_type_name is None:
                name_node = declaration.child_by_field_name("name")
                name = _node_text(name_node, source_bytes) if name_node else ""
                if name.endswith(ARGS_TYPE_SUFFIX):
                    args_type_name = name
        return ExportSummary(factories=factories, args_type_name=args_type_name)

    def _get_parser(self) -> Parser:
        if self._parser is None:
            self._parser = Parser(Language(tree_sitter_typescript.language_typescript()))
        return self._parser

    @staticmethod
    def _exported_declarations(root: Node) -> Iterator[Node]:
        for child in root.children:
            if child.type != "export_statement":
                continue
            declaration = child.child_by_field_name("declaration")
            if declaration is not None:
                yield declaration

    def _collect_factories(self, declaration: Node, source_bytes: bytes) -> Iterator[FactoryCandidate]:
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name_node is None or name_node.type != "identifier":
                continue
            if value is None or value.type not in _FUNCTION_VALUE_TYPES:
                continue
            first_param = self._first_parameter(value)
            yield FactoryCandidate(
                name=_node_text(name_node, source_bytes),
                param_name=self._parameter_name(first_param, source_bytes),
                param_type=self._parameter_type(first_param, source_bytes),
                has_params=first_param is not None,
            )

    @staticmethod
    def _first_parameter(function: Node) -> Optional[Node]:
        # `x => ...` stores its single identifier under `parameter`.
        bare = function.child_by_field_name("parameter")
        if bare is not None:
            return bare
        parameters = function.child_by_field_name("parameters")
        if parameters is None:
            return None
        for child in parameters.named_children:
            if child.type in _PARAMETER_TYPES:
                return child
        return None

    @staticmethod
    def _parameter_name(param: Optional[Node], source_bytes: bytes) -> Optional[str]:
        if param is None:
            return None
        if param.type == "identifier":
            return _node_text(param, source_bytes)
        pattern = param.child_by_field_name("pattern")
        if pattern is not None and pattern.type == "identifier":
            return _node_text(pattern, source_bytes)
        return DEFAULT_PARAM_NAME

    @staticmethod
    def _parameter_type(param: Optional[Node], source_bytes: bytes) -> Optional[str]:
        if param is None or param.type == "identifier":
            return None
        for child in param.children:
            if child.type == "type_annotation":
                raw = _node_text(child, source_bytes)
                return raw.lstrip(":").strip() or None
        return None

    def _report_syntax_error(self, path: Path | str, root: Node) -> None:
        node = _first_error(root)
        if node is None:
            self.logger.warning("Failed to parse %s", path)
            return
        row, column = node.start_point
        detail = "missing token" if node.is_missing else "unexpected syntax"
        self.logger.warning(
            "Failed to parse %s:%d:%d (%s); the file is skipped until it parses",
            path,
            row + 1,
            column + 1,
            detail,
        )


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _first_error(node: Node) -> Optional[Node]:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


__all__ = ["ExportSummary", "FactoryCandidate", "StructuralExtractor"]
