"""Deterministic rendering of key tables and the NXQuery manifest."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

from .errors import AliasCollisionError
from .models import (
    DEFAULT_PARAM_NAME,
    MANIFEST_FILENAME,
    NAMESPACE_KEYS_FILENAME,
    ROOT_KEYS_FILENAME,
    NamespaceModel,
    OperationBucket,
    OperationDescriptor,
    OperationKind,
)
from .naming import format_property_key, namespace_keys_alias, quote, relative_import

_INDENT = "  "


class Renderer:
    """Turns a tree snapshot into the text of every generated artifact."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def render_all(self, namespaces: Sequence[NamespaceModel]) -> Dict[Path, str]:
        """Return ``path -> content`` for every artifact of one pass."""
        outputs: Dict[Path, str] = {}
        for namespace in namespaces:
            outputs[namespace.absolute_path / NAMESPACE_KEYS_FILENAME] = self.render_namespace_keys(namespace)
        outputs[self.root / ROOT_KEYS_FILENAME] = self.render_root_keys(namespaces)
        outputs[self.root / MANIFEST_FILENAME] = self.render_manifest(namespaces)
        return outputs

    def render_namespace_keys(self, namespace: NamespaceModel) -> str:
        keys_file = namespace.absolute_path / NAMESPACE_KEYS_FILENAME
        imports: Dict[str, Set[str]] = {}
        for descriptor in namespace.descriptors():
            if not descriptor.args_type_name:
                continue
            import_path = relative_import(keys_file, descriptor.source_path)
            imports.setdefault(import_path, set()).add(descriptor.args_type_name)

        lines: List[str] = []
        for import_path in sorted(imports):
            names = ", ".join(sorted(imports[import_path]))
            lines.append(f"import type {{ {names} }} from {quote(import_path)}")
        if lines:
            lines.append("")

        lines.append("export const queryKeys = {")
        for name, bucket in namespace.operations.items():
            lines.extend(self._render_key_entry(namespace.name, name, bucket))
        lines.extend(["} as const", "", "export default queryKeys", ""])
        return "\n".join(lines)

    def render_root_keys(self, namespaces: Sequence[NamespaceModel]) -> str:
        aliases = self._namespace_aliases(namespaces)
        lines: List[str] = []
        for namespace in namespaces:
            specifier = quote(f"./{namespace.name}/queryKeys")
            lines.append(f"import {{ queryKeys as {aliases[namespace.name]} }} from {specifier}")
        if lines:
            lines.append("")

        lines.append("export const queryKeys = {")
        for namespace in namespaces:
            lines.append(f"{_INDENT}{format_property_key(namespace.name)}: {aliases[namespace.name]},")
        lines.extend(["} as const", "", "export default queryKeys", ""])
        return "\n".join(lines)

    def render_manifest(self, namespaces: Sequence[NamespaceModel]) -> str:
        self._check_operation_aliases(namespaces)
        operations = sorted(
            (op for namespace in namespaces for op in namespace.descriptors()),
            key=lambda op: (op.import_path, op.alias),
        )
        imports = [
            f"import {{ {op.factory_name} as {op.alias} }} from {quote(op.import_path)}"
            for op in operations
        ]

        body: List[str] = ["export const NXQuery = {"]
        for namespace in namespaces:
            body.append(f"{_INDENT}{format_property_key(namespace.name)}: {{")
            for name, bucket in namespace.operations.items():
                body.extend(self._render_manifest_entry(name, bucket))
            body.append(f"{_INDENT}}},")
        body.extend(["} as const", "", "export default NXQuery", ""])

        sections: List[str] = []
        if imports:
            sections.extend(imports)
            sections.append("")
        sections.extend(body)
        return "\n".join(sections)

    # ------------------------------------------------------------------
    # Internal helpers

    def _render_key_entry(self, namespace: str, name: str, bucket: OperationBucket) -> List[str]:
        if bucket.query is None and bucket.mutation is None:
            return []
        include_kind = bucket.is_paired
        lines = [f"{_INDENT}{format_property_key(name)}: {{"]
        if bucket.query is not None:
            lines.append(self._render_query_key(bucket.query, namespace, name, include_kind))
        if bucket.mutation is not None:
            lines.append(self._render_mutation_key(namespace, name, include_kind))
        lines.append(f"{_INDENT}}},")
        return lines

    @staticmethod
    def _render_query_key(
        op: OperationDescriptor, namespace: str, name: str, include_kind: bool
    ) -> str:
        param = op.param_name or (DEFAULT_PARAM_NAME if op.has_params else None)
        # Only the exported Args type is imported into the key table.
        declared_type = op.args_type_name
        signature = ""
        if param:
            signature = f"{param}: {declared_type}" if declared_type else param
        segments = [quote(namespace), quote(name)]
        if include_kind:
            segments.append(quote(OperationKind.QUERY.value))
        if param:
            segments.append(param)
        return f"{_INDENT * 2}query: ({signature}) => [{', '.join(segments)}] as const,"

    @staticmethod
    def _render_mutation_key(namespace: str, name: str, include_kind: bool) -> str:
        segments = [quote(namespace), quote(name)]
        if include_kind:
            segments.append(quote(OperationKind.MUTATION.value))
        return f"{_INDENT * 2}mutation: [{', '.join(segments)}] as const,"

    @staticmethod
    def _render_manifest_entry(name: str, bucket: OperationBucket) -> List[str]:
        key = format_property_key(name)
        if bucket.query is not None and bucket.mutation is not None:
            return [
                f"{_INDENT * 2}{key}: {{",
                f"{_INDENT * 3}query: {bucket.query.alias},",
                f"{_INDENT * 3}mutation: {bucket.mutation.alias},",
                f"{_INDENT * 2}}},",
            ]
        op: Optional[OperationDescriptor] = bucket.query or bucket.mutation
        if op is None:
            return []
        return [f"{_INDENT * 2}{key}: {op.alias},"]

    @staticmethod
    def _check_operation_aliases(namespaces: Sequence[NamespaceModel]) -> None:
        seen: Dict[str, OperationDescriptor] = {}
        for namespace in namespaces:
            for op in namespace.descriptors():
                previous = seen.setdefault(op.alias, op)
                if previous is not op:
                    raise AliasCollisionError(op.alias, str(previous.source_path), str(op.source_path))

    @staticmethod
    def _namespace_aliases(namespaces: Sequence[NamespaceModel]) -> Dict[str, str]:
        aliases: Dict[str, str] = {}
        owners: Dict[str, str] = {}
        for namespace in namespaces:
            alias = namespace_keys_alias(namespace.name)
            owner = owners.setdefault(alias, namespace.name)
            if owner != namespace.name:
                raise AliasCollisionError(alias, f"namespace '{owner}'", f"namespace '{namespace.name}'")
            aliases[namespace.name] = alias
        return aliases


__all__ = ["Renderer"]
