"""Build the template context for the type-definitions artifact.

One declaration per top-level definition, in document load order and then
source order:
- array schemas          -> type alias of Array<Item>
- string enum schemas    -> top-level enum
- everything else        -> record, with nested enums in a module named
                            after the record
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from typing import Any

from .errors import CodegenError
from .naming import (
    deduplicate,
    member_identifier,
    member_name,
    type_identifier,
    type_name,
)
from .resolver import ResolvedSchema, Resolver
from .schema_parser import (
    Array,
    Named,
    alias_item_type,
    is_array_schema,
    is_enum_schema,
    property_type,
    require,
    uses_placeholder,
)

logger = logging.getLogger(__name__)


def build_variants(values: list[str]) -> list[dict[str, Any]]:
    """Enum variants with rename metadata where the literal was altered."""
    literals = list(dict.fromkeys(values))
    variants = deduplicate([type_identifier(v) for v in literals])
    return [{"name": v.name, "rename": v.rename} for v in variants]


def _merge_all_of(
    resolver: Resolver, schema: ResolvedSchema,
) -> tuple[dict[str, Any], set[str], list[str]]:
    """Collect properties, required names and flattened base types."""
    properties = dict(schema.properties)
    required = set(schema.required)
    bases: list[str] = []
    for member in schema.all_of:
        resolved = resolver.resolve_schema(schema.doc_path, member)
        if resolved.ref_key is not None:
            bases.append(resolved.ref_key.name)
            continue
        for prop_name, prop in resolved.properties.items():
            properties.setdefault(prop_name, prop)
        required.update(resolved.required)
    return properties, required, bases


def build_struct(
    resolver: Resolver,
    doc_path: str,
    name: str,
    schema: ResolvedSchema,
    box_properties: Collection[tuple[str, str, str]] = (),
) -> dict[str, Any]:
    """Build a record declaration and its nested enumerations."""
    properties, required, bases = _merge_all_of(resolver, schema)
    resolved = resolver.resolve_schema_map(schema.doc_path, properties)

    identifiers = deduplicate(
        [member_identifier(b) for b in bases]
        + [member_identifier(p) for p in resolved]
    )
    base_ids, prop_ids = identifiers[:len(bases)], identifiers[len(bases):]

    # nested enums share one module per record, so their names are siblings too
    enum_props = [p for p, s in resolved.items() if s.ref_key is None and s.enum_values]
    enum_names = {
        p: i.name for p, i in zip(enum_props, deduplicate([type_identifier(p) for p in enum_props]))
    }

    fields: list[dict[str, Any]] = []
    enums: list[dict[str, Any]] = []
    for base, identifier in zip(bases, base_ids):
        fields.append({
            "name": identifier.name,
            "rename": None,
            "original": base,
            "type": Named(type_name(base)),
            "optional": False,
            "flatten": True,
        })

    for (prop_name, prop), identifier in zip(resolved.items(), prop_ids):
        enum_name = enum_names.get(prop_name)
        tp = property_type(resolver, doc_path, name, prop_name, prop, box_properties, enum_name)
        if enum_name is not None:
            enums.append({
                "name": enum_name,
                "owner": type_name(name),
                "variants": build_variants(prop.enum_values),
            })
        is_required = prop_name in required
        fields.append({
            "name": identifier.name,
            "rename": identifier.rename,
            "original": prop_name,
            "type": require(is_required, tp),
            "optional": not is_required,
            "flatten": False,
        })

    return {
        "kind": "struct",
        "name": type_name(name),
        "original": name,
        "module": member_name(name),
        "fields": fields,
        "enums": enums,
    }


def build_declaration(
    resolver: Resolver,
    doc_path: str,
    name: str,
    schema: ResolvedSchema,
    box_properties: Collection[tuple[str, str, str]] = (),
) -> dict[str, Any]:
    if is_array_schema(schema):
        return {
            "kind": "alias",
            "name": type_name(name),
            "original": name,
            "type": Array(alias_item_type(resolver, schema, name)),
        }
    if is_enum_schema(schema):
        return {
            "kind": "enum",
            "name": type_name(name),
            "original": name,
            "variants": build_variants(schema.enum_values),
        }
    return build_struct(resolver, doc_path, name, schema, box_properties)


def _declaration_types(decl: dict[str, Any]) -> list[Any]:
    if decl["kind"] == "alias":
        return [decl["type"]]
    return [f["type"] for f in decl.get("fields", ())]


def build_models_context(
    resolver: Resolver,
    box_properties: Collection[tuple[str, str, str]] = (),
) -> dict[str, Any]:
    """Build the full template context for the models artifact."""
    declarations: list[dict[str, Any]] = []
    emitted: dict[str, str] = {}
    defined: set[tuple[str, str, str]] = set()

    for doc in resolver.store:
        for name, schema in resolver.resolve_definitions(doc.path).items():
            tname = type_name(name)
            if tname in emitted:
                logger.info(
                    "Skipping %s in %s: %s already defined in %s",
                    name, doc.path, tname, emitted[tname],
                )
                continue
            emitted[tname] = doc.path
            try:
                decl = build_declaration(resolver, doc.path, name, schema, box_properties)
            except CodegenError as err:
                err.locate(f"{doc.path} definitions/{name}")
                raise
            declarations.append(decl)
            defined.update(
                (doc.path, name, f["original"]) for f in decl.get("fields", ()) if not f["flatten"]
            )

    for file_path, schema_name, property_name in sorted(set(box_properties) - defined):
        logger.warning(
            "Box override %s %s %s matches no property", file_path, schema_name, property_name,
        )

    uses_unknown = any(
        uses_placeholder(tp)
        for decl in declarations
        for tp in _declaration_types(decl)
    )
    return {
        "declarations": declarations,
        "type_count": len(declarations),
        "uses_unknown": uses_unknown,
    }
