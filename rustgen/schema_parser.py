"""Map resolved schemas onto target type descriptors.

Handles:
- $ref properties       -> Named (never inlined)
- integer / number      -> 32 or 64 bit depending on format
- string / boolean      -> text / bool
- array                 -> Array of the mapped item type
- object                -> dynamic JSON value
- inline string enums   -> Named type scoped under the owning record
- no type at all        -> UnknownType diagnostic + placeholder
- required / optional   -> Option wrapper for non-required fields
- configured overrides  -> Boxed, for self- and mutually-referential types
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import MissingArrayItems, UnknownType
from .naming import member_name, type_name
from .resolver import ResolvedParameter, ResolvedSchema, Resolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Primitive:
    kind: str


@dataclass(frozen=True)
class Array:
    item: TypeDescriptor


@dataclass(frozen=True)
class Named:
    name: str
    # module of the owning record, for nested enumerations
    scope: str | None = None


@dataclass(frozen=True)
class Boxed:
    inner: TypeDescriptor


@dataclass(frozen=True)
class Option:
    inner: TypeDescriptor


TypeDescriptor = Primitive | Array | Named | Boxed | Option

INT32 = Primitive("int32")
INT64 = Primitive("int64")
FLOAT32 = Primitive("float32")
FLOAT64 = Primitive("float64")
TEXT = Primitive("text")
TEXT_REF = Primitive("text_ref")
BOOL = Primitive("bool")
DYNAMIC = Primitive("dynamic")
UNKNOWN = Primitive("unknown")


def _primitive(schema_type: str | None, fmt: str | None) -> Primitive | None:
    if schema_type == "integer":
        return INT32 if fmt == "int32" else INT64
    if schema_type == "number":
        return FLOAT32 if fmt == "float" else FLOAT64
    if schema_type == "string":
        return TEXT
    if schema_type == "boolean":
        return BOOL
    if schema_type == "object":
        return DYNAMIC
    return None


def require(is_required: bool, tp: TypeDescriptor) -> TypeDescriptor:
    """Wrap a type in Option unless it is required."""
    return tp if is_required else Option(tp)


def is_array_schema(schema: ResolvedSchema) -> bool:
    return schema.type == "array"


def is_enum_schema(schema: ResolvedSchema) -> bool:
    """A top-level string enumeration rather than a record."""
    return schema.type == "string" and bool(schema.enum_values) and not schema.properties


def type_for_schema(
    resolver: Resolver,
    doc_path: str,
    schema: Mapping[str, Any],
    name: str,
) -> TypeDescriptor:
    """Type of a schema used in place: array items, parameters, responses.

    Raises UnknownType when the schema declares no usable type.
    """
    ref = schema.get("$ref")
    if isinstance(ref, str):
        target = resolver.resolve_schema_ref(doc_path, ref)
        return Named(type_name(target.ref_key.name))
    schema_type = schema.get("type")
    if schema_type == "array":
        items = schema.get("items")
        if not isinstance(items, Mapping):
            raise MissingArrayItems(doc_path, name)
        return Array(type_for_schema(resolver, doc_path, items, name))
    tp = _primitive(schema_type, schema.get("format"))
    if tp is None:
        raise UnknownType(doc_path, name)
    return tp


def alias_item_type(resolver: Resolver, schema: ResolvedSchema, name: str) -> TypeDescriptor:
    """Item type of a top-level array schema."""
    items = schema.items
    if not isinstance(items, Mapping):
        raise MissingArrayItems(schema.doc_path, name)
    try:
        return type_for_schema(resolver, schema.doc_path, items, name)
    except UnknownType as err:
        logger.warning("%s", err)
        return UNKNOWN


def property_type(
    resolver: Resolver,
    owner_path: str,
    owner_name: str,
    property_name: str,
    prop: ResolvedSchema,
    box_properties: Collection[tuple[str, str, str]] = (),
    enum_name: str | None = None,
) -> TypeDescriptor:
    """Type of one record field, before the required/optional rule."""
    if prop.ref_key is not None:
        tp: TypeDescriptor = Named(type_name(prop.ref_key.name))
    elif prop.enum_values:
        tp = Named(enum_name or type_name(property_name), scope=member_name(owner_name))
    else:
        try:
            tp = type_for_schema(resolver, prop.doc_path, prop.schema, f"{owner_name}.{property_name}")
        except UnknownType as err:
            logger.warning("UnknownType %s %s %s", owner_path, owner_name, property_name)
            logger.debug("%s", err)
            tp = UNKNOWN
    if (owner_path, owner_name, property_name) in box_properties:
        tp = Boxed(tp)
    return tp


def parameter_type(resolver: Resolver, param: ResolvedParameter) -> TypeDescriptor:
    """Type of an operation argument, Option-wrapped unless required."""
    try:
        if param.type == "string":
            tp: TypeDescriptor = TEXT_REF
        elif param.type == "integer":
            tp = INT64
        elif param.type == "number":
            tp = FLOAT64
        elif param.type == "boolean":
            tp = BOOL
        elif param.type == "array":
            if not isinstance(param.items, Mapping):
                raise MissingArrayItems(param.doc_path, param.name)
            tp = Array(type_for_schema(resolver, param.doc_path, param.items, param.name))
        elif param.type is None and param.schema is not None:
            if param.schema.ref_key is not None:
                tp = Named(type_name(param.schema.ref_key.name))
            else:
                tp = type_for_schema(resolver, param.schema.doc_path, param.schema.schema, param.name)
        else:
            raise UnknownType(param.doc_path, param.name)
    except UnknownType as err:
        logger.warning("%s", err)
        tp = UNKNOWN
    return require(param.required, tp)


def response_type(
    resolver: Resolver,
    doc_path: str,
    responses: Mapping[str, Any],
    name: str,
) -> TypeDescriptor | None:
    """Type of the first response carrying a schema; None means no value."""
    for status, response in responses.items():
        path, body = resolver.resolve_response(doc_path, response)
        schema = body.get("schema")
        if not isinstance(schema, Mapping):
            continue
        try:
            return type_for_schema(resolver, path, schema, f"{name} {status}")
        except UnknownType as err:
            logger.warning("%s", err)
            return UNKNOWN
    return None


def uses_placeholder(tp: TypeDescriptor | None) -> bool:
    """Whether a descriptor contains the UnknownType placeholder."""
    if tp is None:
        return False
    if isinstance(tp, Primitive):
        return tp == UNKNOWN
    if isinstance(tp, Array):
        return uses_placeholder(tp.item)
    if isinstance(tp, (Boxed, Option)):
        return uses_placeholder(tp.inner)
    return False
