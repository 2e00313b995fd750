"""Build the template context for the client artifact.

Walks every path and verb of the input documents and turns each operation
into a function definition: name, arguments, URL template and result type.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from .errors import CodegenError, ParseError
from .loader import Document
from .naming import build_function_name, deduplicate, member_identifier
from .resolver import ResolvedParameter, Resolver
from .schema_parser import parameter_type, response_type, uses_placeholder

logger = logging.getLogger(__name__)

PARAM_RE = re.compile(r"\{(\w+)\}")

# Swagger 2.0 operation keys of a path item
VERBS = ("get", "put", "post", "delete", "options", "head", "patch")

CONFIGURATION_ARG = "configuration"

# names bound in every generated function body; arguments must not shadow them
RESERVED_LOCALS = (
    CONFIGURATION_ARG,
    "client",
    "uri_str",
    "req_builder",
    "req",
    "res",
    "form_params",
)

# collectionFormat -> separator; "multi" repeats the key instead
COLLECTION_SEPARATORS = {
    "csv": ",",
    "ssv": " ",
    "tsv": "\t",
    "pipes": "|",
}


def parse_params(path: str) -> list[str]:
    """Placeholder names of a path template, left to right."""
    return PARAM_RE.findall(path)


def format_path(path: str) -> str:
    """Path template with every placeholder replaced by '{}'."""
    return PARAM_RE.sub("{}", path)


def _merge_parameters(
    path_level: list[ResolvedParameter], operation_level: list[ResolvedParameter],
) -> list[ResolvedParameter]:
    """Operation parameters replace path-level ones with the same name and location."""
    overridden = {(p.name, p.location) for p in operation_level}
    kept = [p for p in path_level if (p.name, p.location) not in overridden]
    return kept + operation_level


def _collection(param: ResolvedParameter) -> dict[str, Any] | None:
    """How an array argument goes on the wire; None for scalars."""
    if param.type != "array":
        return None
    fmt = param.collection_format
    if fmt == "multi":
        return {"multi": True, "separator": None}
    if fmt not in COLLECTION_SEPARATORS:
        raise ParseError(param.doc_path, f"unsupported collectionFormat {fmt!r} of {param.name!r}")
    return {"multi": False, "separator": COLLECTION_SEPARATORS[fmt]}


def _build_param(resolver: Resolver, param: ResolvedParameter, name: str) -> dict[str, Any]:
    return {
        "name": name,
        "wire_name": param.name,
        "location": param.location,
        "required": param.required,
        "type": parameter_type(resolver, param),
        "collection": _collection(param),
    }


def build_function(
    resolver: Resolver,
    doc_path: str,
    path: str,
    path_item: Mapping[str, Any],
    verb: str,
) -> dict[str, Any]:
    """Build one function definition for a (path, verb) pair."""
    operation = path_item[verb]
    name = build_function_name(verb, path, operation.get("operationId"))

    params = _merge_parameters(
        resolver.resolve_parameters(doc_path, path_item.get("parameters", ())),
        resolver.resolve_parameters(doc_path, operation.get("parameters", ())),
    )
    identifiers = deduplicate(
        [member_identifier(n) for n in RESERVED_LOCALS] + [member_identifier(p.name) for p in params]
    )[len(RESERVED_LOCALS):]
    built = [_build_param(resolver, p, i.name) for p, i in zip(params, identifiers)]
    by_name = {b["wire_name"]: b for b in reversed(built)}
    by_name.update({b["wire_name"]: b for b in built if b["location"] == "path"})

    path_args: list[dict[str, Any]] = []
    for placeholder in parse_params(path):
        if placeholder not in by_name:
            raise ParseError(doc_path, f"path parameter {placeholder!r} of {verb.upper()} {path} is not declared")
        path_args.append(by_name[placeholder])
    positional = list({id(a): a for a in path_args}.values())
    others = [b for b in built if not any(b is a for a in positional)]

    return {
        "name": name,
        "operation_id": operation.get("operationId"),
        "verb": verb,
        "path": path,
        "path_format": format_path(path),
        "path_args": [a["name"] for a in path_args],
        "params": positional + others,
        "query": [p for p in others if p["location"] == "query"],
        "headers": [p for p in others if p["location"] == "header"],
        "body": next((p for p in others if p["location"] == "body"), None),
        "form": [p for p in others if p["location"] == "formData"],
        "returns": response_type(resolver, doc_path, operation.get("responses", {}), name),
    }


def _deduplicate_function_names(functions: list[dict[str, Any]]) -> None:
    """Ensure all function names are unique by appending the verb, then a counter."""
    seen: set[str] = set()
    for func in functions:
        name = func["name"]
        if name in seen:
            func["name"] = f"{name}_{func['verb']}"
        seen.add(name)

    final_seen: dict[str, int] = {}
    for func in functions:
        name = func["name"]
        if name in final_seen:
            final_seen[name] += 1
            func["name"] = f"{name}_{final_seen[name]}"
            logger.warning("Duplicate function %s for %s %s", name, func["verb"].upper(), func["path"])
        else:
            final_seen[name] = 1


def build_functions(resolver: Resolver, doc: Document) -> list[dict[str, Any]]:
    functions = []
    for path, path_item in doc.paths.items():
        for verb in path_item:
            if verb not in VERBS:
                continue
            try:
                functions.append(build_function(resolver, doc.path, path, path_item, verb))
            except CodegenError as err:
                err.locate(f"{doc.path} {verb.upper()} {path}")
                raise
    return functions


def build_context(resolver: Resolver) -> dict[str, Any]:
    """Build the full template context for the client artifact."""
    functions: list[dict[str, Any]] = []
    for doc in resolver.store.inputs():
        functions.extend(build_functions(resolver, doc))

    _deduplicate_function_names(functions)

    uses_unknown = any(
        uses_placeholder(tp)
        for func in functions
        for tp in [func["returns"]] + [p["type"] for p in func["params"]]
    )
    return {
        "functions": functions,
        "function_count": len(functions),
        "uses_unknown": uses_unknown,
    }
