"""Tests for the context_builder module."""

import pytest

from rustgen.context_builder import build_context, format_path, parse_params
from rustgen.errors import ParseError
from rustgen.schema_parser import INT64, TEXT_REF, Array, Named, Option


def _op(parameters=(), responses=None, operation_id=None):
    op = {"parameters": list(parameters), "responses": responses or {"200": {"description": "OK"}}}
    if operation_id:
        op["operationId"] = operation_id
    return op


def _path_param(name):
    return {"name": name, "in": "path", "required": True, "type": "string"}


class TestPathTemplates:
    """Test placeholder extraction and substitution."""

    def test_parse_params_in_order(self):
        path = "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}/vms/{vmName}"
        assert parse_params(path) == ["subscriptionId", "resourceGroupName", "vmName"]

    def test_format_path(self):
        assert format_path("/pets/{petId}/toys/{toyId}") == "/pets/{}/toys/{}"

    def test_substitution_reproduces_path(self):
        path = "/a/{x}/b/{y}/c"
        values = {"x": "1", "y": "two"}
        filled = format_path(path).format(*[values[n] for n in parse_params(path)])
        assert filled == "/a/1/b/two/c"

    def test_no_placeholders(self):
        assert parse_params("/pets") == []
        assert format_path("/pets") == "/pets"


class TestPetstoreContext:
    """Build functions for the shared petstore document."""

    @pytest.fixture(autouse=True)
    def _ctx(self, petstore_resolver):
        self.ctx = build_context(petstore_resolver)
        self.funcs = {f["name"]: f for f in self.ctx["functions"]}

    def test_function_count(self):
        assert self.ctx["function_count"] == 3
        assert list(self.funcs) == ["pets_list", "pets_create", "pets_get"]

    def test_synthesized_name_and_path_arg(self):
        func = self.funcs["pets_get"]
        assert func["operation_id"] is None
        assert func["path_args"] == ["pet_id"]
        assert [(p["name"], p["wire_name"]) for p in func["params"]] == [("pet_id", "petId")]
        assert func["params"][0]["type"] == TEXT_REF
        assert func["returns"] == Named("Pet")

    def test_query_parameters(self):
        func = self.funcs["pets_list"]
        assert [(p["name"], p["type"]) for p in func["params"]] == [
            ("limit", Option(INT64)),
            ("api_version", TEXT_REF),
        ]
        assert [p["wire_name"] for p in func["query"]] == ["limit", "api-version"]
        assert func["returns"] == Named("Pets")

    def test_body_parameter_and_unit_result(self):
        func = self.funcs["pets_create"]
        assert func["body"]["name"] == "pet"
        assert func["body"]["type"] == Named("Pet")
        assert func["returns"] is None


class TestFunctionArguments:
    """Test argument ordering and parameter sources."""

    def test_path_arguments_follow_template_order(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {
            "/a/{first}/b/{second}": {"get": _op(
                [{"name": "q", "in": "query", "type": "string"}, _path_param("second"), _path_param("first")],
                operation_id="Get",
            )},
        }}})
        (func,) = build_context(resolver)["functions"]
        assert func["path_args"] == ["first", "second"]
        assert [p["name"] for p in func["params"]] == ["first", "second", "q"]
        assert func["path_format"] == "/a/{}/b/{}"

    def test_path_level_parameters_merged(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {
            "/things/{id}": {
                "parameters": [_path_param("id"), {"name": "v", "in": "query", "type": "string"}],
                "get": _op([{"name": "v", "in": "query", "required": True, "type": "integer"}]),
            },
        }}})
        (func,) = build_context(resolver)["functions"]
        assert [(p["name"], p["type"]) for p in func["params"]] == [("id", TEXT_REF), ("v", INT64)]

    def test_undeclared_placeholder(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {"/things/{id}": {"get": _op()}}}})
        with pytest.raises(ParseError, match="'id'"):
            build_context(resolver)

    def test_repeated_placeholder_single_argument(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {
            "/a/{x}/b/{x}": {"get": _op([_path_param("x")])},
        }}})
        (func,) = build_context(resolver)["functions"]
        assert func["path_args"] == ["x", "x"]
        assert [p["name"] for p in func["params"]] == ["x"]

    def test_configuration_name_reserved(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {
            "/c": {"get": _op([{"name": "configuration", "in": "query", "type": "string"}])},
        }}})
        (func,) = build_context(resolver)["functions"]
        assert func["params"][0]["name"] == "configuration_2"
        assert func["params"][0]["wire_name"] == "configuration"

    def test_body_locals_reserved(self, make_resolver):
        """Arguments never shadow the locals every generated function binds."""
        resolver = make_resolver({"a.json": {"paths": {
            "/c/{req}": {"get": _op([
                _path_param("req"),
                {"name": "client", "in": "query", "required": True, "type": "string"},
                {"name": "uri_str", "in": "header", "type": "string"},
            ])},
        }}})
        (func,) = build_context(resolver)["functions"]
        assert [(p["name"], p["wire_name"]) for p in func["params"]] == [
            ("req_2", "req"),
            ("client_2", "client"),
            ("uri_str_2", "uri_str"),
        ]
        assert func["path_args"] == ["req_2"]

    def test_collection_formats(self, make_resolver):
        def array_param(name, fmt=None):
            param = {"name": name, "in": "query", "type": "array", "items": {"type": "string"}}
            if fmt:
                param["collectionFormat"] = fmt
            return param

        resolver = make_resolver({"a.json": {"paths": {"/q": {"get": _op([
            array_param("plain"),
            array_param("piped", "pipes"),
            array_param("repeated", "multi"),
            {"name": "scalar", "in": "query", "type": "string"},
        ])}}}})
        (func,) = build_context(resolver)["functions"]
        assert [p["collection"] for p in func["query"]] == [
            {"multi": False, "separator": ","},
            {"multi": False, "separator": "|"},
            {"multi": True, "separator": None},
            None,
        ]

    def test_unknown_collection_format(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {"/q": {"get": _op([
            {"name": "ids", "in": "query", "type": "array", "items": {"type": "string"},
             "collectionFormat": "semicolons"},
        ])}}}})
        with pytest.raises(ParseError, match="collectionFormat"):
            build_context(resolver)

    def test_header_form_and_array_parameters(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {"/u": {"post": _op([
            {"name": "x-ms-client-request-id", "in": "header", "type": "string"},
            {"name": "file", "in": "formData", "required": True, "type": "string"},
            {"name": "ids", "in": "query", "required": True, "type": "array", "items": {"type": "integer"}},
        ])}}}})
        (func,) = build_context(resolver)["functions"]
        assert [p["name"] for p in func["headers"]] == ["x_ms_client_request_id"]
        assert [p["name"] for p in func["form"]] == ["file"]
        assert func["query"][0]["type"] == Array(INT64)
        assert func["body"] is None

    def test_non_verb_keys_ignored(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {"/x": {
            "parameters": [],
            "x-ms-extension": {},
            "delete": _op(),
        }}}})
        (func,) = build_context(resolver)["functions"]
        assert func["name"] == "x_delete"
        assert func["verb"] == "delete"


class TestFunctionNames:
    """Test naming and deduplication."""

    def test_duplicate_operation_ids(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {
            "/a": {"get": _op(operation_id="Op_Get")},
            "/b": {"get": _op(operation_id="Op_Get"), "put": _op(operation_id="Op_Get")},
        }}})
        names = [f["name"] for f in build_context(resolver)["functions"]]
        assert names == ["op_get", "op_get_get", "op_get_put"]
        assert len(set(names)) == len(names)

    def test_verb_order_follows_document(self, make_resolver):
        resolver = make_resolver({"a.json": {"paths": {
            "/r": {"patch": _op(), "get": _op(), "delete": _op()},
        }}})
        assert [f["verb"] for f in build_context(resolver)["functions"]] == ["patch", "get", "delete"]

    def test_only_input_documents(self, make_resolver):
        resolver = make_resolver({
            "a.json": {"paths": {"/a": {"get": _op(responses={
                "200": {"schema": {"$ref": "b.json#/definitions/B"}},
            })}}},
            "b.json": {"paths": {"/b": {"get": _op()}}, "definitions": {"B": {"type": "object"}}},
        })
        ctx = build_context(resolver)
        assert [f["path"] for f in ctx["functions"]] == ["/a"]
        assert ctx["functions"][0]["returns"] == Named("B")
