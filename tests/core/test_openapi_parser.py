"""Tests for OpenAPI Parser module."""

import pytest

from swagger_jmeter.core.openapi_parser import OpenAPIParser
from swagger_jmeter.core.ref_resolver import RefResolver
from swagger_jmeter.exceptions import (
    CompileError,
    InvalidSpecShapeException,
    MalformedSpecException,
    MissingPathsException,
    MissingVersionMarkerException,
    UnresolvableReferenceException,
)


@pytest.fixture
def parser() -> OpenAPIParser:
    """Create OpenAPIParser instance for testing."""
    return OpenAPIParser()


class TestLoad:
    """Test suite for spec text normalization."""

    def test_load_json(self, parser: OpenAPIParser, users_spec_json: str):
        """Test JSON text parses without a filename hint."""
        spec = parser.load(users_spec_json)

        assert spec["openapi"] == "3.0.0"
        assert "/users" in spec["paths"]

    def test_load_yaml_without_hint(self, parser: OpenAPIParser, users_spec_yaml: str):
        """Test YAML text parses through the secondary encoding."""
        spec = parser.load(users_spec_yaml)

        assert spec["openapi"] == "3.0.0"

    def test_load_yaml_with_hint(self, parser: OpenAPIParser, users_spec_yaml: str):
        """Test .yaml extension parses YAML first."""
        spec = parser.load(users_spec_yaml, filename="openapi.yaml")

        assert list(spec["paths"]["/users"].keys()) == ["get", "post"]

    def test_load_json_with_yml_hint(self, parser: OpenAPIParser, users_spec_json: str):
        """Test JSON text still parses when the filename says YAML."""
        spec = parser.load(users_spec_json, filename="API.YML")

        assert spec["info"]["title"] == "Users API"

    def test_load_malformed(self, parser: OpenAPIParser):
        """Test text that is neither JSON nor YAML."""
        with pytest.raises(MalformedSpecException) as exc_info:
            parser.load('{"openapi": "3.0.0", "paths": [')

        assert "Invalid JSON or YAML format" in str(exc_info.value)

    def test_load_scalar_document(self, parser: OpenAPIParser):
        """Test plain text parses as a YAML scalar and is rejected."""
        with pytest.raises(InvalidSpecShapeException):
            parser.load("just some text")

    def test_load_sequence_document(self, parser: OpenAPIParser):
        """Test a top-level sequence is rejected."""
        with pytest.raises(InvalidSpecShapeException):
            parser.load('["openapi", "paths"]')

    def test_load_empty_document(self, parser: OpenAPIParser):
        """Test empty text is rejected as not a mapping."""
        with pytest.raises(InvalidSpecShapeException):
            parser.load("")

    def test_load_missing_version_marker(self, parser: OpenAPIParser):
        """Test a mapping without openapi/swagger field."""
        with pytest.raises(MissingVersionMarkerException) as exc_info:
            parser.load('{"info": {"title": "x"}, "paths": {}}')

        assert "'openapi' or 'swagger'" in str(exc_info.value)

    def test_load_missing_paths(self, parser: OpenAPIParser):
        """Test a versioned document without paths."""
        with pytest.raises(MissingPathsException):
            parser.load('{"openapi": "3.0.0"}')

    def test_load_paths_not_mapping(self, parser: OpenAPIParser):
        """Test paths declared as a sequence."""
        with pytest.raises(MissingPathsException):
            parser.load("swagger: '2.0'\npaths:\n  - /users\n")

    def test_errors_share_compile_error_base(self, parser: OpenAPIParser):
        """Test all normalizer errors can be caught as CompileError."""
        for text in ["{[", "[]", "{}", '{"openapi": "3.1.0"}']:
            with pytest.raises(CompileError):
                parser.load(text)


class TestDeriveBaseUrl:
    """Test suite for advisory base URL derivation."""

    def test_first_server(self, parser: OpenAPIParser):
        """Test first server URL wins."""
        spec = {"servers": [{"url": "https://a.example.com"}, {"url": "http://localhost"}]}

        assert parser.derive_base_url(spec) == "https://a.example.com"

    def test_server_variables(self, parser: OpenAPIParser):
        """Test server variables are replaced by defaults."""
        spec = {
            "servers": [
                {
                    "url": "https://{env}.example.com:{port}/api",
                    "variables": {"env": {"default": "staging"}, "port": {"default": "8443"}},
                }
            ]
        }

        assert parser.derive_base_url(spec) == "https://staging.example.com:8443/api"

    def test_swagger_host_with_schemes(self, parser: OpenAPIParser):
        """Test scheme://host + basePath uses the first scheme."""
        spec = {"host": "petstore.swagger.io", "basePath": "/v2", "schemes": ["http", "https"]}

        assert parser.derive_base_url(spec) == "http://petstore.swagger.io/v2"

    def test_swagger_host_defaults_to_https(self, parser: OpenAPIParser):
        """Test missing schemes defaults to https without basePath."""
        assert parser.derive_base_url({"host": "api.example.com"}) == "https://api.example.com"

    def test_no_server_declaration(self, parser: OpenAPIParser):
        """Test documents without servers or host give None."""
        assert parser.derive_base_url({"openapi": "3.0.0", "paths": {}}) is None
        assert parser.derive_base_url({"servers": []}) is None


class TestExtractOperations:
    """Test suite for operation extraction."""

    def _extract(self, parser: OpenAPIParser, spec: dict):
        return parser.extract_operations(spec, RefResolver(spec))

    def test_all_seven_methods_uppercased(self, parser: OpenAPIParser):
        """Test every recognized method key becomes an uppercase descriptor."""
        methods = ["get", "post", "put", "delete", "patch", "head", "options"]
        spec = {"paths": {"/items": {m: {} for m in methods}}}

        operations = self._extract(parser, spec)

        assert [op.method for op in operations] == [m.upper() for m in methods]

    def test_document_order_preserved(self, parser: OpenAPIParser):
        """Test ordering follows path keys then method keys."""
        spec = {
            "paths": {
                "/b": {"post": {}, "get": {}},
                "/a": {"delete": {}},
            }
        }

        operations = self._extract(parser, spec)

        assert [(op.path, op.method) for op in operations] == [
            ("/b", "POST"),
            ("/b", "GET"),
            ("/a", "DELETE"),
        ]

    def test_non_method_keys_skipped(self, parser: OpenAPIParser):
        """Test parameters, summary and extension keys are ignored."""
        spec = {
            "paths": {
                "/users/{id}": {
                    "summary": "User item",
                    "parameters": [{"name": "id", "in": "path"}],
                    "x-internal": True,
                    "trace": {},
                    "get": {"operationId": "getUser"},
                },
                "/empty": {"parameters": []},
                "/broken": "not a path item",
            }
        }

        operations = self._extract(parser, spec)

        assert len(operations) == 1
        assert operations[0].operation_id == "getUser"

    def test_uppercase_method_key(self, parser: OpenAPIParser):
        """Test method key casing is normalized."""
        operations = self._extract(parser, {"paths": {"/x": {"GET": {}}}})

        assert operations[0].method == "GET"

    def test_metadata_fields(self, parser: OpenAPIParser):
        """Test operationId, summary and tags are carried over."""
        spec = {
            "paths": {
                "/users": {
                    "get": {"operationId": "listUsers", "summary": "List", "tags": ["users", "admin"]},
                    "post": {},
                }
            }
        }

        listed, created = self._extract(parser, spec)

        assert listed.operation_id == "listUsers"
        assert listed.summary == "List"
        assert listed.tags == ("users", "admin")
        assert created.operation_id is None
        assert created.summary is None
        assert created.tags == ()

    def test_request_body_schema_resolved(self, parser: OpenAPIParser, users_spec_yaml: str):
        """Test the JSON body schema is resolved through $ref."""
        spec = parser.load(users_spec_yaml)

        get_op, post_op = self._extract(parser, spec)

        assert get_op.request_body_schema is None
        assert post_op.request_body_schema["type"] == "object"
        assert post_op.schema_refs == frozenset({"#/components/schemas/User"})
        assert post_op.needs_body

    def test_non_json_body_ignored(self, parser: OpenAPIParser):
        """Test only application/json content is used."""
        spec = {
            "paths": {
                "/upload": {
                    "post": {
                        "requestBody": {
                            "content": {"multipart/form-data": {"schema": {"type": "object"}}}
                        }
                    }
                }
            }
        }

        operations = self._extract(parser, spec)

        assert operations[0].request_body_schema is None
        assert not operations[0].needs_body

    def test_request_body_ref(self, parser: OpenAPIParser):
        """Test requestBody itself may be a reference."""
        spec = {
            "paths": {"/x": {"put": {"requestBody": {"$ref": "#/components/requestBodies/X"}}}},
            "components": {
                "requestBodies": {
                    "X": {"content": {"application/json": {"schema": {"type": "string"}}}}
                }
            },
        }

        operations = self._extract(parser, spec)

        assert operations[0].request_body_schema == {"type": "string"}

    def test_swagger2_body_parameter(self, parser: OpenAPIParser, swagger2_spec_yaml: str):
        """Test Swagger 2.0 in: body parameter provides the body schema."""
        spec = parser.load(swagger2_spec_yaml, filename="swagger.yaml")

        add_pet, get_pet = self._extract(parser, spec)

        assert add_pet.request_body_schema["properties"]["status"]["enum"][0] == "available"
        assert get_pet.path == "/pet/{petId}"
        assert get_pet.request_body_schema is None

    def test_unresolvable_body_ref(self, parser: OpenAPIParser):
        """Test a wrong body pointer is an error, not an empty schema."""
        spec = {
            "paths": {
                "/x": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/Missing"}
                                }
                            }
                        }
                    }
                }
            },
            "components": {"schemas": {}},
        }

        with pytest.raises(UnresolvableReferenceException) as exc_info:
            self._extract(parser, spec)

        assert exc_info.value.segment == "Missing"

    def test_cyclic_body_ref_chain(self, parser: OpenAPIParser):
        """Test a reference chain that loops stays unresolved."""
        spec = {
            "paths": {
                "/x": {
                    "post": {
                        "requestBody": {
                            "content": {"application/json": {"schema": {"$ref": "#/defs/A"}}}
                        }
                    }
                }
            },
            "defs": {"A": {"$ref": "#/defs/B"}, "B": {"$ref": "#/defs/A"}},
        }

        operations = self._extract(parser, spec)

        assert operations[0].request_body_schema == {"$ref": "#/defs/A"}
        assert operations[0].schema_refs == frozenset()


class TestParse:
    """Test suite for full parse results."""

    def test_parse_metadata(self, parser: OpenAPIParser, users_spec_yaml: str):
        """Test parse returns title, version, type and base URL."""
        result = parser.parse(users_spec_yaml, filename="openapi.yml")

        assert result["title"] == "Users API"
        assert result["version"] == "1.0.0"
        assert result["spec_type"] == "openapi"
        assert result["spec_version"] == "3.0.0"
        assert result["base_url"] == "http://localhost:8000/api"
        assert len(result["operations"]) == 2

    def test_parse_swagger(self, parser: OpenAPIParser, swagger2_spec_yaml: str):
        """Test Swagger 2.0 documents are recognized."""
        result = parser.parse(swagger2_spec_yaml)

        assert result["spec_type"] == "swagger"
        assert result["spec_version"] == "2.0"
        assert result["base_url"] == "http://petstore.swagger.io/v2"

    def test_parse_without_info(self, parser: OpenAPIParser):
        """Test info is optional."""
        result = parser.parse('{"openapi": "3.0.0", "paths": {}}')

        assert result["title"] == ""
        assert result["operations"] == []
