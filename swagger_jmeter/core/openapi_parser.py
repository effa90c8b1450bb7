"""OpenAPI specification parser for JMeter test plan compilation.

This module normalizes raw OpenAPI 3.x and Swagger 2.0 text (JSON or YAML)
into one in-memory document and extracts the ordered list of operations
the test plan exercises.
"""

import json
import re
from pathlib import PurePath
from typing import Any, Optional

import yaml

from swagger_jmeter.core.data_structures import HTTP_METHODS, OperationDescriptor
from swagger_jmeter.core.ref_resolver import RefResolver
from swagger_jmeter.exceptions import (
    InvalidSpecShapeException,
    MalformedSpecException,
    MissingPathsException,
    MissingVersionMarkerException,
)

# File extensions that make YAML the primary encoding
YAML_EXTENSIONS = (".yaml", ".yml")

# Request body media type used for synthesis
JSON_MEDIA_TYPE = "application/json"

_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")


class OpenAPIParser:
    """Parse OpenAPI 3.x and Swagger 2.0 documents and extract operations."""

    def parse(self, raw_text: str, filename: Optional[str] = None) -> dict[str, Any]:
        """Parse spec text and extract everything the compiler needs.

        Args:
            raw_text: Spec document text (JSON or YAML)
            filename: Optional file name used as encoding hint

        Returns:
            Dictionary with parsed spec data:
                {
                    "title": str,                  # info.title or ""
                    "version": str,                # info.version or ""
                    "spec_type": str,              # "openapi" or "swagger"
                    "spec_version": str,           # "3.0.3", "2.0", ...
                    "base_url": Optional[str],     # derived from servers/host
                    "operations": List[OperationDescriptor],
                    "spec": Dict                   # Full canonical document
                }

        Raises:
            MalformedSpecException: Neither JSON nor YAML parses
            InvalidSpecShapeException: Document is not a mapping
            MissingVersionMarkerException: No 'openapi'/'swagger' field
            MissingPathsException: No 'paths' mapping
            UnresolvableReferenceException: A body schema $ref is wrong
        """
        spec = self.load(raw_text, filename)
        resolver = RefResolver(spec)

        info = spec.get("info")
        if not isinstance(info, dict):
            info = {}

        spec_type = "openapi" if "openapi" in spec else "swagger"

        return {
            "title": str(info.get("title", "")),
            "version": str(info.get("version", "")),
            "spec_type": spec_type,
            "spec_version": str(spec[spec_type]),
            "base_url": self.derive_base_url(spec),
            "operations": self.extract_operations(spec, resolver),
            "spec": spec,
        }

    def load(self, raw_text: str, filename: Optional[str] = None) -> dict[str, Any]:
        """Parse raw text into a canonical document and check preconditions.

        The encoding hint comes from the filename extension: .yaml/.yml
        tries YAML first, anything else tries JSON first. The other
        encoding is always attempted as a fallback.

        Args:
            raw_text: Spec document text
            filename: Optional file name (e.g., "openapi.yaml")

        Returns:
            Parsed document as a dictionary

        Raises:
            MalformedSpecException: Neither encoding parses the text
            InvalidSpecShapeException: Parsed document is not a mapping
            MissingVersionMarkerException: No 'openapi' or 'swagger' field
            MissingPathsException: 'paths' missing or not a mapping

        Example:
            >>> parser = OpenAPIParser()
            >>> spec = parser.load('{"openapi": "3.0.0", "paths": {}}')
            >>> spec["openapi"]
            '3.0.0'
        """
        yaml_first = filename is not None and PurePath(filename).suffix.lower() in YAML_EXTENSIONS
        loaders = (
            [("YAML", _load_yaml), ("JSON", _load_json)]
            if yaml_first
            else [("JSON", _load_json), ("YAML", _load_yaml)]
        )

        errors = []
        spec: Any = None
        for label, loader in loaders:
            try:
                spec = loader(raw_text)
                break
            except (ValueError, yaml.YAMLError) as e:
                errors.append(f"{label}: {e}")
        else:
            raise MalformedSpecException(
                "Invalid JSON or YAML format. " + "; ".join(errors)
            )

        if not isinstance(spec, dict):
            raise InvalidSpecShapeException(
                f"Invalid specification format: expected a mapping at the document root, "
                f"got {type(spec).__name__}"
            )

        if "openapi" not in spec and "swagger" not in spec:
            raise MissingVersionMarkerException(
                "Not a valid OpenAPI/Swagger specification. "
                "Missing 'openapi' or 'swagger' field."
            )

        if not isinstance(spec.get("paths"), dict):
            raise MissingPathsException("No paths found in the specification")

        return spec

    def derive_base_url(self, spec: dict[str, Any]) -> Optional[str]:
        """Derive a default base URL from servers or host declarations.

        Preference order:
        1. First entry of 'servers' (OpenAPI 3.x), with server variables
           replaced by their defaults
        2. scheme://host + basePath (Swagger 2.0), scheme defaults to https
        3. None

        Args:
            spec: Canonical document

        Returns:
            Base URL string or None if the document declares no server

        Example:
            >>> parser = OpenAPIParser()
            >>> parser.derive_base_url({"host": "petstore.swagger.io", "basePath": "/v2"})
            'https://petstore.swagger.io/v2'
        """
        servers = spec.get("servers")
        if isinstance(servers, list) and servers:
            server = servers[0]
            if isinstance(server, dict) and server.get("url"):
                return self._expand_server_variables(
                    str(server["url"]), server.get("variables")
                )

        host = spec.get("host")
        if host:
            schemes = spec.get("schemes")
            scheme = schemes[0] if isinstance(schemes, list) and schemes else "https"
            base_path = spec.get("basePath") or ""
            return f"{scheme}://{host}{base_path}"

        return None

    def _expand_server_variables(self, url: str, variables: Any) -> str:
        """Replace {name} in a server URL with the variable's default."""
        if not isinstance(variables, dict):
            return url

        def replace_variable(match: re.Match) -> str:
            variable = variables.get(match.group(1))
            if isinstance(variable, dict) and "default" in variable:
                return str(variable["default"])
            return match.group(0)

        return _SERVER_VARIABLE.sub(replace_variable, url)

    def extract_operations(
        self, spec: dict[str, Any], resolver: RefResolver
    ) -> list[OperationDescriptor]:
        """Extract operations from 'paths' in document order.

        Keys under a path item that are not HTTP methods (parameters,
        summary, servers, extensions) are skipped, as are path items and
        operations that are not mappings.

        Args:
            spec: Canonical document
            resolver: Resolver bound to the same document

        Returns:
            List of OperationDescriptor, ordered by path then method key

        Raises:
            UnresolvableReferenceException: A body schema $ref is wrong

        Example:
            >>> parser = OpenAPIParser()
            >>> spec = {"paths": {"/users": {"get": {"summary": "Get users"}}}}
            >>> ops = parser.extract_operations(spec, RefResolver(spec))
            >>> ops[0].method, ops[0].summary
            ('GET', 'Get users')
        """
        operations = []

        for path, path_item in spec["paths"].items():
            if not isinstance(path_item, dict):
                continue

            for method_key, operation in path_item.items():
                method = str(method_key).upper()
                if method not in HTTP_METHODS or not isinstance(operation, dict):
                    continue

                schema, refs = self._extract_body_schema(operation, resolver)

                tags = operation.get("tags")
                operations.append(
                    OperationDescriptor(
                        path=str(path),
                        method=method,
                        operation_id=_optional_str(operation.get("operationId")),
                        summary=_optional_str(operation.get("summary")),
                        tags=tuple(str(t) for t in tags) if isinstance(tags, list) else (),
                        request_body_schema=schema,
                        schema_refs=refs,
                    )
                )

        return operations

    def _extract_body_schema(
        self, operation: dict[str, Any], resolver: RefResolver
    ) -> tuple[Optional[dict[str, Any]], frozenset]:
        """Find and resolve the JSON request body schema of an operation.

        OpenAPI 3.x: requestBody.content["application/json"].schema
        Swagger 2.0: schema of the first parameter with in: body

        Returns:
            Tuple of (schema, pointers followed). Schema is None when the
            operation has no JSON body. A schema whose reference chain
            loops back on itself is returned unresolved with no pointers,
            so synthesis treats it as opaque.
        """
        raw_schema = None

        if "requestBody" in operation:
            request_body, _ = resolver.resolve(operation["requestBody"])
            if isinstance(request_body, dict):
                content = request_body.get("content")
                if isinstance(content, dict):
                    media_type = content.get(JSON_MEDIA_TYPE)
                    if isinstance(media_type, dict):
                        raw_schema = media_type.get("schema")
        else:
            parameters = operation.get("parameters")
            for param in parameters if isinstance(parameters, list) else []:
                param, _ = resolver.resolve(param)
                if isinstance(param, dict) and param.get("in") == "body":
                    raw_schema = param.get("schema")
                    break

        if raw_schema is None:
            return None, frozenset()

        schema, refs = resolver.resolve(raw_schema)
        if schema is None:
            return raw_schema, frozenset()
        if not isinstance(schema, dict):
            return None, frozenset()

        return schema, refs


def _load_json(raw_text: str) -> Any:
    return json.loads(raw_text)


def _load_yaml(raw_text: str) -> Any:
    return yaml.safe_load(raw_text)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)
