"""Sample request body generation from JSON Schema.

This module synthesizes representative values for OpenAPI schemas that
carry no example, using declared examples, enums, numeric bounds and
property-name heuristics, and serializes them to request body text.
"""

import itertools
import json
import math
import random
from datetime import date
from typing import Any, Callable, Iterator, Optional

from swagger_jmeter.core.ref_resolver import RefResolver, is_reference

# Fixed string values keyed by property-name substrings, checked in order
# after the "id" and "name" rules
STRING_HINTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("email",), "sample@example.com"),
    (("url", "link"), "https://example.com"),
    (("phone",), "+1234567890"),
    (("address",), "123 Sample St"),
    (("city",), "Sample City"),
    (("country",), "Sample Country"),
    (("description", "comment"), "Sample description"),
    (("status",), "active"),
    (("type", "category"), "sample"),
)

NUMBER_HINTS: tuple[tuple[tuple[str, ...], float], ...] = (
    (("price", "amount", "cost"), 99.99),
    (("rate", "percentage"), 0.15),
    (("weight",), 1.5),
    (("height",), 1.75),
)

TRUE_HINTS = ("active", "enabled", "available")
FALSE_HINTS = ("deleted", "disabled", "hidden")


class SampleGenerator:
    """Generate sample values for request body schemas.

    Identifier fields (property names containing "id") draw from a counter
    that starts at 1 for every generate() call, so repeated identifiers in
    one body differ while separate bodies do not affect each other.
    """

    def __init__(
        self,
        resolver: RefResolver,
        rng: Optional[random.Random] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        """Initialize sample generator.

        Args:
            resolver: Resolver for $ref markers met during generation
            rng: Random source for month/day fields (default: new Random)
            today: Callable returning the current date (default: date.today)
        """
        self._resolver = resolver
        self._rng = rng or random.Random()
        self._today = today or date.today

    def generate_body(self, schema: Any, visited: frozenset = frozenset()) -> Any:
        """Generate a sample request body.

        Args:
            schema: Body schema (resolved or a reference marker)
            visited: Pointers already followed to reach the schema

        Returns:
            Sample value (dict, list, str, int, float, bool or None)
        """
        return self.generate(schema, visited=visited)

    def generate(
        self,
        schema: Any,
        property_name: Optional[str] = None,
        visited: frozenset = frozenset(),
    ) -> Any:
        """Generate a sample value with a fresh identifier counter.

        Priority: example, first of examples, then type-specific synthesis.

        Args:
            schema: Schema node
            property_name: Name of the property this schema describes
            visited: Pointers already followed on the current chain

        Returns:
            Sample value

        Example:
            >>> generator = SampleGenerator(RefResolver({}))
            >>> generator.generate({"type": "object", "properties": {
            ...     "id": {"type": "integer"}, "email": {"type": "string"}}})
            {'id': 1, 'email': 'sample@example.com'}
        """
        return self._generate(schema, property_name, visited, frozenset(), itertools.count(1))

    def _generate(
        self,
        schema: Any,
        property_name: Optional[str],
        visited: frozenset,
        nodes: frozenset,
        ids: Iterator[int],
    ) -> Any:
        if is_reference(schema):
            schema, visited = self._resolver.resolve(schema, visited)
            if schema is None:
                # Cyclic reference, treated as opaque
                return None

        if not isinstance(schema, dict):
            return None

        # Same mapping object already on this path (YAML alias cycle)
        if id(schema) in nodes:
            return None
        nodes = nodes | {id(schema)}

        if "example" in schema:
            return schema["example"]

        examples = schema.get("examples")
        if isinstance(examples, list) and examples:
            return examples[0]

        schema_type = _schema_type(schema)

        if schema_type == "object":
            sample = {}
            properties = schema.get("properties")
            if isinstance(properties, dict):
                for prop_name, prop_schema in properties.items():
                    sample[prop_name] = self._generate(
                        prop_schema, str(prop_name), visited, nodes, ids
                    )
            return sample
        elif schema_type == "array":
            if "items" in schema:
                return [self._generate(schema["items"], None, visited, nodes, ids)]
            return []
        elif schema_type == "string":
            return self._generate_string(schema, property_name, ids)
        elif schema_type == "integer":
            return self._generate_integer(schema, property_name, ids)
        elif schema_type == "number":
            return self._generate_number(schema, property_name)
        elif schema_type == "boolean":
            return self._generate_boolean(property_name)

        return None

    def _generate_string(
        self, schema: dict[str, Any], property_name: Optional[str], ids: Iterator[int]
    ) -> Any:
        """Generate sample string from string schema."""
        enum = schema.get("enum")
        if isinstance(enum, list) and enum:
            return enum[0]

        if property_name:
            lower_name = property_name.lower()
            if "id" in lower_name:
                return str(next(ids))
            if "name" in lower_name:
                return f"sample{property_name[:1].upper()}{property_name[1:]}"
            for keywords, value in STRING_HINTS:
                if any(keyword in lower_name for keyword in keywords):
                    return value

        return "sample"

    def _generate_integer(
        self, schema: dict[str, Any], property_name: Optional[str], ids: Iterator[int]
    ) -> int:
        """Generate sample integer from integer schema."""
        if property_name:
            lower_name = property_name.lower()
            if "id" in lower_name:
                return next(ids)
            if "count" in lower_name or "quantity" in lower_name:
                return 5
            if "age" in lower_name:
                return 25
            if "year" in lower_name:
                return self._today().year
            if "month" in lower_name:
                return self._rng.randint(1, 12)
            if "day" in lower_name:
                return self._rng.randint(1, 28)
            if "price" in lower_name or "amount" in lower_name:
                return 100

        return int(_clamp(1, schema, integral=True))

    def _generate_number(self, schema: dict[str, Any], property_name: Optional[str]) -> float:
        """Generate sample number from number schema."""
        if property_name:
            lower_name = property_name.lower()
            for keywords, value in NUMBER_HINTS:
                if any(keyword in lower_name for keyword in keywords):
                    return value

        return float(_clamp(1.0, schema, integral=False))

    def _generate_boolean(self, property_name: Optional[str]) -> bool:
        """Generate sample boolean from property name."""
        if property_name:
            lower_name = property_name.lower()
            if any(keyword in lower_name for keyword in TRUE_HINTS):
                return True
            if any(keyword in lower_name for keyword in FALSE_HINTS):
                return False
        return True


def serialize_body(value: Any) -> str:
    """Serialize a sample value to request body text.

    Produces two-space indented JSON with key order preserved. Values JSON
    cannot encode natively (dates parsed from YAML examples) are written
    with str(). XML escaping happens when the test plan is rendered.

    Args:
        value: Sample value tree

    Returns:
        JSON text

    Example:
        >>> print(serialize_body({"name": "sampleName"}))
        {
          "name": "sampleName"
        }
    """
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _schema_type(schema: dict[str, Any]) -> Optional[str]:
    """Get the declared type, taking the first non-null entry of a type list."""
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        for entry in schema_type:
            if entry != "null":
                return entry
        return None
    return schema_type


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _clamp(default: float, schema: dict[str, Any], integral: bool) -> float:
    """Clamp a default into [minimum, maximum], minimum applied first."""
    value = default

    minimum = schema.get("minimum")
    if _is_number(minimum):
        value = max(value, math.ceil(minimum) if integral else minimum)

    maximum = schema.get("maximum")
    if _is_number(maximum):
        value = min(value, math.floor(maximum) if integral else maximum)

    return value
