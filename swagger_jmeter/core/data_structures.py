"""Data structures for the test plan compiler.

This module defines dataclasses passed between the pipeline stages:
the operation descriptors produced by the extractor and the test plan
configuration supplied by the caller.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Optional

from swagger_jmeter.exceptions import InvalidConfigException

# HTTP methods recognized under a path item, in canonical order
HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

# Methods whose samplers carry a request body
BODY_METHODS = ("POST", "PUT", "PATCH")


@dataclass(frozen=True)
class OperationDescriptor:
    """A single (path, method) operation found under 'paths'.

    Attributes:
        path: Path template (e.g., "/users/{id}")
        method: HTTP method in uppercase (e.g., "GET", "POST")
        operation_id: Operation ID from spec, None if not declared
        summary: Operation summary, None if not declared
        tags: Operation tags in declaration order
        request_body_schema: Resolved JSON request body schema, if any
        schema_refs: Pointers followed while resolving the body schema
    """

    path: str
    method: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    tags: tuple[str, ...] = ()
    request_body_schema: Optional[dict[str, Any]] = field(default=None, compare=False)
    schema_refs: frozenset = frozenset()

    @property
    def sampler_name(self) -> str:
        """Display name: operationId, else summary, else "METHOD path"."""
        return self.operation_id or self.summary or f"{self.method} {self.path}"

    @property
    def needs_body(self) -> bool:
        """True if the sampler for this operation should carry a body."""
        return self.method in BODY_METHODS and self.request_body_schema is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display.

        Returns:
            Dictionary representation of the operation.
        """
        return {
            "path": self.path,
            "method": self.method,
            "operationId": self.operation_id,
            "summary": self.summary,
            "tags": list(self.tags),
            "has_body": self.needs_body,
        }


@dataclass(frozen=True)
class TestPlanConfig:
    """Load profile and naming for a generated test plan.

    The compiler reads this value and never modifies it. Use replace()
    to derive a changed copy.

    Attributes:
        thread_count: Number of virtual users
        ramp_up_seconds: Ramp-up period in seconds
        loop_count: Iterations per thread
        base_url: Target base URL (may be empty)
        test_plan_name: Name of the TestPlan element
    """

    __test__ = False

    thread_count: int
    ramp_up_seconds: int
    loop_count: int
    base_url: str
    test_plan_name: str

    def __post_init__(self) -> None:
        """Validate numeric and string fields."""
        for name in ("thread_count", "ramp_up_seconds", "loop_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidConfigException(
                    f"{name} must be a positive integer, got {value!r}"
                )
        for name in ("base_url", "test_plan_name"):
            if not isinstance(getattr(self, name), str):
                raise InvalidConfigException(f"{name} must be a string")

    def replace(self, **changes: Any) -> "TestPlanConfig":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)
