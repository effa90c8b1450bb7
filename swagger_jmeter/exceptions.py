"""Custom exceptions for Swagger to JMeter converter.

This module defines the exception hierarchy for the converter.
All custom exceptions inherit from SwaggerJMeterException base class.
"""

from typing import Optional


class SwaggerJMeterException(Exception):
    """Base exception for all converter errors.

    All custom exceptions in the converter inherit from this base class
    to allow catching all tool-specific errors.
    """

    pass


class InvalidConfigException(SwaggerJMeterException):
    """Raised when test plan configuration values are invalid.

    This exception is raised when:
    - Thread count, ramp-up or loop count is not a positive integer
    - Base URL or test plan name is not a string
    """

    pass


# Compile Exceptions


class CompileError(SwaggerJMeterException):
    """Base exception for test plan compilation errors.

    Every compile failure is terminal: no partial test plan is returned.
    """

    pass


class MalformedSpecException(CompileError):
    """Raised when the spec text is neither valid JSON nor valid YAML."""

    pass


class InvalidSpecShapeException(CompileError):
    """Raised when the parsed document is not a mapping.

    This exception is raised when:
    - The document is a scalar (plain string, number)
    - The document is a sequence
    - The document is empty
    """

    pass


class MissingVersionMarkerException(CompileError):
    """Raised when neither 'openapi' nor 'swagger' field is present."""

    pass


class MissingPathsException(CompileError):
    """Raised when 'paths' is missing or is not a mapping."""

    pass


class UnresolvableReferenceException(CompileError):
    """Raised when an internal $ref pointer cannot be resolved.

    This is distinct from a cyclic reference, which is handled by
    treating the node as opaque.

    Attributes:
        pointer: The $ref value that failed to resolve
        segment: The pointer segment where lookup failed (if any)
    """

    def __init__(self, pointer: object, segment: Optional[str] = None, reason: str = "") -> None:
        """Initialize with the failing pointer and segment.

        Args:
            pointer: The $ref value that was being resolved
            segment: The segment that could not be found
            reason: Optional explanation appended to the message
        """
        self.pointer = pointer
        self.segment = segment
        message = f"Cannot resolve reference '{pointer}'"
        if segment is not None:
            message += f": segment '{segment}' not found"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
