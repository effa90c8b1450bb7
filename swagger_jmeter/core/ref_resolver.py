"""Internal $ref resolution for OpenAPI documents.

Only same-document pointers of the form "#/a/b/c" are supported. Each
segment is a literal mapping key looked up from the document root.
"""

from typing import Any, Optional

from swagger_jmeter.exceptions import UnresolvableReferenceException


def is_reference(node: Any) -> bool:
    """Check whether a schema node is a reference marker."""
    return isinstance(node, dict) and "$ref" in node


class RefResolver:
    """Resolve internal references against one parsed document.

    Cycles are detected with a path-local visited set: the pointers
    followed on the current resolution chain. Callers pass the set down
    when recursing into child schemas, so the same target may appear in
    sibling branches but never twice on one chain.
    """

    def __init__(self, spec: dict[str, Any]) -> None:
        """Initialize resolver.

        Args:
            spec: The parsed document all pointers are relative to
        """
        self._spec = spec

    def lookup(self, pointer: Any) -> Any:
        """Resolve a single pointer to the node it names.

        Args:
            pointer: Pointer string (e.g., "#/components/schemas/User")

        Returns:
            The node at the pointer (may itself be a reference marker)

        Raises:
            UnresolvableReferenceException: Pointer is external, malformed,
                or names a missing key
        """
        if not isinstance(pointer, str):
            raise UnresolvableReferenceException(pointer, reason="$ref must be a string")

        if not pointer.startswith("#"):
            raise UnresolvableReferenceException(
                pointer, reason="only same-document references are supported"
            )

        if pointer in ("#", "#/"):
            return self._spec

        if not pointer.startswith("#/"):
            raise UnresolvableReferenceException(pointer, reason="expected '#/' prefix")

        node: Any = self._spec
        for segment in pointer[2:].split("/"):
            if not isinstance(node, dict) or segment not in node:
                raise UnresolvableReferenceException(pointer, segment)
            node = node[segment]

        return node

    def resolve(
        self, node: Any, visited: frozenset = frozenset()
    ) -> tuple[Optional[Any], frozenset]:
        """Follow a chain of references to a literal schema.

        Args:
            node: Schema node, possibly a reference marker
            visited: Pointers already followed on the current chain

        Returns:
            Tuple of (resolved node, visited set extended with every pointer
            followed). The node is None when the chain revisits a pointer.

        Raises:
            UnresolvableReferenceException: A pointer in the chain is wrong

        Example:
            >>> spec = {"components": {"schemas": {"User": {"type": "object"}}}}
            >>> resolver = RefResolver(spec)
            >>> resolver.resolve({"$ref": "#/components/schemas/User"})
            ({'type': 'object'}, frozenset({'#/components/schemas/User'}))
        """
        seen = set(visited)

        while is_reference(node):
            pointer = node["$ref"]
            if isinstance(pointer, str) and pointer in seen:
                return None, frozenset(seen)
            target = self.lookup(pointer)
            seen.add(pointer)
            node = target

        return node, frozenset(seen)
