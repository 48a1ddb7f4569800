"""Type definitions for HTTP responses."""

from typing import Any, TypeAlias


# Beacon API responses are always an object wrapping a "data" member;
# using Any for the members since pyright has trouble with recursive aliases
JsonObject: TypeAlias = dict[str, Any]

__all__ = ["JsonObject"]
