"""Core runtime, value types, streams and attribute helpers for proxy/stub middleware."""

__version__ = "0.1.0"

__all__ = [
    "types",
    "utils",
    "ranged",
    "enumeration",
    "deployable",
    "variant",
    "streams",
    "serializable",
    "attribute",
    "runtime",
]