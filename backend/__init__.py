"""Backend package providing the managed expense service used by the tracker."""

__all__ = [
    "database",
    "models",
    "schemas",
    "crud",
    "server",
]
