"""Top-level package for the expense tracker desktop client.

Exposes the package version for runtime checks and window titles.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
