from __future__ import annotations

"""
tokengate.version — resolved package version.

Resolution order (first match wins):
- TOKENGATE_VERSION environment variable (packaging/CI override)
- installed distribution metadata
- BASE_VERSION
"""


import os
from importlib import metadata as importlib_metadata

# Bump this on intentional releases.
BASE_VERSION = "0.1.0"


def build_version() -> str:
    v = os.getenv("TOKENGATE_VERSION")
    if v:
        return v
    try:
        return importlib_metadata.version("tokengate")
    except importlib_metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = build_version()


__all__ = ["__version__", "BASE_VERSION"]
