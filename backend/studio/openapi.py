"""Public import for the OpenAPI builder.

The implementation lives in `openapi_builder.py`; the app factory and the
spec generation script import from here.
"""
from .openapi_builder import build_openapi_spec  # noqa: F401

__all__ = ["build_openapi_spec"]
