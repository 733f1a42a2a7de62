"""Modular pieces for the programmatic OpenAPI builder.

Entity registry, schema helpers and the per-entity path builder used by
`studio/openapi_builder.py`.
"""

__all__ = [
    "constants",
    "helpers",
    "paths",
]
