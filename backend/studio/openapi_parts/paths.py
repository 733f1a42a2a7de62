"""Entity path builder with deterministic structure.

Fragments are emitted in a fixed order:
- list path first (GET/HEAD, then POST)
- single-resource path next (GET/HEAD, then PUT/DELETE)
- then sub-resource endpoints in registry order
"""
from typing import Any, Dict, List
from .constants import ACTION_REGISTRY, SORT_PARAM_MAP, FILTER_PARAMS, READ_ROLES, WRITE_ROLES
from .helpers import caching_headers, json_body


def _id_param(id_param: str) -> Dict[str, Any]:
    return {"name": id_param, "in": "path", "required": True, "schema": {"type": "integer"}}


def build_entity_paths(schema_name: str, coll: str, id_param: str) -> Dict[str, Any]:
    paths: Dict[str, Any] = {}
    list_path = f"/{coll}"
    single_path = f"{list_path}/{{{id_param}}}"
    read_roles = list(READ_ROLES[schema_name])
    writes = WRITE_ROLES.get(schema_name, {})

    filters = [
        {"name": name, "in": "query", "schema": {"type": typ}}
        for name, typ in FILTER_PARAMS.get(schema_name, [])
    ]
    paths[list_path] = {
        "get": {
            "summary": f"List {coll}",
            "parameters": [
                {"$ref": "#/components/parameters/LimitParam"},
                {"$ref": "#/components/parameters/OffsetParam"},
                {"$ref": "#/components/parameters/PageParam"},
                {"$ref": f"#/components/parameters/{SORT_PARAM_MAP[schema_name]}"},
            ] + filters,
            "responses": {
                "200": {
                    "description": "OK",
                    "headers": caching_headers(),
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "data": {"type": "array", "items": {"$ref": f"#/components/schemas/{schema_name}"}},
                                    "pagination": {"$ref": "#/components/schemas/Pagination"},
                                },
                            }
                        }
                    },
                },
                "304": {"description": "Not Modified"},
                "400": {"$ref": "#/components/responses/BadRequest"},
            },
            "x-required-roles": read_roles,
        },
        "head": {
            "summary": f"{schema_name} list validators",
            "responses": {
                "200": {"description": "Headers only", "headers": caching_headers()},
                "304": {"description": "Not Modified"},
            },
            "x-required-roles": read_roles,
        },
    }
    if "post" in writes:
        paths[list_path]["post"] = {
            "summary": f"Create {schema_name.lower()}",
            "requestBody": {"required": True, **json_body(schema_name)},
            "responses": {
                "201": {"description": "Created", **json_body(schema_name)},
                "400": {"$ref": "#/components/responses/BadRequest"},
                "403": {"$ref": "#/components/responses/Forbidden"},
            },
            "x-required-roles": list(writes["post"]),
        }

    paths[single_path] = {
        "get": {
            "summary": f"Get {schema_name.lower()}",
            "parameters": [_id_param(id_param)],
            "responses": {
                "200": {"description": "OK", "headers": caching_headers(), **json_body(schema_name)},
                "304": {"description": "Not Modified"},
                "404": {"$ref": "#/components/responses/NotFound"},
            },
            "x-required-roles": read_roles,
        },
        "head": {
            "summary": f"{schema_name} validators",
            "parameters": [_id_param(id_param)],
            "responses": {
                "200": {"description": "Headers only", "headers": caching_headers()},
                "304": {"description": "Not Modified"},
                "404": {"$ref": "#/components/responses/NotFound"},
            },
            "x-required-roles": read_roles,
        },
    }
    if "put" in writes:
        paths[single_path]["put"] = {
            "summary": f"Update {schema_name.lower()}",
            "parameters": [_id_param(id_param)],
            "requestBody": {"required": True, **json_body(schema_name)},
            "responses": {
                "200": {"description": "OK", **json_body(schema_name)},
                "400": {"$ref": "#/components/responses/BadRequest"},
                "404": {"$ref": "#/components/responses/NotFound"},
            },
            "x-required-roles": list(writes["put"]),
        }
    if "delete" in writes:
        paths[single_path]["delete"] = {
            "summary": f"Delete {schema_name.lower()}",
            "parameters": [_id_param(id_param)],
            "responses": {
                "200": {"description": "Deleted"},
                "404": {"$ref": "#/components/responses/NotFound"},
                "409": {"$ref": "#/components/responses/Conflict"},
            },
            "x-required-roles": list(writes["delete"]),
        }

    actions: List[Dict[str, Any]] = ACTION_REGISTRY.get(schema_name, [])
    for spec in actions:
        act_path = f"{single_path}/{spec['action']}"
        paths[act_path] = {
            spec["method"]: {
                "summary": spec["summary"],
                "parameters": [_id_param(id_param)],
                "responses": {
                    "200": {"description": "OK"},
                    "400": {"$ref": "#/components/responses/BadRequest"},
                    "404": {"$ref": "#/components/responses/NotFound"},
                },
                "x-required-roles": list(spec["roles"]),
            }
        }

    return paths

__all__ = ["build_entity_paths"]
