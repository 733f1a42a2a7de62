"""Minimal deterministic OpenAPI spec builder.

Scope:
- Auth endpoints: /auth/login (POST), /auth/me (GET), /auth/navigation (GET)
- Admin endpoints under /api/admin
- For each tracked entity: list + single GET & HEAD with caching headers,
  write operations and sub-resources, each tagged with ``x-required-roles``
- Dashboard stats

`studio/openapi.py` re-exports from here.
"""
from typing import Any, Dict
from .openapi_parts.constants import ENTITIES, SORT_DETAILS
from .openapi_parts.helpers import schema_minimal, json_body
from .openapi_parts.paths import build_entity_paths
from .models.authz import ALL_ROLES, ROLE_ADMIN, ROLE_MANAGER
from .models.job import Job
from .services.lifecycle import JOB_FSM

__all__ = ["build_openapi_spec"]


def _admin_paths() -> Dict[str, Any]:
    def op(summary, roles, ref):
        return {
            "post": {
                "summary": summary,
                "requestBody": {"required": True, **json_body(ref)},
                "responses": {
                    "200": {"description": "OK"},
                    "201": {"description": "Created"},
                    "400": {"$ref": "#/components/responses/BadRequest"},
                    "403": {"$ref": "#/components/responses/Forbidden"},
                    "409": {"$ref": "#/components/responses/Conflict"},
                    "500": {"description": "Identity provider failure"},
                },
                "x-required-roles": list(roles),
            }
        }
    return {
        "/api/admin/create-user": op("Create staff account", (ROLE_ADMIN,), "CreateUserRequest"),
        "/api/admin/update-user": op("Update staff account", (ROLE_ADMIN,), "UpdateUserRequest"),
        "/api/admin/create-vendor": op("Create vendor", (ROLE_ADMIN, ROLE_MANAGER), "Vendor"),
    }


def build_openapi_spec() -> Dict[str, Any]:
    schemas = {e[0]: schema_minimal(e[0]) for e in ENTITIES}
    # every status may move to every other status
    schemas["Job"]["x-transitions"] = [s for s in Job.ALL_STATUSES if s in JOB_FSM.states]
    schemas["Job"]["properties"]["status"]["enum"] = list(Job.ALL_STATUSES)

    components: Dict[str, Any] = {
        "schemas": schemas
        | {
            "Pagination": {
                "type": "object",
                "properties": {
                    "total": {"type": "integer"},
                    "limit": {"type": "integer"},
                    "offset": {"type": "integer"},
                    "returned": {"type": "integer"},
                },
                "required": ["total", "limit", "offset", "returned"],
            },
            "Error": {
                "type": "object",
                "properties": {
                    "error": {
                        "type": "object",
                        "properties": {
                            "status": {"type": "integer"},
                            "title": {"type": "string"},
                            "detail": {"type": "string"},
                        },
                    }
                },
                "required": ["error"],
            },
            "CommissionConfig": {
                "type": "object",
                "properties": {
                    "service_id": {"type": "integer"},
                    "percentage": {"type": "number", "minimum": 0, "maximum": 100},
                    "due_date_offset": {"type": "integer", "minimum": 0, "nullable": True},
                },
                "required": ["service_id", "percentage"],
            },
            "CreateUserRequest": {
                "type": "object",
                "properties": {
                    "email": {"type": "string"},
                    "password": {"type": "string", "minLength": 6},
                    "name": {"type": "string"},
                    "mobile": {"type": "string"},
                    "role": {"type": "string", "enum": list(ALL_ROLES)},
                    "commissions": {"type": "array", "items": {"$ref": "#/components/schemas/CommissionConfig"}},
                },
                "required": ["email", "password", "name"],
            },
            "UpdateUserRequest": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "email": {"type": "string"},
                    "password": {"type": "string", "minLength": 6},
                    "name": {"type": "string"},
                    "mobile": {"type": "string"},
                    "role": {"type": "string", "enum": list(ALL_ROLES)},
                },
                "required": ["id"],
            },
        },
        "responses": {
            "NotFound": {"description": "Not Found"},
            "BadRequest": {"description": "Bad Request"},
            "Forbidden": {"description": "Forbidden"},
            "Conflict": {"description": "Conflict"},
        },
        "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        "parameters": {},
    }

    params = components["parameters"]
    params.update({
        "LimitParam": {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 10}},
        "OffsetParam": {"name": "offset", "in": "query", "schema": {"type": "integer", "default": 0}},
        "PageParam": {"name": "page", "in": "query", "schema": {"type": "integer", "minimum": 1}},
    })
    for pname, desc in SORT_DETAILS.items():
        params[pname] = {"name": "sort", "in": "query", "schema": {"type": "string"}, "description": desc}

    paths: Dict[str, Any] = {
        "/auth/login": {"post": {"summary": "Login", "security": [], "responses": {"200": {"description": "JWT issued"}}}},
        "/auth/me": {"get": {"summary": "Current user with navigation", "responses": {"200": {"description": "OK"}}}},
        "/auth/navigation": {"get": {"summary": "Navigation for current role", "responses": {"200": {"description": "OK"}}}},
        "/auth/can-access": {"get": {
            "summary": "Whether the caller's role may open a dashboard screen",
            "parameters": [{"name": "route", "in": "query", "required": True, "schema": {"type": "string"}}],
            "responses": {"200": {"description": "OK"}, "400": {"$ref": "#/components/responses/BadRequest"}},
        }},
    }
    paths.update(_admin_paths())

    for schema_name, coll, id_param in ENTITIES:
        # deterministic merge: keys are unique per entity, order preserved by insertion
        for k, v in build_entity_paths(schema_name, coll, id_param).items():
            paths[k] = v

    paths["/dashboard/stats"] = {
        "get": {
            "summary": "Dashboard stats scoped to the caller",
            "responses": {"200": {"description": "OK"}},
            "x-required-roles": list(ALL_ROLES),
        }
    }

    # Add operationIds & tags
    tag_desc: Dict[str, str] = {}
    for path, ops in paths.items():
        segments = [s for s in path.split("/") if s and s != "api"]
        tag = segments[0].capitalize()
        for method, od in ops.items():
            rid = path.strip("/").replace("/", "_").replace("{", "").replace("}", "").replace("-", "_")
            od["operationId"] = f"auto_{method}_{rid}"
            od["tags"] = [tag]
        tag_desc[tag] = f"{tag} endpoints"

    return {
        "openapi": "3.0.3",
        "info": {"title": "Studio Production API", "version": "0.1.0"},
        "paths": paths,
        "components": components,
        "security": [{"BearerAuth": []}],
        "tags": [{"name": n, "description": d} for n, d in sorted(tag_desc.items())],
    }
