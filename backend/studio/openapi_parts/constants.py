"""Centralized constants for the OpenAPI spec builder.

Required roles are read from ``ROLE_ACTIONS`` so the document follows the
gates enforced at runtime. Tests depend on deterministic ordering.
"""
from typing import Any, Dict, List, Tuple

from studio.constants.roles import ROLE_ACTIONS
from studio.models.authz import ALL_ROLES, ROLE_ADMIN, ROLE_MANAGER

# Entity registry: (SchemaName, collection path, id param)
ENTITIES: List[Tuple[str, str, str]] = [
    ("Service", "services", "service_id"),
    ("Vendor", "vendors", "vendor_id"),
    ("Staff", "staff", "user_id"),
    ("Job", "jobs", "job_id"),
]

# Roles allowed on each entity's list/GET/HEAD endpoints.
READ_ROLES: Dict[str, Tuple[str, ...]] = {
    "Service": ALL_ROLES,
    "Vendor": ROLE_ACTIONS["VENDOR.READ"],
    "Staff": ROLE_ACTIONS["STAFF.MANAGE"],
    # USER callers only see jobs assigned to them
    "Job": ALL_ROLES,
}

# Declarative registry for sub-resource endpoints hanging off a single entity.
ACTION_REGISTRY: Dict[str, List[Dict[str, Any]]] = {
    "Service": [
        {"action": "eligible-staff", "method": "get", "summary": "Staff eligible for service",
         "roles": (ROLE_ADMIN, ROLE_MANAGER)},
    ],
    "Staff": [
        {"action": "configs", "method": "put", "summary": "Replace staff commission configs",
         "roles": ROLE_ACTIONS["STAFF.MANAGE"]},
    ],
    "Job": [
        {"action": "status", "method": "post", "summary": "Change job status",
         "roles": ALL_ROLES},
    ],
}

# Write operations on the collection (post) and single resource (put, delete).
WRITE_ROLES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "Service": {
        "post": ROLE_ACTIONS["SERVICE.MANAGE"],
        "put": ROLE_ACTIONS["SERVICE.MANAGE"],
        "delete": ROLE_ACTIONS["SERVICE.MANAGE"],
    },
    "Vendor": {
        "post": ROLE_ACTIONS["VENDOR.CREATE"],
        "put": ROLE_ACTIONS["VENDOR.MANAGE"],
        "delete": ROLE_ACTIONS["VENDOR.MANAGE"],
    },
    "Staff": {
        "delete": ROLE_ACTIONS["STAFF.MANAGE"],
    },
    "Job": {
        "post": ROLE_ACTIONS["JOB.CREATE"],
        "put": ROLE_ACTIONS["JOB.EDIT"],
        "delete": ROLE_ACTIONS["JOB.DELETE"],
    },
}

SORT_PARAM_MAP = {
    "Service": "SortServicesParam",
    "Vendor": "SortVendorsParam",
    "Staff": "SortStaffParam",
    "Job": "SortJobsParam",
}

SORT_DETAILS = {
    "SortServicesParam": "Multi-field sort (name,created_at,updated_at,id). Prefix - for desc",
    "SortVendorsParam": "Multi-field sort (studio_name,contact_person,created_at,updated_at,id). Prefix - for desc",
    "SortStaffParam": "Multi-field sort (name,email,role,created_at,id). Prefix - for desc",
    "SortJobsParam": "Multi-field sort (created_at,updated_at,job_due_date,amount,status,id). Prefix - for desc",
}

# Query filters accepted by list endpoints, beyond pagination and sort.
FILTER_PARAMS: Dict[str, List[Tuple[str, str]]] = {
    "Service": [("search", "string")],
    "Vendor": [("search", "string"), ("location", "string")],
    "Staff": [("search", "string"), ("role", "string")],
    "Job": [("search", "string"), ("service_id", "integer"), ("staff_id", "integer"),
            ("vendor_id", "integer"), ("status", "string")],
}

__all__ = [
    "ENTITIES",
    "READ_ROLES",
    "ACTION_REGISTRY",
    "WRITE_ROLES",
    "SORT_PARAM_MAP",
    "SORT_DETAILS",
    "FILTER_PARAMS",
]
