"""Helper functions for the OpenAPI builder."""
import copy
from typing import Any, Dict

MONEY = {"type": "string", "description": "Decimal rendered with 2 decimal places"}
TIMESTAMP = {"type": "string", "format": "date-time", "nullable": True}

ENTITY_PROPERTIES: Dict[str, Dict[str, Any]] = {
    "Service": {
        "id": {"type": "integer"},
        "name": {"type": "string"},
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    },
    "Vendor": {
        "id": {"type": "integer"},
        "studio_name": {"type": "string"},
        "contact_person": {"type": "string"},
        "mobile": {"type": "string"},
        "email": {"type": "string", "nullable": True},
        "location": {"type": "string", "nullable": True},
        "notes": {"type": "string", "nullable": True},
    },
    "Staff": {
        "id": {"type": "integer"},
        "name": {"type": "string"},
        "email": {"type": "string"},
        "mobile": {"type": "string", "nullable": True},
        "role": {"type": "string", "enum": ["ADMIN", "MANAGER", "USER"]},
    },
    "Job": {
        "id": {"type": "integer"},
        "service_id": {"type": "integer"},
        "vendor_id": {"type": "integer", "nullable": True},
        "staff_id": {"type": "integer"},
        "description": {"type": "string"},
        "job_due_date": TIMESTAMP,
        "amount": MONEY,
        "commission_percentage": MONEY,
        "commission_amount": MONEY,
        "status": {"type": "string"},
        "started_at": TIMESTAMP,
        "completed_at": TIMESTAMP,
        "working_hours": {"type": "number", "nullable": True},
        "is_overdue": {"type": "boolean"},
    },
}


def schema_minimal(name: str) -> Dict[str, Any]:
    props = ENTITY_PROPERTIES.get(name, {"id": {"type": "integer"}})
    return {"type": "object", "properties": copy.deepcopy(props), "required": ["id"]}


def caching_headers() -> Dict[str, Any]:
    return {
        "ETag": {"schema": {"type": "string"}},
        "Last-Modified": {"schema": {"type": "string"}},
        "X-Last-Modified-ISO": {"schema": {"type": "string"}},
    }


def json_body(ref: str) -> Dict[str, Any]:
    return {"content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{ref}"}}}}


__all__ = ["schema_minimal", "caching_headers", "json_body", "ENTITY_PROPERTIES"]
