"""Role → navigation and capability tables.

Order of NAV entries is the order the sidebar renders them. Extend cautiously;
route strings are shared with the dashboard front end.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

from studio.models.authz import ROLE_ADMIN, ROLE_MANAGER, ROLE_USER

ROUTE_DASHBOARD = '/dashboard'
ROUTE_JOBS = '/dashboard/admin/jobs'
ROUTE_VENDORS = '/dashboard/admin/vendors'
ROUTE_SERVICES = '/dashboard/admin/services'
ROUTE_STAFF = '/dashboard/admin/staff'
ROUTE_MY_JOBS = '/dashboard/staff/my-jobs'

# (route, label)
ROLE_NAV: Dict[str, List[Tuple[str, str]]] = {
    ROLE_ADMIN: [
        (ROUTE_DASHBOARD, 'Dashboard'),
        (ROUTE_JOBS, 'Jobs'),
        (ROUTE_VENDORS, 'Vendors'),
        (ROUTE_SERVICES, 'Services'),
        (ROUTE_STAFF, 'Users'),
    ],
    ROLE_MANAGER: [
        (ROUTE_DASHBOARD, 'Dashboard'),
        (ROUTE_VENDORS, 'Vendors'),
        (ROUTE_JOBS, 'Jobs'),
    ],
    ROLE_USER: [
        (ROUTE_DASHBOARD, 'Dashboard'),
        (ROUTE_MY_JOBS, 'My Jobs'),
    ],
}

# Server-side action gates; mirrors ROLE_NAV but keyed by API action.
ROLE_ACTIONS: Dict[str, Tuple[str, ...]] = {
    'SERVICE.MANAGE': (ROLE_ADMIN,),
    'STAFF.MANAGE': (ROLE_ADMIN,),
    'VENDOR.READ': (ROLE_ADMIN, ROLE_MANAGER),
    'VENDOR.CREATE': (ROLE_ADMIN, ROLE_MANAGER),
    'VENDOR.MANAGE': (ROLE_ADMIN,),
    'JOB.CREATE': (ROLE_ADMIN, ROLE_MANAGER),
    'JOB.READ_ALL': (ROLE_ADMIN, ROLE_MANAGER),
    'JOB.EDIT': (ROLE_ADMIN,),
    'JOB.DELETE': (ROLE_ADMIN,),
    'JOB.STATUS_ANY': (ROLE_ADMIN, ROLE_MANAGER),
}

__all__ = [
    'ROLE_NAV', 'ROLE_ACTIONS', 'ROUTE_DASHBOARD', 'ROUTE_JOBS', 'ROUTE_VENDORS',
    'ROUTE_SERVICES', 'ROUTE_STAFF', 'ROUTE_MY_JOBS',
]
