"""API v1 routers"""
from . import (
    auth,
    vehicles,
    fuel,
    insurance,
    puc,
    services,
    notifications,
    dashboard,
)

__all__ = [
    "auth",
    "vehicles",
    "fuel",
    "insurance",
    "puc",
    "services",
    "notifications",
    "dashboard",
]
