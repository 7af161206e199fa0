"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers under a unified
prefix.  Sibling resources of the wider shop API (users, products,
companies, orders, admins) are served elsewhere; only the order
change routes live here.
"""

from fastapi import APIRouter

from .endpoints import order_changes

router = APIRouter()

router.include_router(order_changes.router, prefix="/order-changes", tags=["order-changes"])
