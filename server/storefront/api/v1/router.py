from __future__ import annotations
"""server/storefront/api/v1/router.py
~~~~~~~~~~~~~~~~~~~~~~~~
Router principal API v1.
"""
from fastapi import APIRouter
from storefront.api.v1.endpoints import feedback, health, orders, telegram


api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(orders.router, tags=["orders"])
api_router.include_router(feedback.router, tags=["feedback"])
api_router.include_router(telegram.router, tags=["telegram"])
