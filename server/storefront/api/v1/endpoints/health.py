from __future__ import annotations
"""server/storefront/api/v1/endpoints/health.py
~~~~~~~~~~~~~~~~~~~~~~~~
Health check.
"""
from fastapi import APIRouter, Depends

from storefront.api.deps import get_services
from storefront.core.bootstrap import Services

router = APIRouter()


@router.get("/health")
async def health(services: Services = Depends(get_services)) -> dict:
    return {
        "status": "ok",
        "telegram": services.gateway is not None,
        "pending_tasks": services.pool.pending,
    }
