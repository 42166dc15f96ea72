from __future__ import annotations
"""server/storefront/main.py
~~~~~~~~~~~~~~~~~~~~~~~~
Point d'entrée FastAPI.
"""
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.v1.router import api_router
from storefront.core.bootstrap import Services, build_services
from storefront.core.config import settings


def create_app(services: Optional[Services] = None) -> FastAPI:
    app = FastAPI(title="Storefront Sync", version="0.3.0")
    app.state.services = services or build_services(settings)

    allow_origins: List[str] = []
    if origins := getattr(settings, "CORS_ALLOW_ORIGINS", None):
        allow_origins = [o.strip() for o in origins.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup() -> None:
        app.state.services.start()

    @app.on_event("shutdown")
    async def shutdown() -> None:
        app.state.services.shutdown()

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
