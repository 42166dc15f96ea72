from __future__ import annotations
"""server/storefront/api/deps.py
~~~~~~~~~~~~~~~~~~~~~~~~
Dépendances FastAPI partagées (services applicatifs, contexte de requête).
"""
import uuid

from fastapi import Header, Request

from storefront.core.bootstrap import Services
from storefront.core.context import RequestContext


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_request_context(x_request_id: str | None = Header(default=None, alias="X-Request-ID")) -> RequestContext:
    return RequestContext(request_id=x_request_id or uuid.uuid4().hex)
