from __future__ import annotations
"""
server/storefront/api/schemas/request.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Schemas Pydantic des demandes (commandes / retours).

- Entrées invité : bornes de longueur, statut imposé côté serveur (created).
- Slugs (source, type, statut) convertis par les parse_* du domaine :
  valeur inconnue => ValueError => 422.
"""

import datetime as dt
import uuid as uuidlib
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.domain.enums import (
    FeedbackType,
    OrderSource,
    RequestStatus,
    parse_feedback_type,
    parse_order_source,
    parse_request_status,
)


class _ContactIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=3, max_length=32)
    content: str = Field(default="", max_length=4000)

    @field_validator("name", "phone", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class OrderIn(_ContactIn):
    source: OrderSource = OrderSource.LANDING

    @field_validator("source", mode="before")
    @classmethod
    def parse_source(cls, v):
        return parse_order_source(v)

    model_config = {
        "json_schema_extra": {
            "example": {"name": "Anna", "phone": "+7 900 000-00-00", "content": "Balloons for Saturday"}
        }
    }


class FeedbackIn(_ContactIn):
    type: FeedbackType = FeedbackType.FEEDBACK_REQUEST

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v):
        return parse_feedback_type(v)


class StatusIn(BaseModel):
    status: RequestStatus

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return parse_request_status(v)


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: uuidlib.UUID
    status: RequestStatus
    source: OrderSource
    name: str
    phone: str
    content: str
    user_id: Optional[int] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class FeedbackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: uuidlib.UUID
    status: RequestStatus
    type: FeedbackType
    name: str
    phone: str
    content: str
    user_id: Optional[int] = None
    created_at: dt.datetime
    updated_at: dt.datetime
