from __future__ import annotations
"""
server/storefront/api/schemas/telegram.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Sous-ensemble des objets Bot API reçus par le webhook (Update).

On ne modélise que ce qu'on lit ; les champs inconnus sont ignorés
(Telegram en ajoute régulièrement).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: Optional[str] = None
    username: Optional[str] = None


class Chat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: str


class Message(BaseModel):
    # "from" est un mot réservé : alias, mais on accepte aussi from_ (tests).
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: int
    chat: Chat
    from_: Optional[TelegramUser] = Field(default=None, alias="from")
    text: Optional[str] = None


class CallbackQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    from_: TelegramUser = Field(alias="from")
    data: Optional[str] = None
    message: Optional[Message] = None


class Update(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: Optional[Message] = None
    callback_query: Optional[CallbackQuery] = None
