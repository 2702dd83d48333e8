from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime

from schemas.sale import CamelModel


class Participant(BaseModel):
    id: int
    name: str
    type: Literal["farmer", "buyer", "admin"]
    avatar: Optional[str] = None


class LastMessage(CamelModel):
    content: str
    timestamp: Optional[datetime] = None
    is_read: bool


# Conversation summary used by the inbox list
class ConversationOut(CamelModel):
    id: int
    subject: Optional[str] = None
    participant: Participant
    last_message: Optional[LastMessage] = None
    related_sale_id: Optional[int] = None
    related_product: Optional[str] = None
    unread_count: int = 0


class MessageOut(CamelModel):
    id: int
    sender_id: int
    sender_name: str
    sender_type: str
    recipient_id: int
    recipient_name: str
    recipient_type: str
    subject: Optional[str] = None
    content: str
    timestamp: Optional[datetime] = None
    is_read: bool
    related_sale_id: Optional[int] = None
    related_product_id: Optional[int] = None


# Opening a new conversation with its first message
class ConversationCreate(CamelModel):
    recipient_id: int
    subject: str = Field(min_length=1)
    content: str = Field(min_length=1)
    related_product_id: Optional[int] = None
    related_sale_id: Optional[int] = None


class MessageCreate(BaseModel):
    content: str = Field(min_length=1)
    subject: Optional[str] = None
