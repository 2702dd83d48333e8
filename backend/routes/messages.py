# backend/routes/messages.py
from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.message import Conversation, Message
from models.product import Product
from models.sale import Sale
from models.users import User, BUYER, FARMER
from schemas.message import (
    ConversationCreate, ConversationOut, LastMessage, MessageCreate, MessageOut, Participant
)
from utils.audit import client_ip, write_log
from utils.tokenJWT import role_required


def _conversation_to_out(db: Session, conv: Conversation, viewer: User) -> ConversationOut:
    other = conv.other_party(viewer.id)
    last = conv.messages[-1] if conv.messages else None
    unread = (
        db.query(func.count(Message.id))
        .filter(
            Message.conversation_id == conv.id,
            Message.recipient_id == viewer.id,
            Message.is_read == False,  # noqa: E712
        )
        .scalar()
    )
    return ConversationOut(
        id=conv.id,
        subject=conv.subject,
        participant=Participant(
            id=other.id, name=other.name, type=other.role, avatar=other.profile_photo
        ),
        last_message=LastMessage(
            content=last.content, timestamp=last.created_at, is_read=last.is_read
        ) if last else None,
        related_sale_id=conv.related_sale_id,
        related_product=conv.related_product.name if conv.related_product else None,
        unread_count=int(unread or 0),
    )


def _message_to_out(conv: Conversation, msg: Message) -> MessageOut:
    return MessageOut(
        id=msg.id,
        sender_id=msg.sender_id,
        sender_name=msg.sender.name,
        sender_type=msg.sender.role,
        recipient_id=msg.recipient_id,
        recipient_name=msg.recipient.name,
        recipient_type=msg.recipient.role,
        subject=msg.subject,
        content=msg.content,
        timestamp=msg.created_at,
        is_read=msg.is_read,
        related_sale_id=conv.related_sale_id,
        related_product_id=conv.related_product_id,
    )


def _get_conversation(db: Session, conversation_id: int, user: User) -> Conversation:
    conv = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conv or not conv.has_participant(user.id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conv


def _post_message(db: Session, conv: Conversation, sender: User, content: str, subject=None) -> Message:
    recipient_id = conv.farmer_id if sender.id == conv.buyer_id else conv.buyer_id
    msg = Message(
        conversation_id=conv.id,
        sender_id=sender.id,
        recipient_id=recipient_id,
        subject=subject or conv.subject,
        content=content.strip(),
    )
    db.add(msg)
    conv.last_activity_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(msg)
    return msg


def build_router(role: str) -> APIRouter:
    """Inbox routes for one side of the conversation (buyer or farmer)."""
    counterpart = FARMER if role == BUYER else BUYER
    router = APIRouter(prefix=f"/api/{role}/conversations", tags=["Messaging"])
    member_only = role_required(role)

    @router.get("/", response_model=List[ConversationOut])
    def list_conversations(db: Session = Depends(get_db), current_user: User = Depends(member_only)):
        own_column = Conversation.buyer_id if role == BUYER else Conversation.farmer_id
        conversations = (
            db.query(Conversation)
            .filter(own_column == current_user.id)
            .order_by(Conversation.last_activity_at.desc(), Conversation.id.desc())
            .all()
        )
        return [_conversation_to_out(db, c, current_user) for c in conversations]

    @router.post("/", response_model=ConversationOut, status_code=201)
    def create_conversation(
        payload: ConversationCreate,
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(member_only),
    ):
        if not payload.subject.strip():
            raise HTTPException(status_code=422, detail="Subject cannot be empty")
        if not payload.content.strip():
            raise HTTPException(status_code=422, detail="Message content cannot be empty")

        recipient = db.query(User).filter(User.id == payload.recipient_id, User.role == counterpart).first()
        if not recipient:
            raise HTTPException(status_code=404, detail="Recipient not found")

        if payload.related_product_id is not None:
            exists = db.query(Product.id).filter(Product.id == payload.related_product_id).first()
            if not exists:
                raise HTTPException(status_code=404, detail="Product not found")

        buyer_id, farmer_id = (
            (current_user.id, recipient.id) if role == BUYER else (recipient.id, current_user.id)
        )

        # A linked sale must be between the same buyer and farmer
        if payload.related_sale_id is not None:
            sale = (
                db.query(Sale.id)
                .filter(
                    Sale.id == payload.related_sale_id,
                    Sale.buyer_id == buyer_id,
                    Sale.farmer_id == farmer_id,
                )
                .first()
            )
            if not sale:
                raise HTTPException(status_code=404, detail="Sale not found")

        conv = Conversation(
            buyer_id=buyer_id,
            farmer_id=farmer_id,
            subject=payload.subject.strip(),
            related_product_id=payload.related_product_id,
            related_sale_id=payload.related_sale_id,
        )
        db.add(conv)
        db.commit()
        db.refresh(conv)

        _post_message(db, conv, current_user, payload.content)
        db.refresh(conv)

        write_log(
            db, user_id=current_user.id, action="CONVERSATION_CREATE", resource="messages",
            status="SUCCESS", ip=client_ip(request), meta={"conversation_id": conv.id, "recipient_id": recipient.id},
        )
        return _conversation_to_out(db, conv, current_user)

    @router.get("/{conversation_id}/messages/", response_model=List[MessageOut])
    def list_messages(
        conversation_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(member_only),
    ):
        conv = _get_conversation(db, conversation_id, current_user)

        # Opening the thread marks incoming messages as read
        unread = [m for m in conv.messages if m.recipient_id == current_user.id and not m.is_read]
        for m in unread:
            m.is_read = True
        if unread:
            db.commit()
            db.refresh(conv)

        return [_message_to_out(conv, m) for m in conv.messages]

    @router.post("/{conversation_id}/messages/", response_model=MessageOut, status_code=201)
    def send_message(
        conversation_id: int,
        payload: MessageCreate,
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(member_only),
    ):
        conv = _get_conversation(db, conversation_id, current_user)
        if not payload.content.strip():
            raise HTTPException(status_code=422, detail="Message content cannot be empty")

        msg = _post_message(db, conv, current_user, payload.content, payload.subject)
        write_log(
            db, user_id=current_user.id, action="MESSAGE_SEND", resource="messages",
            status="SUCCESS", ip=client_ip(request), meta={"conversation_id": conv.id, "message_id": msg.id},
        )
        return _message_to_out(conv, msg)

    return router


buyer_router = build_router(BUYER)
farmer_router = build_router(FARMER)
