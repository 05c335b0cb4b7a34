from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from context import DomainContext
from dependencies import Principal, ensure_self_or_staff, get_context, get_principal
from schemas import Chat

router = APIRouter(prefix="/chats", tags=["Chats"])


class MessageCreate(BaseModel):
    message: str = Field(..., min_length=1)


class ReadUpdate(BaseModel):
    is_read: bool = True


def _get_delivery(context: DomainContext, principal: Principal, delivery_id: str) -> dict:
    delivery = context.deliveries.find_by_id(delivery_id)
    if not delivery:
        raise HTTPException(status_code=404, detail="Delivery not found")
    ensure_self_or_staff(principal, delivery["customer"])
    return delivery


def _get_message(context: DomainContext, principal: Principal, chat_id: str) -> dict:
    chat = context.chats.find_by_id(chat_id)
    if not chat:
        raise HTTPException(status_code=404, detail="Message not found")
    _get_delivery(context, principal, chat["delivery"])
    return chat


@router.post("/{delivery_id}", status_code=201)
def create_message(delivery_id: str, payload: MessageCreate,
                   principal: Principal = Depends(get_principal),
                   context: DomainContext = Depends(get_context)):
    delivery = _get_delivery(context, principal, delivery_id)
    return context.chats.create(Chat(
        delivery=delivery["_id"],
        author=principal.account["_id"],
        message=payload.message,
    ))


@router.get("/{delivery_id}")
def get_messages(delivery_id: str, principal: Principal = Depends(get_principal),
                 context: DomainContext = Depends(get_context)):
    delivery = _get_delivery(context, principal, delivery_id)
    return context.chats.find_by_delivery(delivery["_id"])


@router.patch("/message/{chat_id}")
def mark_message(chat_id: str, payload: ReadUpdate, principal: Principal = Depends(get_principal),
                 context: DomainContext = Depends(get_context)):
    chat = _get_message(context, principal, chat_id)
    return context.chats.mark_read(chat["_id"], payload.is_read)


@router.delete("/message/{chat_id}", status_code=204)
def delete_message(chat_id: str, principal: Principal = Depends(get_principal),
                   context: DomainContext = Depends(get_context)):
    chat = _get_message(context, principal, chat_id)
    if chat.get("author") != principal.account["_id"] and not principal.employee:
        raise HTTPException(status_code=403, detail="Forbidden")
    context.chats.delete_by_id(chat["_id"])
    return Response(status_code=204)
