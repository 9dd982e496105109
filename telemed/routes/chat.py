from contextlib import aclosing
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from typing import List
from telemed.config.database import get_db
from telemed.schemas.appointment import AppointmentResponse
from telemed.schemas.chat import ChatbotReply, ChatbotRequest, ConversationStart, MessageCreate, MessageResponse
from telemed.services.chat_service import ChatService
from telemed.services.chatbot_service import ChatbotService
from telemed.services.redis_service import redis_service
import asyncio
import redis
import logging

logger = logging.getLogger("chat")

router = APIRouter(prefix="/chat", tags=["Chat"])
chatbot_router = APIRouter(prefix="/chatbot", tags=["Chatbot"])

@router.post("/conversations", response_model=AppointmentResponse)
def start_conversation(payload: ConversationStart, db: Session = Depends(get_db)):
    """Returns the appointment that carries the conversation"""
    return ChatService.start_conversation(db, payload.patient_id, payload.doctor_id)

@router.get("/{appointment_id}/messages", response_model=List[MessageResponse])
def list_messages(appointment_id: int, db: Session = Depends(get_db)):
    return ChatService.list_messages(db, appointment_id)

@router.post("/{appointment_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def send_message(appointment_id: int, payload: MessageCreate, db: Session = Depends(get_db)):
    return ChatService.send_message(db, appointment_id, payload.sender_id, payload.message, payload.message_type)

@router.patch("/{appointment_id}/read")
def mark_read(appointment_id: int, reader_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return ChatService.mark_read(db, appointment_id, reader_id)

@router.websocket("/{appointment_id}/stream")
async def stream_messages(websocket: WebSocket, appointment_id: int):
    """Live relay of new messages; no replay, clients refetch after reconnecting"""
    await websocket.accept()

    async def relay():
        async with aclosing(redis_service.listen_chat(appointment_id)) as messages:
            async for payload in messages:
                await websocket.send_json(payload)

    async def watch_client():
        # clients send nothing useful; this only notices the disconnect
        while True:
            await websocket.receive_text()

    tasks = {asyncio.create_task(relay()), asyncio.create_task(watch_client())}
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        # cancelling the relay runs listen_chat's cleanup
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    for task in done:
        error = task.exception()
        if error is None or isinstance(error, WebSocketDisconnect):
            logger.info(f"Chat stream for appointment {appointment_id} disconnected")
        elif isinstance(error, redis.RedisError):
            logger.error(f"Chat stream for appointment {appointment_id} lost Redis: {error}")
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        else:
            raise error

@chatbot_router.post("/message", response_model=ChatbotReply)
def chatbot_message(payload: ChatbotRequest, db: Session = Depends(get_db)):
    return ChatbotService.handle_message(db, payload.text, payload.user_id)
