"""Chat and voice API routes."""

import base64
import binascii
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from blueprint.errors import BlueprintError

chat_router = APIRouter(tags=["Chat"])


def get_services(request: Request):
    return request.app.state.services


class ChatSendRequest(BaseModel):
    message: str


class ChatMessageResponse(BaseModel):
    id: str
    role: str
    content: str
    created_at: str
    actions: Optional[List[Dict[str, Any]]] = None


class ChatSendResponse(BaseModel):
    message: ChatMessageResponse
    report: Optional[Dict[str, Any]] = None


class VoiceRequest(BaseModel):
    audio_base64: str


class TranscribeResponse(BaseModel):
    text: str


class VoiceSubmitResponse(BaseModel):
    text: Optional[str] = None
    message: Optional[ChatMessageResponse] = None


def _decode_audio(audio_base64: str) -> bytes:
    try:
        return base64.b64decode(audio_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="audio_base64 is not valid base64")


@chat_router.post("/chat/send", response_model=ChatSendResponse)
async def chat_send(req: ChatSendRequest, services=Depends(get_services)):
    turn = await services.session.run_turn(req.message)
    if turn is None:
        raise HTTPException(status_code=400, detail="message is empty")
    return ChatSendResponse(
        message=ChatMessageResponse(**turn.message.to_dict()),
        report=turn.report.to_dict() if turn.report is not None else None,
    )


@chat_router.get("/chat/history", response_model=List[ChatMessageResponse])
async def chat_history(limit: Optional[int] = None, services=Depends(get_services)):
    limit = limit if limit is not None else services.config.chat.history_limit
    try:
        messages = await services.chat_log.recent(limit)
    except BlueprintError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [ChatMessageResponse(**m.to_dict()) for m in messages]


@chat_router.delete("/chat/history")
async def chat_history_clear(services=Depends(get_services)):
    await services.session.clear_history()
    return {"cleared": True}


@chat_router.post("/voice/transcribe", response_model=TranscribeResponse)
async def voice_transcribe(req: VoiceRequest, services=Depends(get_services)):
    """Speech-to-text only; the caller decides what to do with the text."""
    audio = _decode_audio(req.audio_base64)
    if not audio:
        raise HTTPException(status_code=400, detail="audio is empty")
    try:
        text = await services.transcriber.transcribe(audio)
    except BlueprintError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return TranscribeResponse(text=text)


@chat_router.post("/voice/submit", response_model=VoiceSubmitResponse)
async def voice_submit(req: VoiceRequest, services=Depends(get_services)):
    """Full voice turn: transcribe, run through the chat session, notify."""
    audio = _decode_audio(req.audio_base64)
    reply = await services.voice.submit(audio)
    if reply is None:
        return VoiceSubmitResponse()
    user_text = None
    for msg in reversed(services.session.messages):
        if msg.role == "user":
            user_text = msg.content
            break
    return VoiceSubmitResponse(
        text=user_text,
        message=ChatMessageResponse(**reply.to_dict()),
    )
