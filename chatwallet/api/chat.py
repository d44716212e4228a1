import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from ..container import AppContainer
from ..types import ChatRequest, ChatResponse
from .deps import get_container

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/chat")
async def chat_endpoint(request: ChatRequest, container: AppContainer = Depends(get_container)) -> ChatResponse:
    """Classify a message, screen it, and run the resulting action"""

    session_id = request.session_id or uuid.uuid4().hex
    try:
        action = await container.classifier.classify(
            request.message,
            [turn.model_dump() for turn in request.history],
        )
        result = await container.router.execute_action(action, request.message, session_id)
    except Exception as e:
        logger.exception(f"Chat processing failed for session {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Chat processing failed")

    return ChatResponse(
        session_id=session_id,
        intent=action.intent,
        confidence=action.confidence,
        success=result.success,
        message=result.message,
        data=result.data,
    )
