"""LLM endpoints: send a chat turn, analyze an image."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from stealthassist.api.deps import get_assistant
from stealthassist.models import ConversationContext
from stealthassist.services.assistant import AssistantService

logger = logging.getLogger(__name__)

router = APIRouter()


class SendRequest(BaseModel):
    provider: str
    message: str
    context: dict = Field(default_factory=dict)


class AnalyzeImageRequest(BaseModel):
    provider: str
    image_base64: str
    question: str = ""


@router.post("/send")
def send(body: SendRequest, assistant: AssistantService = Depends(get_assistant)):
    context = ConversationContext.from_dict(body.context)
    return assistant.send_to_llm(body.provider, body.message, context).to_dict()


@router.post("/analyze-image")
def analyze_image(body: AnalyzeImageRequest, assistant: AssistantService = Depends(get_assistant)):
    return assistant.analyze_image(body.provider, body.image_base64, body.question).to_dict()
