"""Credential, provider, subscription, usage and display-settings endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from stealthassist.api.deps import get_assistant
from stealthassist.models import DisplaySettings, SubscriptionTier
from stealthassist.services.assistant import AssistantService

router = APIRouter()


class CredentialRequest(BaseModel):
    api_key: str
    base_url: str | None = None


class SubscriptionRequest(BaseModel):
    tier: SubscriptionTier


class SettingsRequest(BaseModel):
    theme: str = "dark"
    opacity: float = 0.9
    position: str = "top-right"
    auto_hide: bool = True
    stealth_by_default: bool = False
    default_provider: str = "claude"


@router.get("/providers")
def list_providers(assistant: AssistantService = Depends(get_assistant)):
    return {"providers": assistant.list_configured_providers()}


@router.put("/credentials/{provider}")
def set_credential(
    provider: str,
    body: CredentialRequest,
    assistant: AssistantService = Depends(get_assistant),
):
    assistant.set_credential(provider, body.api_key, body.base_url)
    return {"providers": assistant.list_configured_providers()}


@router.get("/subscription")
def get_subscription(assistant: AssistantService = Depends(get_assistant)):
    return {"tier": assistant.get_subscription_tier().value}


@router.put("/subscription")
def set_subscription(body: SubscriptionRequest, assistant: AssistantService = Depends(get_assistant)):
    return {"tier": assistant.set_subscription_tier(body.tier).value}


@router.get("/usage")
def get_usage(assistant: AssistantService = Depends(get_assistant)):
    return {
        "tier": assistant.get_subscription_tier().value,
        "providers": assistant.usage_snapshot(),
    }


@router.get("/settings")
def get_settings(assistant: AssistantService = Depends(get_assistant)):
    return assistant.get_settings().to_dict()


@router.put("/settings")
def save_settings(body: SettingsRequest, assistant: AssistantService = Depends(get_assistant)):
    settings = DisplaySettings(**body.model_dump())
    assistant.save_settings(settings)
    return settings.to_dict()
