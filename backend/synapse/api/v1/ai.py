"""AI assistant API routes: classification, summarization, provider config."""

from fastapi import APIRouter, Depends

from synapse.core.exceptions import ValidationError
from synapse.core.security import get_current_user
from synapse.models.user import User
from synapse.schemas.ai import (
    AIConfigUpdate,
    ClassifyRequest,
    ClassifyResponse,
    ProviderOption,
    ProviderStatusResponse,
    SummarizeRequest,
    SummarizeResponse,
)
from synapse.services.ai_config import PROVIDERS, get_current_provider, set_provider
from synapse.services.classification_service import ClassificationService
from synapse.services.llm_provider import get_llm_provider

router = APIRouter()


@router.post("/classify", response_model=ClassifyResponse)
async def classify_message(
    payload: ClassifyRequest,
    current_user: User = Depends(get_current_user),
):
    """Classify a message as new_problem, chat, conjecture, criticism or artifact."""
    if not payload.message.strip():
        raise ValidationError("Message is required")
    service = ClassificationService()
    return await service.classify(
        payload.message,
        chat_history=[t.model_dump() for t in payload.chat_history],
        existing_problems=payload.existing_problems,
    )


@router.post("/summarize", response_model=SummarizeResponse)
async def summarize_conversation(
    payload: SummarizeRequest,
    current_user: User = Depends(get_current_user),
):
    """Generate a short title for a conversation."""
    if not payload.messages:
        raise ValidationError("Messages are required")
    service = ClassificationService()
    title = await service.summarize([m.model_dump() for m in payload.messages])
    return SummarizeResponse(title=title)


async def _provider_status() -> ProviderStatusResponse:
    llm = get_llm_provider()
    return ProviderStatusResponse(
        provider=type(llm).__name__,
        available=await llm.is_available(),
        model_name=llm.get_model_name(),
        providers=[ProviderOption(id=pid, label=label) for pid, label in PROVIDERS.items()],
        current_provider=get_current_provider(),
    )


@router.get("/status", response_model=ProviderStatusResponse)
async def provider_status(current_user: User = Depends(get_current_user)):
    """Check if the AI provider is available and return its config."""
    return await _provider_status()


@router.patch("/config", response_model=ProviderStatusResponse)
async def update_ai_config(
    payload: AIConfigUpdate,
    current_user: User = Depends(get_current_user),
):
    """Switch the AI provider at runtime and return refreshed status."""
    if payload.provider is not None and not set_provider(payload.provider):
        raise ValidationError(f"Unknown provider: {payload.provider}")
    return await _provider_status()
