"""API routes for SheetMate."""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..errors import MissingCredentialError, ProviderError
from ..llm import PROVIDERS
from ..operations import operations_to_wire

router = APIRouter()


def get_assistant():
    """Get the global assistant instance."""
    from .app import get_assistant as _get_assistant

    return _get_assistant()


class ChatRequest(BaseModel):
    """Request model for chat endpoint."""

    message: str


class ChatResponse(BaseModel):
    """Response model for chat endpoint."""

    response: str
    operations: list[dict]
    superseded: bool = False
    usage: Optional[dict] = None


class SettingsUpdate(BaseModel):
    """Settings fields to change; omitted fields are left alone."""

    api_key: Optional[str] = None
    provider: Optional[str] = None
    model: Optional[str] = None


def _provider_exception(e: ProviderError) -> HTTPException:
    return HTTPException(status_code=502, detail=str(e))


# Chat endpoints


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest):
    """Send a message to the assistant."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is empty")

    assistant = get_assistant()
    try:
        reply = await assistant.chat(request.message.strip())
    except MissingCredentialError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except ProviderError as e:
        raise _provider_exception(e)

    return ChatResponse(
        response=reply.text,
        operations=reply.operations,
        superseded=reply.superseded,
        usage=reply.usage,
    )


# Operation endpoints


@router.get("/operations/pending")
async def get_pending_operations():
    """Operations proposed by the last turn and not yet applied."""
    assistant = get_assistant()
    return {
        "state": assistant.state.value,
        **operations_to_wire(assistant.pending_operations),
    }


@router.post("/operations/apply")
async def apply_operations():
    """Apply the pending operations."""
    assistant = get_assistant()
    if not assistant.pending_operations:
        raise HTTPException(status_code=409, detail="No pending operations")

    report = await assistant.apply_pending()
    return {**report.model_dump(), "success": report.success}


@router.post("/operations/discard")
async def discard_operations():
    """Discard the pending operations."""
    count = get_assistant().discard_pending()
    return {"status": "ok", "discarded": count}


# Settings endpoints


@router.get("/settings")
async def get_settings():
    """Current provider settings; the API key itself is never returned."""
    store = get_assistant().memory_store
    chat_settings = await store.get_settings()
    return {
        "provider": chat_settings.provider,
        "model": chat_settings.model,
        "has_api_key": chat_settings.has_api_key,
        "providers": {name: adapter.label for name, adapter in PROVIDERS.items()},
    }


@router.put("/settings")
async def update_settings(update: SettingsUpdate):
    """Save provider settings."""
    store = get_assistant().memory_store
    if update.provider is not None:
        try:
            await store.save_provider(update.provider)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if update.model:
        await store.save_model(update.model)
    if update.api_key:
        await store.save_api_key(update.api_key.strip())
    return await get_settings()


@router.delete("/settings/api-key")
async def clear_api_key():
    """Remove the saved API key."""
    await get_assistant().memory_store.clear_api_key()
    return {"status": "ok", "message": "API key cleared"}


# History endpoints


@router.get("/history")
async def get_history():
    """Stored conversation messages."""
    messages = await get_assistant().memory_store.get_messages()
    return {"messages": [m.to_dict() for m in messages]}


@router.delete("/history")
async def clear_history():
    """Reset the conversation."""
    await get_assistant().reset_conversation()
    return {"status": "ok", "message": "Conversation reset"}


# Provider endpoints


@router.get("/models")
async def list_models():
    """Models offered by the configured provider."""
    return {"models": await get_assistant().list_models()}


@router.post("/connection-test")
async def connection_test():
    """Check that the configured provider answers."""
    try:
        ok = await get_assistant().test_connection()
    except MissingCredentialError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"ok": ok}


# Health check


@router.get("/health")
async def health_check():
    """Health check endpoint with diagnostics."""
    from ..config import settings

    assistant = get_assistant()
    config = {
        "llm_provider": settings.llm_provider,
        "spreadsheet_host": assistant.host.name,
        "host_is_live": assistant.host.is_live,
        "openrouter_key_present": bool(settings.openrouter_api_key),
        "anthropic_key_present": bool(settings.anthropic_api_key),
        "gemini_key_present": bool(settings.gemini_api_key),
        "huggingface_key_present": bool(settings.huggingface_api_key),
        "google_credentials_configured": settings.google_credentials_path.exists(),
    }

    return {
        "status": "ok",
        "service": "sheetmate",
        "state": assistant.state.value,
        "config": config,
    }
