"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..agent import Assistant
from ..config import settings
from .routes import router

# Global assistant instance
_assistant: Optional[Assistant] = None


def get_assistant() -> Assistant:
    """Get the global assistant instance."""
    global _assistant
    if _assistant is None:
        _assistant = Assistant()
    return _assistant


def set_assistant(assistant: Optional[Assistant]):
    """Replace the global assistant instance."""
    global _assistant
    _assistant = assistant


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    assistant = get_assistant()
    await assistant.initialize()
    yield
    await assistant.shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SheetMate",
        description="LLM spreadsheet assistant",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    return app
