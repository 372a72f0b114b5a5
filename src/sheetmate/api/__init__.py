"""FastAPI web interface for SheetMate."""

from .app import create_app, get_assistant

__all__ = ["create_app", "get_assistant"]
