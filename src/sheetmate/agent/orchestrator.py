"""Assistant orchestrator for chat turns and pending operations."""

import asyncio
import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..config import Settings, settings as default_settings
from ..errors import MissingCredentialError, SheetMateError
from ..llm import AdapterFactory, ConversationTurn, ProviderAdapter, create_adapter
from ..memory import ChatSettings, MemoryStore
from ..operations import Operation, operations_to_wire
from ..ops import ApplyReport, OperationExecutor
from ..sheets import ContextSerializer, GoogleSheetsHost, SimulatedHost, SpreadsheetHost
from .prompts import build_system_prompt

logger = logging.getLogger(__name__)

PREPARED_MESSAGE = "I have prepared the changes for you."
APPLIED_MESSAGE = "✅ Changes applied successfully!"
CONNECTION_TEST_MESSAGE = 'Say "Hello"'


def recent_history(messages: list[ConversationTurn], window: int) -> list[ConversationTurn]:
    """The last ``window`` messages, starting at a user turn."""
    recent = messages[-window:] if window else []
    while recent and recent[0].role != "user":
        recent = recent[1:]
    return recent


class TurnState(str, Enum):
    """Where the assistant is in the current turn."""

    IDLE = "idle"
    SERIALIZING = "serializing"
    AWAITING_RESPONSE = "awaiting_response"
    NORMALIZING = "normalizing"
    PENDING = "pending"
    APPLYING = "applying"


class ChatReply(BaseModel):
    """Result of one chat turn."""

    text: str
    operations: list[dict] = Field(default_factory=list)
    usage: Optional[dict] = None
    superseded: bool = False


class Assistant:
    """Runs chat turns against a provider and holds the proposed operations."""

    def __init__(
        self,
        host: Optional[SpreadsheetHost] = None,
        memory_store: Optional[MemoryStore] = None,
        adapter_factory: Optional[AdapterFactory] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or default_settings
        self.host = host or self._create_host()
        self.memory_store = memory_store or MemoryStore(config=self.config)
        self.adapter_factory = adapter_factory or self._create_adapter
        self.serializer = ContextSerializer(
            self.host,
            max_rows=self.config.max_preview_rows,
            max_formulas=self.config.max_preview_formulas,
        )
        self.executor = OperationExecutor(self.host)

        self.state = TurnState.IDLE
        self.pending_operations: list[Operation] = []
        self._turn = 0

    def _create_host(self) -> SpreadsheetHost:
        """Create the spreadsheet host based on configuration."""
        if self.config.spreadsheet_host == "gsheets":
            if not self.config.spreadsheet_id:
                raise ValueError("SPREADSHEET_ID is required when SPREADSHEET_HOST is 'gsheets'")
            return GoogleSheetsHost(self.config.spreadsheet_id)
        if self.config.spreadsheet_host != "simulated":
            raise ValueError(f"Unknown spreadsheet host: {self.config.spreadsheet_host}")
        return SimulatedHost()

    def _create_adapter(self, provider: str, api_key: str, model: Optional[str]) -> ProviderAdapter:
        return create_adapter(provider, api_key, model, self.config)

    async def initialize(self):
        """Initialize the assistant (database, etc.)."""
        await self.memory_store.initialize()

    async def shutdown(self):
        """Shutdown the assistant."""
        await self.memory_store.close()

    async def _require_settings(self) -> ChatSettings:
        chat_settings = await self.memory_store.get_settings()
        if not chat_settings.has_api_key:
            raise MissingCredentialError(chat_settings.provider)
        return chat_settings

    async def chat(self, message: str) -> ChatReply:
        """Run one chat turn.

        Proposed operations replace the pending batch; nothing is applied
        until ``apply_pending`` is called. A response that arrives after a
        newer turn started is dropped.
        """
        chat_settings = await self._require_settings()
        adapter = self.adapter_factory(
            chat_settings.provider, chat_settings.api_key, chat_settings.model
        )

        self._turn += 1
        turn = self._turn
        self.pending_operations = []

        try:
            self.state = TurnState.SERIALIZING
            context = await asyncio.to_thread(self.serializer.build)
            system_prompt = build_system_prompt(context, native_tools=adapter.supports_tools)

            stored = await self.memory_store.get_messages()
            history = recent_history(stored, self.config.history_window)
            history.append(ConversationTurn(role="user", content=message))

            self.state = TurnState.AWAITING_RESPONSE
            logger.info(
                f"Turn {turn}: sending {len(history)} message(s) to "
                f"{chat_settings.provider} ({adapter.model})"
            )
            response = await asyncio.to_thread(adapter.send, history, system_prompt)
        except Exception:
            if turn == self._turn:
                self.state = TurnState.IDLE
            raise

        if turn != self._turn:
            logger.info(f"Turn {turn}: dropping response superseded by turn {self._turn}")
            return ChatReply(text=response.text, usage=response.usage, superseded=True)

        self.state = TurnState.NORMALIZING
        self.pending_operations = list(response.operations)
        text = response.text or (PREPARED_MESSAGE if self.pending_operations else "")

        await self.memory_store.save_messages(
            stored
            + [
                ConversationTurn(role="user", content=message),
                ConversationTurn(role="assistant", content=text),
            ]
        )

        self.state = TurnState.PENDING if self.pending_operations else TurnState.IDLE
        return ChatReply(
            text=text,
            operations=operations_to_wire(self.pending_operations)["operations"],
            usage=response.usage,
        )

    async def apply_pending(self) -> ApplyReport:
        """Apply the pending operations against the host."""
        if not self.pending_operations:
            return ApplyReport(simulated=not self.host.is_live)

        operations = self.pending_operations
        self.pending_operations = []
        self.state = TurnState.APPLYING
        try:
            report = await asyncio.to_thread(self.executor.apply, operations)
        finally:
            self.state = TurnState.IDLE

        if report.success:
            stored = await self.memory_store.get_messages()
            await self.memory_store.save_messages(
                stored + [ConversationTurn(role="assistant", content=APPLIED_MESSAGE)]
            )
        return report

    def discard_pending(self) -> int:
        """Drop the pending operations without applying them."""
        count = len(self.pending_operations)
        self.pending_operations = []
        if self.state == TurnState.PENDING:
            self.state = TurnState.IDLE
        logger.info(f"Discarded {count} pending operation(s)")
        return count

    async def reset_conversation(self):
        """Clear history and pending operations; in-flight responses are dropped."""
        self._turn += 1
        self.pending_operations = []
        self.state = TurnState.IDLE
        await self.memory_store.clear_messages()

    async def test_connection(self) -> bool:
        """Check that the configured provider answers a trivial prompt."""
        chat_settings = await self._require_settings()
        adapter = self.adapter_factory(
            chat_settings.provider, chat_settings.api_key, chat_settings.model
        )
        history = [ConversationTurn(role="user", content=CONNECTION_TEST_MESSAGE)]
        try:
            response = await asyncio.to_thread(
                adapter.send, history, build_system_prompt("", adapter.supports_tools)
            )
        except SheetMateError as e:
            logger.warning(f"Connection test failed for {chat_settings.provider}: {e}")
            return False
        return len(response.text) > 0

    async def list_models(self) -> list[dict]:
        """Models offered by the configured provider."""
        chat_settings = await self.memory_store.get_settings()
        adapter = self.adapter_factory(
            chat_settings.provider, chat_settings.api_key or "", chat_settings.model
        )
        list_models = getattr(adapter, "list_models", None)
        if list_models is None:
            return [{"id": adapter.model, "name": adapter.model}]
        return await asyncio.to_thread(list_models)
