"""Fire-and-forget trace emission to the observability API.

Each record is POSTed from a detached asyncio task. The execution never
awaits delivery: failures and non-2xx responses are only logged. Call
:meth:`TraceEmitter.drain` (or :meth:`TraceEmitter.aclose`) at shutdown to
let outstanding deliveries finish.
"""

import asyncio
import logging
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ame.core.tracing.config import TracingConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class _TraceRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TraceModel(_TraceRecord):
    """Model identity attached to a turn trace."""

    provider: str
    name: str
    metadata: dict[str, Any] = {}


class TurnTrace(_TraceRecord):
    """One adapter invocation."""

    type: Literal["turn"] = "turn"
    manifest: dict[str, Any]
    variables: dict[str, Any]
    messages: list[dict[str, Any]]
    output: dict[str, Any] | None
    input_tokens: int
    output_tokens: int
    total_tokens: int
    cost: float
    duration: int
    model: TraceModel
    tools: list[dict[str, Any]] = []
    status: str = "completed"
    metadata: dict[str, Any] = {}


class ToolTrace(_TraceRecord):
    """One built-in tool execution."""

    type: Literal["tool"] = "tool"
    tool_name: str
    input: Any
    output: Any
    duration: int
    status: str


class TraceEmitter:
    """Dispatches turn and tool traces when tracing is configured.

    With tracing disabled every ``emit_*`` call is a no-op returning ``None``.
    """

    def __init__(
        self,
        config: TracingConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or TracingConfig()
        self._client = client
        self._owns_client = client is None
        self._pending: set[asyncio.Task[None]] = set()
        self._warned_incomplete = False

    @property
    def active(self) -> bool:
        """Whether records will actually be sent."""
        if not self.config.enabled:
            return False
        if not self.config.complete:
            if not self._warned_incomplete:
                logger.warning(
                    "Tracing enabled but missing required config (api_url, tenant_id, service_key)"
                )
                self._warned_incomplete = True
            return False
        return True

    @property
    def pending(self) -> int:
        return len(self._pending)

    def emit_turn(self, record: TurnTrace) -> asyncio.Task[None] | None:
        return self._dispatch(record)

    def emit_tool(self, record: ToolTrace) -> asyncio.Task[None] | None:
        return self._dispatch(record)

    def _dispatch(self, record: _TraceRecord) -> asyncio.Task[None] | None:
        if not self.active:
            return None
        payload = {
            "promptName": self.config.prompt_name or "unknown",
            "executionId": self.config.execution_id or "unknown",
            **record.to_payload(),
            **self.config.filters.flattened(),
        }
        task = asyncio.get_running_loop().create_task(self._send(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send(self, payload: dict[str, Any]) -> None:
        headers = {
            "Authorization": f"Bearer {self.config.service_key}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http().post(self.config.url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Failed to send %s trace: %s", payload.get("type"), exc)
            return
        if response.is_error:
            logger.warning(
                "Trace rejected with status %d: %s", response.status_code, response.text
            )
        else:
            logger.debug("Trace sent (%s)", payload.get("type"))

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECONDS)
        return self._client

    async def drain(self) -> None:
        """Wait for every outstanding delivery to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        """Drain deliveries and close the HTTP client if this emitter created it."""
        await self.drain()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
