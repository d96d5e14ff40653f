"""AgentExecutor — drives one manifest execution through the tool loop.

One executor is constructed per run. It renders the prompt, invokes the
provider adapter, executes tool calls in order and feeds the results back
until a terminating tool succeeds, the run is cancelled, or the message
ceiling is reached. :meth:`AgentExecutor.execute` never raises for run
failures; they are reported on the returned :class:`ExecutionResult`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

from ame.core.errors import InfiniteLoopError, NoTerminatingToolError, RequiredVariableError
from ame.core.execution import builtins
from ame.core.execution.models import (
    ExecutionResult,
    ExecutorSettings,
    Usage,
    signals_abort,
)
from ame.core.interface.models import Message, ToolChoice, ToolResult
from ame.core.manifest.renderer import TemplateRenderer
from ame.core.pricing.cache import PricingCache, fetch_pricing
from ame.core.pricing.models import DEFAULT_PRICING
from ame.core.tracing.emitter import ToolTrace, TraceEmitter, TraceModel, TurnTrace
from ame.utils.telemetry import (
    ATTR_COST_USD,
    ATTR_MANIFEST,
    ATTR_MESSAGE_COUNT,
    ATTR_MODEL,
    ATTR_PROVIDER,
    ATTR_STATUS,
    ATTR_TOKENS_INPUT,
    ATTR_TOKENS_OUTPUT,
    ATTR_TOOL_BUILTIN,
    ATTR_TOOL_NAME,
    ATTR_TURN,
    get_tracer,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ame.core.execution.models import ToolCallCallback, ToolHandler
    from ame.core.interface.adapter import ProviderAdapter
    from ame.core.interface.models import AudioContent, ImageContent, TokenUsage, ToolCall
    from ame.core.manifest.models import Manifest
    from ame.core.pricing.models import ModelPricing, PricingSource
    from ame.core.tracing.config import TracingConfig

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)

CANCELLED_RESULT: dict[str, str] = {"status": "cancelled"}


class AgentExecutor:
    """Execute a validated :class:`Manifest` against a provider adapter.

    Args:
        manifest: The agent definition. Never mutated.
        adapter: Provider adapter built for the manifest's primary model.
        variables: Runtime bindings. Declared defaults fill the gaps.
        tool_router: Tool name to handler. Without one, the first response
            is returned directly unless it calls a scenario tool.
        on_tool_call: Awaited after every non-terminating tool execution
            with the call and its result payload. Returning
            ``{"abort": True}`` cancels the run.
        files: Image or audio parts appended to the user message.
        settings: Loop limits and tool-choice policy.
        tracing: Observability sink config; ignored if *emitter* is given.
        emitter: Pre-built trace emitter (shared client, tests).
        pricing_source: Catalog used to price the primary model.
        pricing_cache: Cache consulted before *pricing_source*.
    """

    def __init__(
        self,
        manifest: Manifest,
        adapter: ProviderAdapter,
        *,
        variables: Mapping[str, Any] | None = None,
        tool_router: Mapping[str, ToolHandler] | None = None,
        on_tool_call: ToolCallCallback | None = None,
        files: Sequence[ImageContent | AudioContent] | None = None,
        settings: ExecutorSettings | None = None,
        tracing: TracingConfig | None = None,
        emitter: TraceEmitter | None = None,
        pricing_source: PricingSource | None = None,
        pricing_cache: PricingCache | None = None,
    ) -> None:
        self.manifest = manifest
        self.adapter = adapter
        self.settings = settings or ExecutorSettings()
        self.variables = bind_variables(manifest, variables or {})
        self.tool_router: dict[str, ToolHandler] = dict(tool_router or {})
        self.on_tool_call = on_tool_call
        self.files = list(files or [])
        self.emitter = emitter or TraceEmitter(tracing)
        self.pricing_source = pricing_source
        self.pricing_cache = pricing_cache if pricing_cache is not None else PricingCache()
        self.renderer = TemplateRenderer(manifest.block_map, max_depth=self.settings.max_render_depth)

        self.messages: list[Message] = []
        self._cancelled = False
        self._tool_errors: dict[str, int] = {}
        self._turns = 0
        self._scenario_tools_used = False
        self._pricing: ModelPricing | None = None
        self._pricing_task: asyncio.Task[ModelPricing | None] | None = None

        self._start_pricing_fetch()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def turns(self) -> int:
        """Number of adapter invocations so far."""
        return self._turns

    def cancel(self) -> bool:
        """Request cooperative cancellation at the next check point."""
        self._cancelled = True
        return True

    def tool_error_count(self, name: str) -> int:
        return self._tool_errors.get(name, 0)

    def render_prompts(self) -> tuple[str, str]:
        """Return the rendered ``(system, user)`` prompt text."""
        return (
            self.renderer.render(self.manifest.system, self.variables),
            self.renderer.render(self.manifest.user, self.variables),
        )

    async def execute(self) -> ExecutionResult:
        """Run the manifest to completion and report the outcome."""
        usage = Usage()
        primary = self.manifest.primary_model
        with _tracer.start_as_current_span("agent.execute") as span:
            span.set_attribute(ATTR_MANIFEST, self.manifest.name)
            span.set_attribute(ATTR_PROVIDER, primary.provider)
            span.set_attribute(ATTR_MODEL, primary.name)
            try:
                result = await self._run(usage)
            except Exception as exc:
                logger.error("Execution of '%s' failed: %s", self.manifest.name, exc)
                span.set_attribute(ATTR_STATUS, "failed")
                span.record_exception(exc)
                span.set_status(trace.StatusCode.ERROR, str(exc))
                self._cancel_pricing_fetch()
                return ExecutionResult(
                    ok=False,
                    usage=usage,
                    messages=list(self.messages),
                    error=str(exc),
                )

            span.set_attribute(ATTR_TOKENS_INPUT, usage.input_tokens)
            span.set_attribute(ATTR_TOKENS_OUTPUT, usage.output_tokens)
            span.set_attribute(ATTR_COST_USD, usage.total_cost_usd)

            if self._cancelled:
                logger.info("Execution of '%s' cancelled", self.manifest.name)
                span.set_attribute(ATTR_STATUS, "cancelled")
                self._cancel_pricing_fetch()
                return ExecutionResult(
                    ok=False,
                    usage=usage,
                    result=dict(CANCELLED_RESULT),
                    messages=list(self.messages),
                )

            logger.info(
                "Execution of '%s' complete after %d turn(s): %d in / %d out tokens, $%.6f",
                self.manifest.name,
                self._turns,
                usage.input_tokens,
                usage.output_tokens,
                usage.total_cost_usd,
            )
            span.set_attribute(ATTR_STATUS, "completed")
            return ExecutionResult(ok=True, usage=usage, result=result, messages=list(self.messages))

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def _run(self, usage: Usage) -> Any:
        self._validate_variables()
        self._start_pricing_fetch()
        if self._cancelled:
            return None

        self.messages = self._initial_messages()
        message = await self._invoke_turn(usage, self.settings.initial_tool_choice)

        if not self.tool_router and not self._calls_scenario_tool(message):
            logger.debug("No tool router supplied, returning first response directly")
            if message.tool_calls:
                return message.tool_calls[0].arguments
            return message.text

        return await self._run_tool_loop(message, usage)

    async def _run_tool_loop(self, message: Message, usage: Usage) -> Any:
        terminating = set(self.settings.terminating_tools)

        while self.adapter.has_tool_calls(message):
            if self._cancelled:
                return None
            if len(self.messages) >= self.settings.max_messages:
                raise InfiniteLoopError(self.settings.max_messages)

            calls = message.tool_calls or []
            logger.debug("Processing %d tool call(s)", len(calls))
            forced: str | None = None
            finished: ToolCall | None = None

            for call in calls:
                result = await self._execute_tool(call)
                self.messages.append(Message.tool(result))
                if result.force_next_tool:
                    forced = result.force_next_tool

                if call.name in terminating:
                    # without a handler the payload is the model's own arguments
                    if result.rejected and call.name in self.tool_router:
                        logger.info("Terminating tool '%s' rejected, continuing", call.name)
                    elif finished is None:
                        finished = call
                    continue

                if self.on_tool_call is not None:
                    if self._cancelled:
                        return None
                    response = await self.on_tool_call(call, result.content)
                    if signals_abort(response):
                        logger.info("Tool-call callback signalled abort after '%s'", call.name)
                        self._cancelled = True
                        return None

            if self._cancelled:
                return None
            if finished is not None:
                logger.debug("Terminating tool '%s' accepted", finished.name)
                return finished.arguments

            choice = ToolChoice.tool(forced) if forced else self.settings.loop_tool_choice
            message = await self._invoke_turn(usage, choice)
            if not self.adapter.has_tool_calls(message):
                logger.warning("Agent responded without tool calls: %r", message.text[:200])

        if self._cancelled:
            return None
        raise NoTerminatingToolError()

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def _validate_variables(self) -> None:
        for name in self.manifest.required_variables:
            if self.variables.get(name) is None:
                raise RequiredVariableError(name)

    def _initial_messages(self) -> list[Message]:
        system_text, user_text = self.render_prompts()
        return [
            Message.system(system_text),
            Message.user(user_text, attachments=list(self.files)),
        ]

    async def _invoke_turn(self, usage: Usage, tool_choice: ToolChoice) -> Message:
        tools = list(self.manifest.tools)
        turn_number = self._turns + 1
        with _tracer.start_as_current_span("adapter.invoke") as span:
            span.set_attribute(ATTR_PROVIDER, self.adapter.provider)
            span.set_attribute(ATTR_MODEL, self.adapter.model.name)
            span.set_attribute(ATTR_TURN, turn_number)
            span.set_attribute(ATTR_MESSAGE_COUNT, len(self.messages))

            started = time.perf_counter()
            invoked = await self.adapter.invoke(
                list(self.messages),
                tools=tools or None,
                tool_choice=tool_choice if tools else None,
            )
            duration_ms = int((time.perf_counter() - started) * 1000)

            span.set_attribute(ATTR_TOKENS_INPUT, invoked.usage.input_tokens)
            span.set_attribute(ATTR_TOKENS_OUTPUT, invoked.usage.output_tokens)

        self._turns = turn_number
        pricing = await self._resolve_pricing()
        usage.add(invoked.usage)
        usage.total_cost_usd = pricing.cost(usage.input_tokens, usage.output_tokens)
        self.messages.append(invoked.message)

        logger.debug(
            "Turn %d: %d ms, %d in / %d out tokens, %d tool call(s)",
            turn_number,
            duration_ms,
            invoked.usage.input_tokens,
            invoked.usage.output_tokens,
            len(invoked.message.tool_calls or []),
        )

        if self.emitter.active:
            self._trace_turn(invoked.message, invoked.usage, pricing, duration_ms)
        return invoked.message

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def _execute_tool(self, call: ToolCall) -> ToolResult:
        handler = self.tool_router.get(call.name)
        with _tracer.start_as_current_span("tool.execute") as span:
            span.set_attribute(ATTR_TOOL_NAME, call.name)
            if call.name in builtins.SCENARIO_TOOLS:
                span.set_attribute(ATTR_TOOL_BUILTIN, True)
                content = self._run_scenario_tool(call)
            elif handler is not None:
                span.set_attribute(ATTR_TOOL_BUILTIN, False)
                content = await self._call_handler(call, handler)
            elif call.name in self.settings.terminating_tools:
                span.set_attribute(ATTR_TOOL_BUILTIN, True)
                content = dict(call.arguments)
            else:
                logger.warning("Tool '%s' not found", call.name)
                content = builtins.tool_not_found(call.name)

            result = ToolResult(tool_call_id=call.id, name=call.name, content=content)
            span.set_attribute(ATTR_STATUS, "rejected" if result.rejected else "completed")
        return result

    async def _call_handler(self, call: ToolCall, handler: ToolHandler) -> Any:
        try:
            content = await handler.execute(dict(call.arguments))
        except Exception as exc:
            count = self._tool_errors.get(call.name, 0) + 1
            self._tool_errors[call.name] = count
            if count >= self.settings.max_tool_errors:
                logger.error("Tool '%s' failed %d times, giving up: %s", call.name, count, exc)
                raise
            logger.warning(
                "Tool '%s' failed (%d/%d): %s", call.name, count, self.settings.max_tool_errors, exc
            )
            return builtins.rejection(builtins.TOOL_ERROR_MESSAGE)

        self._tool_errors[call.name] = 0
        return content

    def _run_scenario_tool(self, call: ToolCall) -> dict[str, Any]:
        self._scenario_tools_used = True
        started = time.perf_counter()
        if call.name == builtins.LIST_SCENARIOS_TOOL:
            content = builtins.list_scenarios(self.manifest.scenarios)
        else:
            content = builtins.scenario_instructions(self.manifest.scenarios, call.arguments)
        duration_ms = int((time.perf_counter() - started) * 1000)

        if self.emitter.active:
            status = "error" if content.get("error") else "completed"
            self.emitter.emit_tool(
                ToolTrace(
                    tool_name=call.name,
                    input=_json_safe(call.arguments),
                    output=content,
                    duration=duration_ms,
                    status=status,
                )
            )
        return content

    @staticmethod
    def _calls_scenario_tool(message: Message) -> bool:
        return any(c.name in builtins.SCENARIO_TOOLS for c in message.tool_calls or [])

    # ------------------------------------------------------------------
    # Pricing and tracing
    # ------------------------------------------------------------------

    def _start_pricing_fetch(self) -> None:
        if self._pricing_task is not None or self.pricing_source is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        model = self.manifest.primary_model
        self._pricing_task = loop.create_task(
            fetch_pricing(model.provider, model.name, self.pricing_source, self.pricing_cache)
        )

    def _cancel_pricing_fetch(self) -> None:
        if self._pricing_task is not None and not self._pricing_task.done():
            logger.debug("Cancelling pricing fetch for %s", self.manifest.primary_model.name)
            self._pricing_task.cancel()

    async def _resolve_pricing(self) -> ModelPricing:
        if self._pricing is None:
            fetched = await self._pricing_task if self._pricing_task is not None else None
            self._pricing = fetched or DEFAULT_PRICING
        return self._pricing

    def _trace_turn(
        self,
        output: Message,
        turn_usage: TokenUsage,
        pricing: ModelPricing,
        duration_ms: int,
    ) -> None:
        model = self.manifest.primary_model
        input_tokens, output_tokens = turn_usage.input_tokens, turn_usage.output_tokens
        # seed system/user messages and the output itself are not repeated
        history = self.messages[2:-1]
        self.emitter.emit_turn(
            TurnTrace(
                manifest=self.manifest.model_dump(mode="json", by_alias=True),
                variables=_json_safe(self.variables),
                messages=[m.model_dump(mode="json", exclude_none=True) for m in history],
                output=output.model_dump(mode="json", exclude_none=True),
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
                cost=pricing.cost(input_tokens, output_tokens),
                duration=duration_ms,
                model=TraceModel(
                    provider=model.provider,
                    name=model.name,
                    metadata=model.provider_params(),
                ),
                tools=list(self.manifest.tools),
                metadata={"turnNumber": self._turns},
            )
        )


def bind_variables(manifest: Manifest, variables: Mapping[str, Any]) -> dict[str, Any]:
    """Declared defaults overlaid with caller values; ``None`` counts as unbound."""
    bound = manifest.variable_defaults()
    bound.update({k: v for k, v in variables.items() if v is not None})
    return bound


def _json_safe(value: Any) -> Any:
    return json.loads(json.dumps(value, default=str))
