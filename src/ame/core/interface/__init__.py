"""Canonical message schema and provider adapters."""

from ame.core.interface.adapter import BaseAdapter, ProviderAdapter, ToolSpec, classify_tool
from ame.core.interface.config import (
    ApiKeyCredentials,
    BedrockCredentials,
    ModelConfig,
    ProviderCredentials,
)
from ame.core.interface.models import (
    AudioContent,
    ContentPart,
    ImageContent,
    InvokeResult,
    Message,
    TextContent,
    TokenUsage,
    ToolCall,
    ToolChoice,
    ToolResult,
)

__all__ = [
    "ApiKeyCredentials",
    "AudioContent",
    "BaseAdapter",
    "BedrockCredentials",
    "ContentPart",
    "ImageContent",
    "InvokeResult",
    "Message",
    "ModelConfig",
    "ProviderAdapter",
    "ProviderCredentials",
    "TextContent",
    "TokenUsage",
    "ToolCall",
    "ToolChoice",
    "ToolResult",
    "ToolSpec",
    "classify_tool",
]
