"""Provider-specific adapter implementations."""

from ame.core.interface.adapters.anthropic import AnthropicAdapter
from ame.core.interface.adapters.bedrock import BedrockAdapter
from ame.core.interface.adapters.deepseek import DeepSeekAdapter
from ame.core.interface.adapters.google import GoogleAdapter
from ame.core.interface.adapters.openai import ChatCompletionsAdapter, OpenAIAdapter

__all__ = [
    "AnthropicAdapter",
    "BedrockAdapter",
    "ChatCompletionsAdapter",
    "DeepSeekAdapter",
    "GoogleAdapter",
    "OpenAIAdapter",
]
