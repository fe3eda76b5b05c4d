from .client import ChatCompletionClient, LLMNotConfiguredError, LLMRequestError, LLMResponseFormatError
from .invoker import InvokeOptions, LLMInvoker

__all__ = [
    "ChatCompletionClient",
    "InvokeOptions",
    "LLMInvoker",
    "LLMNotConfiguredError",
    "LLMRequestError",
    "LLMResponseFormatError",
]
