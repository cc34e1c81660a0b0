from .errors import PipechatError, TokenizerUnavailableError, UnpricedModelError
from .session import (
    ConversationContext,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    Role,
    SessionConfig,
    SUPPORTED_MODELS,
    Turn,
    resolve_model,
)
from .stream import Fragment, StreamAggregator
from .usage import PricingTable, TokenAccountant, UsageSummary

__all__ = [
    "ConversationContext",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MODEL",
    "Fragment",
    "PipechatError",
    "PricingTable",
    "Role",
    "SessionConfig",
    "StreamAggregator",
    "SUPPORTED_MODELS",
    "TokenAccountant",
    "TokenizerUnavailableError",
    "Turn",
    "UnpricedModelError",
    "UsageSummary",
    "resolve_model",
]
