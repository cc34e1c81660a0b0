"""Interactive terminal chat with OpenAI models, with per-turn token and cost accounting.

Features
--------
1. Context control: by default every message starts a fresh conversation. Prefix a message
   with `|` to keep the previous context for that message, or toggle `:context` to carry
   context between all messages.
2. Model switching: change the model mid-conversation with `:model 3|4|4t` (or via `--model`).
3. Usage accounting: after each reply the prompt/completion token counts and an estimated
   price are printed.

Run `python -m pipechat` or use the `pipechat` console script.
"""
# Re-export useful symbols for convenience
from .core import (
    ConversationContext,
    PricingTable,
    SessionConfig,
    SUPPORTED_MODELS,
    StreamAggregator,
    TokenAccountant,
    Turn,
)
from .core.client import OpenAIClientWrapper
from .cli import ChatCLI, run_cli

__all__ = [
    "ConversationContext",
    "PricingTable",
    "SessionConfig",
    "SUPPORTED_MODELS",
    "StreamAggregator",
    "TokenAccountant",
    "Turn",
    "OpenAIClientWrapper",
    "ChatCLI",
    "run_cli",
]
