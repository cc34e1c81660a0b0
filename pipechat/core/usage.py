"""Token counting and cost estimation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import tiktoken

from .errors import TokenizerUnavailableError, UnpricedModelError
from .session import Turn

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"

# (input, output) price per thousand tokens.
PRICES_PER_1K: Dict[str, Tuple[float, float]] = {
    "gpt-3.5-turbo": (0.1, 0.2),
    "gpt-4": (3.0, 6.0),
    "gpt-4-turbo": (1.0, 3.0),
}


class TokenAccountant:
    """Count tokens with a :mod:`tiktoken` encoding.

    The encoding is loaded once; if that fails the accountant cannot be
    built at all and :class:`TokenizerUnavailableError` is raised.
    """

    def __init__(self, encoding=None, encoding_name: str = DEFAULT_ENCODING):
        if encoding is None:
            try:
                encoding = tiktoken.get_encoding(encoding_name)
            except Exception as exc:
                raise TokenizerUnavailableError(
                    f"Could not load tokenizer encoding '{encoding_name}': {exc}"
                ) from exc
        self._encoding = encoding

    def count(self, text: str) -> int:
        return len(self._encoding.encode(text, allowed_special="all"))

    def count_sequence(self, turns: Iterable[Turn]) -> int:
        """Sum of :meth:`count` over *turns*; role overhead is not modelled."""
        return sum(self.count(turn.text) for turn in turns)


class PricingTable:
    """Per-token rates keyed by model id."""

    def __init__(self, prices_per_1k: Optional[Dict[str, Tuple[float, float]]] = None):
        prices = PRICES_PER_1K if prices_per_1k is None else prices_per_1k
        self._rates = {
            model: (rate_in / 1_000, rate_out / 1_000)
            for model, (rate_in, rate_out) in prices.items()
        }

    def __contains__(self, model: str) -> bool:
        return model in self._rates

    def price(self, model: str, input_tokens: int, output_tokens: int) -> float:
        try:
            rate_in, rate_out = self._rates[model]
        except KeyError:
            raise UnpricedModelError(model) from None
        return input_tokens * rate_in + output_tokens * rate_out


@dataclass(frozen=True)
class UsageSummary:
    prompt_tokens: int
    completion_tokens: int
    price: Optional[float]

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @classmethod
    def compute(
        cls,
        pricing: PricingTable,
        model: str,
        prompt_tokens: int,
        completion_tokens: int,
    ) -> "UsageSummary":
        try:
            price: Optional[float] = pricing.price(model, prompt_tokens, completion_tokens)
        except UnpricedModelError as exc:
            logger.warning("%s", exc)
            price = None
        return cls(prompt_tokens, completion_tokens, price)

    def render(self) -> str:
        price = "n/a" if self.price is None else f"{self.price:.5f}p"
        return (
            f"Prompt Tokens: {self.prompt_tokens} | "
            f"Completion Tokens: {self.completion_tokens} | "
            f"Total Tokens: {self.total_tokens} | "
            f"Price: {price}"
        )
