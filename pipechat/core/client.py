"""OpenAI client wrapper turning a streamed chat completion into fragments."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Sequence

import openai
from openai import OpenAI  # type: ignore

from ..utils import Spinner
from .session import Turn
from .stream import Fragment

logger = logging.getLogger(__name__)


def to_messages(turns: Sequence[Turn]) -> List[Dict[str, Any]]:
    """Map conversation turns to the chat-completions message format."""
    return [{"role": turn.role.value, "content": turn.text} for turn in turns]


class OpenAIClientWrapper:
    """Thin wrapper around the OpenAI Python SDK hiding streaming details."""

    def __init__(self, client: OpenAI, show_spinner: bool = True):
        self.client = client
        self.show_spinner = show_spinner

    def stream_chat(
        self,
        model: str,
        max_tokens: int,
        turns: Sequence[Turn],
    ) -> Iterator[Fragment]:
        """Yield fragments for one streamed completion.

        SDK errors raised while opening or reading the stream are yielded as
        a single error fragment, after which the sequence ends.
        """
        params: Dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": to_messages(turns),
            "stream": True,
        }
        logger.debug("requesting %s with %d message(s)", model, len(turns))

        spinner = Spinner() if self.show_spinner else None
        if spinner is not None:
            spinner.start()
        try:
            response = self.client.chat.completions.create(**params)  # type: ignore[arg-type]
            for chunk in response:
                for choice in chunk.choices:
                    content = choice.delta.content
                    if not content:
                        continue
                    if spinner is not None:
                        spinner.stop()
                    yield Fragment.text(content)
        except openai.OpenAIError as e:
            if spinner is not None:
                spinner.stop()
            yield Fragment.failure(e)
        finally:
            if spinner is not None:
                spinner.stop()
