"""Interactive terminal REPL: command handling and the per-turn loop."""
from __future__ import annotations

import argparse
import logging
import os
import sys
import readline  # noqa: F401 – side-effect: history & line editing
from typing import Optional

from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from openai import OpenAI  # type: ignore

from .core import (
    ConversationContext,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    PricingTable,
    SessionConfig,
    StreamAggregator,
    SUPPORTED_MODELS,
    TokenAccountant,
    TokenizerUnavailableError,
    UsageSummary,
    resolve_model,
)
from .core.client import OpenAIClientWrapper
from .core.session import MAX_TOKENS_LIMIT
from .utils import (
    Ansi,
    WARNING_LABEL,
    console,
    model_prompt,
)

logger = logging.getLogger(__name__)

COMMAND_MARKER = ":"
CONTINUATION_MARKER = "|"

HELP_TEXT = (
    "Commands:\n"
    " 1) :quit (q) - quits the program\n"
    " 2) :context (c) - toggles between keeping context and discarding it between messages.\n"
    " 3) :model (m) [3|4|4t] - switches model (3 = gpt-3.5-turbo, 4 = gpt-4, 4t = gpt-4-turbo)\n"
    " 4) :help (h) - shows this list\n"
    f"Prefix a message with '{CONTINUATION_MARKER}' to keep the previous context for that message only.\n"
)


class ChatCLI:
    """High-level orchestration class for the interactive REPL.

    Owns the session configuration and the conversation log; neither is
    shared with any other object beyond a single call.
    """

    def __init__(
        self,
        client_wrapper: OpenAIClientWrapper,
        accountant: TokenAccountant,
        config: Optional[SessionConfig] = None,
        pricing: Optional[PricingTable] = None,
    ):
        self.client = client_wrapper
        self.accountant = accountant
        self.config = config or SessionConfig()
        self.pricing = pricing or PricingTable()
        self.context = ConversationContext()
        self._commands = {
            "q": self._cmd_quit,
            "quit": self._cmd_quit,
            "c": self._cmd_context,
            "context": self._cmd_context,
            "m": self._cmd_model,
            "model": self._cmd_model,
            "h": self._cmd_help,
            "help": self._cmd_help,
        }

    # ---------------- Command handling ---------------

    def handle_command(self, line: str) -> None:
        """Dispatch a ``:``-prefixed command line.

        Matching is case-insensitive. Everything after the command name is
        joined into a single argument string.
        """
        parts = line.strip().lower().split()
        if not parts:
            return

        name = parts[0][len(COMMAND_MARKER):] if parts[0].startswith(COMMAND_MARKER) else parts[0]
        arg = "".join(parts[1:]).strip()

        handler = self._commands.get(name)
        if handler is None:
            console.print(
                Ansi.style("Unknown command. Use :help to see a list of commands.", Ansi.FG_RED)
            )
            return
        handler(arg)

    def _cmd_quit(self, arg: str) -> None:
        sys.exit(0)

    def _cmd_context(self, arg: str) -> None:
        carry = self.config.toggle_context()
        logger.debug("carry_context=%s", carry)
        if carry:
            console.print("Context will now be carried between messages.")
        else:
            console.print(
                "Context will no longer be carried between messages.\n"
                f"Prefix messages with '{CONTINUATION_MARKER}' to temporarily keep context."
            )

    def _cmd_model(self, arg: str) -> None:
        model = SUPPORTED_MODELS.get(arg)
        if model is None:
            options = ", ".join(SUPPORTED_MODELS)
            console.print(
                Ansi.style("Unknown model. Please try again.", Ansi.FG_RED),
                f"Possible Options: {options}.",
                sep="\n",
            )
            return
        self.config.model = model
        logger.debug("model switched to %s", model)
        console.print(f"Swapped to model {model}.")

    def _cmd_help(self, arg: str) -> None:
        console.print(HELP_TEXT, markup=False)

    # ---------------- Turn processing ---------------

    def process_turn(self, text: str, continuation: bool = False) -> UsageSummary:
        """Send *text* with the retained context, stream the reply and report usage."""
        outgoing = self.context.begin_turn(
            text,
            carry_context=self.config.carry_context,
            continuation=continuation,
        )
        prompt_tokens = self.accountant.count_sequence(outgoing)
        logger.debug("sending %d turn(s), %d prompt tokens", len(outgoing), prompt_tokens)

        fragments = self.client.stream_chat(
            model=self.config.model,
            max_tokens=self.config.max_output_tokens,
            turns=outgoing,
        )
        reply = StreamAggregator(console).run(fragments)
        console.print()
        console.print()

        self.context.add_assistant(reply)
        completion_tokens = self.accountant.count(reply)

        summary = UsageSummary.compute(
            self.pricing, self.config.model, prompt_tokens, completion_tokens
        )
        console.print(summary.render(), markup=False, highlight=False)
        console.print()
        return summary

    # ---------------- Interaction loop ---------------

    def repl(self) -> None:
        """Run the interactive read–eval–print-loop."""
        console.print(Panel.fit("pipechat", style="bold magenta"))
        console.print(
            Ansi.style("Type your message and press Enter. Commands start with ':'.", Ansi.FG_YELLOW),
            Ansi.style("Type :help for help.", Ansi.FG_YELLOW),
            sep="\n",
        )

        while True:
            try:
                line = console.input(model_prompt(self.config.model)).strip()
            except (EOFError, KeyboardInterrupt):
                console.print("\n[signal caught – exiting]", markup=False)
                break

            if not line:
                continue

            if line.startswith(COMMAND_MARKER):
                self.handle_command(line)
                continue

            continuation = line.startswith(CONTINUATION_MARKER)
            if continuation:
                line = line[len(CONTINUATION_MARKER):].strip()
                if not line:
                    continue

            self.process_turn(line, continuation=continuation)


# ---------------------------------------------------------------------------
# Entrypoint helpers (keeping it separate simplifies __main__ handling)
# ---------------------------------------------------------------------------

def _max_tokens(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if not 1 <= number <= MAX_TOKENS_LIMIT:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_TOKENS_LIMIT}")
    return number


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Interactive CLI for OpenAI chat models with token and cost accounting."
    )
    parser.add_argument(
        "--model", "-m",
        help=f"Model code or name ({', '.join(SUPPORTED_MODELS)}); default from PIPECHAT_DEFAULT_MODEL",
    )
    parser.add_argument(
        "--max-tokens",
        type=_max_tokens,
        default=DEFAULT_MAX_TOKENS,
        help=f"Maximum completion tokens per reply (default: {DEFAULT_MAX_TOKENS})",
    )
    parser.add_argument(
        "--context", "-c",
        action="store_true",
        help="Start with context carried between messages",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


def _select_model(requested: Optional[str]) -> str:
    value = requested or os.getenv("PIPECHAT_DEFAULT_MODEL")
    if value is None:
        return DEFAULT_MODEL
    model = resolve_model(value)
    if model is None:
        console.print(
            f"\\[{WARNING_LABEL}] model '{escape(value)}' is not in the supported list. "
            f"Falling back to default '{DEFAULT_MODEL}'."
        )
        return DEFAULT_MODEL
    return model


def run_cli(argv=None) -> None:
    args = _parse_args(argv)
    _setup_logging(args.verbose)

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        console.print("The environment variable 'OPENAI_API_KEY' must be set to use this program.")
        sys.exit(0)

    try:
        accountant = TokenAccountant()
    except TokenizerUnavailableError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(1)

    client_kwargs = {"api_key": api_key}
    base_url = os.getenv("OPENAI_BASE_URL")
    if base_url:
        client_kwargs["base_url"] = base_url

    client = OpenAI(**client_kwargs)  # type: ignore[arg-type]
    config = SessionConfig(
        model=_select_model(args.model),
        max_output_tokens=args.max_tokens,
        carry_context=args.context,
    )

    try:
        ChatCLI(OpenAIClientWrapper(client), accountant, config).repl()
    except KeyboardInterrupt:
        console.print("\n[interrupted]", markup=False)
        sys.exit(130)


if __name__ == "__main__":  # pragma: no cover
    run_cli()
