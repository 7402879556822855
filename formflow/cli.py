from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.table import Table

from formflow.graph.lint import FlowLinter, LintOptions, render_diagnostic
from formflow.graph.lint.diagnostics import sort_diagnostics
from formflow.graph.models import QuestionNode
from formflow.graph.schema import FormValidationError, load_form
from formflow.graph.session import ResponseSession, SessionError
from formflow.graph.templates import format_answer
from formflow.graph.values import normalize_value
from formflow.llm_client import build_llm_client
from formflow.logging_utils import configure_logging
from formflow.phrasing import TransitionPhraser
from formflow.settings import AppSettings, load_settings


LOGGER = logging.getLogger(__name__)
YES_WORDS = {"y", "yes", "true", "1"}
NO_WORDS = {"n", "no", "false", "0"}
SEVERITY_STYLES = {"error": "bold red", "warning": "yellow", "info": "dim"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="formflow", description="Check and play conversational form flows.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Lint a saved form definition.")
    check.add_argument("form", type=Path, help="Path to the form JSON file.")
    check.add_argument("--strict", action="store_true", help="Treat warnings as errors.")

    play = subparsers.add_parser("play", help="Answer a form interactively in the terminal.")
    play.add_argument("form", type=Path, help="Path to the form JSON file.")
    play.add_argument("--mode", choices=("live", "preview"), default="preview")
    play.add_argument("--ai", action="store_true", help="Use the LLM for greetings and transitions.")
    return parser


def read_form(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise FormValidationError(f"{path} does not contain a JSON object.")
    return payload


def run_check(console: Console, path: Path, *, strict: bool) -> int:
    result = FlowLinter().lint(read_form(path), LintOptions(strict=strict))

    if not result.diagnostics:
        console.print(f"[green]{path}: no problems found.[/green]")
        return 0

    for diagnostic in sort_diagnostics(result.diagnostics):
        console.print(render_diagnostic(diagnostic), style=SEVERITY_STYLES.get(diagnostic.severity), markup=False)

    summary = f"{len(result.errors)} error(s), {len(result.diagnostics) - len(result.errors)} warning(s)/note(s)"
    console.print(f"{path}: {summary}", style="bold red" if not result.ok else "bold")
    return 0 if result.ok else 1


def coerce_answer(raw: str, node: QuestionNode) -> object:
    """Turn terminal input into the answer value a form widget would produce."""
    text = raw.strip()
    if node.type == "boolean":
        lowered = text.lower()
        if lowered in YES_WORDS:
            return True
        if lowered in NO_WORDS:
            return False
        return None if not text else text
    if node.type in {"multipleChoice", "dropdown"} and node.options:
        if text.isdigit() and 1 <= int(text) <= len(node.options):
            return node.options[int(text) - 1]
        return text
    if node.type in {"rating", "slider", "date"}:
        return normalize_value(text, node.type) if text else None
    return raw


class FormPlayer:
    def __init__(self, console: Console, settings: AppSettings, *, mode: str, use_ai: bool) -> None:
        self.console = console
        self.settings = settings
        llm_client = build_llm_client(settings) if use_ai else None
        self.phraser = TransitionPhraser(llm_client, timeout_seconds=settings.phrasing_timeout_seconds)
        self.mode = mode
        self._prompt_session: PromptSession[str] = PromptSession(history=InMemoryHistory())

    async def play(self, payload: dict) -> int:
        graph = load_form(payload)
        session = ResponseSession(
            graph,
            mode=self.mode,
            phraser=self.phraser,
            max_text_length=self.settings.max_text_length,
        )
        first = await session.start()
        if first is None:
            self.console.print("Add some questions to your form to preview it.")
            return 0
        self.console.print(first.text, markup=False)

        while True:
            if session.status == "review":
                if not await self._review(session):
                    return 0
                continue
            if session.status in {"complete", "submitted"}:
                return 0

            node = session.current_node
            if node is None:
                return 0
            raw = await self._ask(node)
            if raw.strip() == "/quit":
                return 0

            result = await session.submit(coerce_answer(raw, node))
            if not result.accepted:
                self.console.print(result.error, style="red", markup=False)
                continue
            if result.message is not None:
                self.console.print(result.message.text, markup=False)

    async def _ask(self, node: QuestionNode) -> str:
        if node.help_text:
            self.console.print(node.help_text, style="dim", markup=False)
        completer = None
        if node.options:
            for index, option in enumerate(node.options, start=1):
                self.console.print(f"  {index}. {option}", markup=False)
            completer = WordCompleter(node.options, ignore_case=True)
        elif node.type == "boolean":
            completer = WordCompleter(["yes", "no"])
        return await self._prompt_session.prompt_async("> ", completer=completer)

    async def _review(self, session: ResponseSession) -> bool:
        table = Table(title="Review your answers")
        table.add_column("Question")
        table.add_column("Answer")
        table.add_column("Variable", style="dim")
        for node in session.graph.nodes:
            if node.variable_name in session.answers:
                table.add_row(node.question, format_answer(session.answers[node.variable_name], node.type), node.variable_name)
        self.console.print(table)

        command = (await self._prompt_session.prompt_async("/submit, /edit <variable> or /quit: ")).strip()
        if command == "/quit":
            return False
        if command.startswith("/edit "):
            try:
                session.edit_answer(command.split(maxsplit=1)[1])
            except SessionError as exc:
                self.console.print(str(exc), style="red", markup=False)
            return True
        if command == "/submit":
            answers = session.finalize()
            self.console.print(session.transcript[-1].text, markup=False)
            self.console.print_json(json.dumps(answers, default=str))
            return False
        return True


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    console = Console(highlight=False)

    try:
        if args.command == "check":
            return run_check(console, args.form, strict=args.strict)

        settings = load_settings()
        player = FormPlayer(console, settings, mode=args.mode, use_ai=args.ai or settings.use_ai)
        return asyncio.run(player.play(read_form(args.form)))
    except (OSError, json.JSONDecodeError, FormValidationError) as exc:
        LOGGER.debug("Command '%s' failed", args.command, exc_info=True)
        console.print(str(exc), style="bold red", markup=False)
        return 1
    except (EOFError, KeyboardInterrupt):
        console.print("\nInterrupted. Goodbye.")
        return 130


def run() -> None:
    sys.exit(main())
