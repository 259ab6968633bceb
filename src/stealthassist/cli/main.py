"""stealth-assist CLI (Typer)."""

import base64
import json
import logging
from pathlib import Path

import typer

from stealthassist.config import AppConfig
from stealthassist.exceptions import StealthAssistError
from stealthassist.logging_config import setup_file_logging, setup_logging
from stealthassist.models import (
    ChatMessage,
    ContextSettings,
    ConversationContext,
    LLMResult,
    Mode,
    SubscriptionTier,
)
from stealthassist.services.assistant import AssistantService

logger = logging.getLogger(__name__)

app = typer.Typer(help="Overlay assistant back end: chat with Claude, GPT-4, Gemini or Grok")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
) -> None:
    """Overlay assistant back end."""
    level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level)
    setup_file_logging(_get_config().log_dir)


def _get_config() -> AppConfig:
    return AppConfig()


def _get_assistant() -> AssistantService:
    return AssistantService.from_config(_get_config())


def _handle_error(e: Exception | str) -> None:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(code=1)


def _read_image(path: Path) -> str:
    if not path.exists():
        _handle_error(f"image not found: {path}")
    return base64.b64encode(path.read_bytes()).decode("ascii")


def _load_history(path: Path | None) -> list[ChatMessage]:
    """History file: JSON list of {"sender": "user"|"assistant", "content": "..."}."""
    if path is None:
        return []
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        _handle_error(f"cannot read history file {path}: {e}")
    if not isinstance(raw, list) or not all(isinstance(m, dict) for m in raw):
        _handle_error(f"history file {path} must contain a JSON list of message objects")
    return [ChatMessage.from_dict(m) for m in raw]


def _print_result(assistant: AssistantService, result: LLMResult) -> None:
    if result.error:
        typer.echo(result.response, err=True)
        raise typer.Exit(code=1)
    typer.echo(result.response)
    logger.debug("Answered by %s (%s) at %s", result.provider, result.model, result.timestamp)
    report = assistant.token_report()
    if report:
        typer.echo(report, err=True)


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send"),
    provider: str | None = typer.Option(
        None, "--provider", "-p", help="claude | gpt4 | gemini | grok (default: settings)"
    ),
    mode: Mode | None = typer.Option(None, "--mode", "-m", help="Assistant mode"),
    screenshot: Path | None = typer.Option(None, "--screenshot", help="PNG to attach"),
    history: Path | None = typer.Option(None, "--history", help="JSON file of prior messages"),
) -> None:
    """Send a chat message."""
    assistant = _get_assistant()
    provider = provider or assistant.get_settings().default_provider
    context = ConversationContext(
        recent_messages=_load_history(history),
        screenshot=_read_image(screenshot) if screenshot else None,
        settings=ContextSettings(mode=mode),
    )
    try:
        result = assistant.send_to_llm(provider, message, context)
    except StealthAssistError as e:
        _handle_error(e)
    _print_result(assistant, result)


@app.command()
def analyze(
    image: Path = typer.Argument(..., help="PNG image to analyze"),
    provider: str | None = typer.Option(None, "--provider", "-p"),
    question: str = typer.Option("", "--question", "-q"),
) -> None:
    """Ask a vision-capable provider about an image."""
    assistant = _get_assistant()
    provider = provider or assistant.get_settings().default_provider
    image_base64 = _read_image(image)
    try:
        result = assistant.analyze_image(provider, image_base64, question)
    except StealthAssistError as e:
        _handle_error(e)
    _print_result(assistant, result)


@app.command("set-key")
def set_key(
    provider: str = typer.Argument(..., help="claude | gpt4 | gemini | grok"),
    api_key: str = typer.Argument(..., help="API key (empty string clears it)"),
    base_url: str | None = typer.Option(None, "--base-url", help="Endpoint override (Grok)"),
) -> None:
    """Store an API key for a provider."""
    assistant = _get_assistant()
    try:
        assistant.set_credential(provider, api_key, base_url)
    except StealthAssistError as e:
        _handle_error(e)
    typer.echo(f"Saved. Configured providers: {', '.join(assistant.list_configured_providers())}")


@app.command()
def providers() -> None:
    """List providers with a stored API key."""
    names = _get_assistant().list_configured_providers()
    if not names:
        typer.echo("No providers configured. Use 'set-key' to add one.")
        return
    for name in names:
        typer.echo(name)


@app.command()
def tier(
    new_tier: SubscriptionTier | None = typer.Argument(None, help="Tier to switch to"),
) -> None:
    """Show or change the subscription tier."""
    assistant = _get_assistant()
    if new_tier is None:
        typer.echo(assistant.get_subscription_tier().value)
        return
    assistant.set_subscription_tier(new_tier)
    typer.echo(f"Tier set to {new_tier.value}")


@app.command()
def usage() -> None:
    """Show today's and this month's call counts against the tier limits."""
    assistant = _get_assistant()
    typer.echo(f"Tier: {assistant.get_subscription_tier().value}")
    for row in assistant.usage_snapshot():
        daily_limit = row["daily_limit"] if row["daily_limit"] is not None else "∞"
        monthly_limit = row["monthly_limit"] if row["monthly_limit"] is not None else "∞"
        typer.echo(
            f"  {row['display_name']}: {row['daily']}/{daily_limit} today, "
            f"{row['monthly']}/{monthly_limit} this month"
        )


@app.command()
def settings() -> None:
    """Print the stored display settings."""
    typer.echo(json.dumps(_get_assistant().get_settings().to_dict(), indent=2))
