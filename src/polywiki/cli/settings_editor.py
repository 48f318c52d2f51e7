"""Interactive editing of provider credentials and model choice."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.prompt import Prompt

from polywiki.config.settings import ProviderSettings, load_settings, update_settings
from polywiki.providers.base import ModelChoice

console = Console()
logger = logging.getLogger(__name__)


def _mask(secret: str) -> str:
    if not secret:
        return "(empty)"
    return f"{secret[:4]}…{secret[-2:]}" if len(secret) > 8 else "****"


def edit_settings_command() -> ProviderSettings:
    """Prompt for each setting, save on change, and return the stored result."""
    current = load_settings()
    console.print("[bold]Edit Settings[/bold]\n")
    console.print(f"Gemini key: {_mask(current.gemini_api_key)}")
    console.print(f"OpenRouter key: {_mask(current.openrouter_api_key)}")
    console.print(f"Cerebras key: {_mask(current.cerebras_api_key)}")
    console.print(f"Model: {current.selected_model}")

    gemini_key = Prompt.ask(
        "Gemini API key", default=current.gemini_api_key, password=True
    )
    openrouter_key = Prompt.ask(
        "OpenRouter API key", default=current.openrouter_api_key, password=True
    )
    cerebras_key = Prompt.ask(
        "Cerebras API key", default=current.cerebras_api_key, password=True
    )
    model = Prompt.ask(
        "Model",
        choices=[choice.value for choice in ModelChoice],
        default=ModelChoice.parse(current.selected_model).value,
    )

    updated = current.with_changes(
        gemini_api_key=gemini_key.strip(),
        openrouter_api_key=openrouter_key.strip(),
        cerebras_api_key=cerebras_key.strip(),
        selected_model=model,
    )
    if updated == current:
        console.print("[dim]No changes.[/dim]")
        return current
    saved = update_settings(
        gemini_api_key=updated.gemini_api_key,
        openrouter_api_key=updated.openrouter_api_key,
        cerebras_api_key=updated.cerebras_api_key,
        selected_model=updated.selected_model,
    )
    logger.debug("settings editor saved selected_model=%s", saved.selected_model)
    console.print("[green]Settings saved.[/green]")
    return saved
