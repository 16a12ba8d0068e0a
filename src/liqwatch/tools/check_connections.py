#!/usr/bin/env python3
"""Check connectivity to Coinglass and Telegram with the current settings."""
import asyncio
import sys
from typing import Dict
from rich.console import Console
from rich.panel import Panel
from liqwatch.config import Config, config
from liqwatch.core.fetcher import LiquidationFetcher
from liqwatch.infrastructure.error_handling import RetryPolicy
from liqwatch.monitoring.alerts import TelegramDispatcher
from liqwatch.utils import format_compact, format_full

TEST_MESSAGE = "liqwatch connection test: if you can read this, alerts will reach this chat."


def _mask(secret: str) -> str:
    if not secret or secret.startswith("YOUR_"):
        return "not configured"
    return f"{secret[:4]}…{secret[-2:]}" if len(secret) > 8 else "configured"


async def check_connections(cfg: Config, send_message: bool = True) -> Dict[str, bool]:
    """Probe the metric provider once and optionally send a test message."""
    console = Console()
    results = {"coinglass": False, "telegram": False}

    console.print(Panel(
        f"[yellow]Coinglass URL:[/yellow] {cfg.coinglass.base_url}\n"
        f"[yellow]  API Key:[/yellow] {_mask(cfg.coinglass.api_key)}\n"
        f"[yellow]  Query:[/yellow] symbol={cfg.coinglass.symbol} "
        f"interval={cfg.coinglass.interval} exchanges={cfg.coinglass.exchanges}\n"
        f"\n"
        f"[yellow]Telegram Bot Token:[/yellow] {_mask(cfg.telegram.bot_token)}\n"
        f"[yellow]  Chat ID:[/yellow] {cfg.telegram.chat_id}",
        title="Current Configuration",
        border_style="blue",
    ))

    # one attempt only, this is a connectivity probe
    fetcher = LiquidationFetcher(cfg.coinglass, retry_policy=RetryPolicy(max_retries=0))
    try:
        console.print("\n[cyan]Requesting latest liquidation candle...[/cyan]")
        sample = await fetcher.fetch()
        if sample is not None:
            results["coinglass"] = True
            console.print(
                f"  [green]ok:[/green] Long ${format_full(sample.long_value)} "
                f"(${format_compact(sample.long_value)}), "
                f"Short ${format_full(sample.short_value)} "
                f"(${format_compact(sample.short_value)})"
            )
        else:
            console.print("  [red]no:[/red] Coinglass: [red]FAILED[/red] (see log output)")
    finally:
        await fetcher.cleanup()

    if send_message:
        dispatcher = TelegramDispatcher(cfg.telegram)
        try:
            console.print("\n[cyan]Sending Telegram test message...[/cyan]")
            results["telegram"] = await dispatcher.dispatch(TEST_MESSAGE)
            if results["telegram"]:
                console.print("  [green]ok:[/green] Telegram: [green]SUCCESS[/green]")
            else:
                console.print("  [red]no:[/red] Telegram: [red]FAILED[/red]")
                console.print("    [yellow]Check TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID[/yellow]")
        finally:
            await dispatcher.cleanup()

    return results


def main():
    """Entry point."""
    send_message = "--no-telegram" not in sys.argv[1:]
    try:
        results = asyncio.run(check_connections(config, send_message=send_message))
    except KeyboardInterrupt:
        print("\n\nCheck cancelled by user")
        sys.exit(0)

    checked = [ok for name, ok in results.items() if send_message or name != "telegram"]
    sys.exit(0 if all(checked) else 1)


if __name__ == "__main__":
    main()
