#!/usr/bin/env python3
"""
Pattern Race Demo Script.

Feeds a scripted sequence of development patterns into a running Pattern
Race API and shows the race reacting in the terminal.

Usage:
    python scripts/demo/run_race_demo.py --status
    python scripts/demo/run_race_demo.py --sprint
    python scripts/demo/run_race_demo.py --watch --limit 20
"""
import argparse
import asyncio
import json

import httpx
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


# ============================================
# Configuration
# ============================================

API_BASE_URL = "http://localhost:8000/api/v1"

# (pattern name, payload, pause in seconds before the next step)
SPRINT_STEPS = [
    ("git-changes", {"files": 12, "score": 55}, 0.5),
    ("build-status", {"warnings": 3, "score": 48}, 0.5),
    ("component-header", {"quality": 62}, 0.5),
    ("lint-check", {"error": "2 lint errors", "blocking": True}, 0.5),
    ("build-status", {"score": 74, "improved": True}, 0.5),
    ("perf-budget", {"score": 81}, 0.5),
    ("component-header", {"score": 88}, 0.5),
    ("lint-check", {"score": 70}, 0.0),
]


# ============================================
# API Client Functions
# ============================================

async def get_race_status() -> str:
    async with httpx.AsyncClient() as client:
        response = await client.get(f"{API_BASE_URL}/race/status")
        response.raise_for_status()
        return response.json()["status"]


async def get_race_stats() -> dict:
    async with httpx.AsyncClient() as client:
        response = await client.get(f"{API_BASE_URL}/race/stats")
        response.raise_for_status()
        return response.json()


async def inject_pattern(pattern_name: str, payload: dict) -> dict:
    async with httpx.AsyncClient() as client:
        response = await client.post(
            f"{API_BASE_URL}/race/inject/{pattern_name}",
            json=payload,
        )
        response.raise_for_status()
        return response.json()


# ============================================
# Display Functions
# ============================================

STATUS_STYLES = {
    "healthy": "[green]HEALTHY[/green]",
    "improving": "[bold green]IMPROVING[/bold green]",
    "warning": "[yellow]WARNING[/yellow]",
    "error": "[bold red]ERROR[/bold red]",
}

TREND_ARROWS = {"up": "[green]▲[/green]", "down": "[red]▼[/red]", "stable": "[dim]●[/dim]"}


def display_stats(stats: dict):
    """Display the current race stats and recent events."""
    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Position:[/bold cyan] {stats['position'].upper()}   "
            f"[bold cyan]Speed:[/bold cyan] {stats['speed']:.2f}   "
            f"[bold cyan]Patterns:[/bold cyan] {stats['active_patterns']}   "
            f"[bold cyan]Momentum:[/bold cyan] {stats['momentum'] * 100:.0f}%",
            title="🏁 Pattern Race",
            border_style="cyan",
        )
    )

    if not stats["recent_events"]:
        console.print("[dim]No race events yet[/dim]")
        return

    table = Table(title="Recent Events", box=box.ROUNDED, header_style="bold magenta")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Message")
    table.add_column("Speed", justify="right")

    for event in stats["recent_events"]:
        table.add_row(event["type"], event["message"], f"{event['speed']:.2f}")

    console.print(table)


async def run_sprint():
    """Inject the scripted sprint and print each scored observation."""
    table = Table(title="🏃 Sprint", box=box.ROUNDED, header_style="bold magenta")
    table.add_column("Pattern", style="cyan")
    table.add_column("Type")
    table.add_column("Status", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("Trend", justify="center")

    for pattern_name, payload, pause in SPRINT_STEPS:
        event = await inject_pattern(pattern_name, payload)
        metrics = event["metrics"]
        table.add_row(
            event["pattern"],
            event["type"],
            STATUS_STYLES.get(event["status"], event["status"]),
            f"{metrics['score']:.0f}",
            TREND_ARROWS.get(metrics["trend"], metrics["trend"]),
        )
        if pause:
            await asyncio.sleep(pause)

    console.print(table)
    display_stats(await get_race_stats())
    console.print(f"\n[bold]{await get_race_status()}[/bold]")


async def watch_stream(limit: int):
    """Print race events pushed by the server until the limit is reached."""
    console.print(f"[cyan]Watching race stream ({limit} events, Ctrl+C to stop)...[/cyan]")
    async with httpx.AsyncClient(timeout=None) as client:
        async with client.stream(
            "GET", f"{API_BASE_URL}/race/stream", params={"limit": limit}
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if not line.startswith("data: "):
                    continue
                event = json.loads(line[len("data: "):])
                console.print(
                    f"[dim]{event['timestamp']}[/dim] "
                    f"[bold]{event['type']}[/bold] {event['message']}"
                )


# ============================================
# Main
# ============================================

async def main():
    parser = argparse.ArgumentParser(
        description="Pattern Race demo client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--status", "-s", action="store_true", help="Show the current race stats")
    parser.add_argument("--sprint", action="store_true", help="Inject the scripted pattern sprint")
    parser.add_argument("--watch", "-w", action="store_true", help="Follow the live race stream")
    parser.add_argument("--limit", type=int, default=20, help="Events to show with --watch")

    args = parser.parse_args()

    try:
        if args.status:
            display_stats(await get_race_stats())
        elif args.sprint:
            await run_sprint()
        elif args.watch:
            await watch_stream(args.limit)
        else:
            parser.print_help()
    except httpx.HTTPError as e:
        console.print(f"[bold red]Request failed:[/bold red] {e}")
        console.print(f"[dim]Is the API running at {API_BASE_URL}?[/dim]")


if __name__ == "__main__":
    asyncio.run(main())
