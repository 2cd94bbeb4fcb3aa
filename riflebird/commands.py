"""
Top-level commands shared by the one-shot CLI and the interactive menu.
"""

import logging
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from riflebird.cache.manager import ProjectCacheManager
from riflebird.config.settings import Settings
from riflebird.providers.base import BaseProvider
from riflebird.providers.factory import create_provider
from riflebird.writer.unit_test_writer import PatternResult, UnitTestWriter

logger = logging.getLogger("Commands")


async def fire(
    settings: Settings,
    patterns: Sequence[str],
    console: Console,
    provider: Optional[BaseProvider] = None,
) -> PatternResult:
    """Generate unit tests for every file matching `patterns`."""
    provider = provider or create_provider(settings)
    writer = UnitTestWriter(provider, settings)

    def _progress(current: int, total: int, file_path: str, elapsed: float) -> None:
        console.print(f"[dim][{current}/{total}][/] {file_path} [dim]({elapsed:.1f}s)[/]")

    console.print(f"[rb.accent]Firing[/] at {', '.join(patterns)} using {settings.provider_label}")
    result = await writer.write_tests_by_pattern(patterns, on_progress=_progress)
    render_pattern_result(console, result)
    return result


async def clean(settings: Settings, console: Console) -> bool:
    """Remove the cached project context."""
    removed = await ProjectCacheManager(settings.project_root).clear()
    if removed:
        console.print("[success]Project cache cleared.[/]")
    else:
        console.print("[dim]No project cache to clear.[/]")
    return removed


def render_pattern_result(console: Console, result: PatternResult) -> None:
    if not result.files and not result.failures:
        console.print("[dim]No matching source files.[/]")
        return

    table = Table(title="Riflebird results", title_style="rb.accent")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Detail", overflow="fold")
    for test_path in result.files:
        table.add_row(test_path, "[success]written[/]", "")
    for source_path, error in result.failures:
        table.add_row(source_path, "[failure]failed[/]", error.splitlines()[0] if error else "")
    console.print(table)
