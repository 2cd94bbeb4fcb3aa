#!/usr/bin/env python3
"""
Riflebird command line entry point.

    riflebird fire "src/**/*.ts"
    riflebird clean
    riflebird            (interactive menu)
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from riflebird import __version__, commands
from riflebird.config.settings import Settings, load_settings
from riflebird.exceptions.base import RiflebirdBaseError
from riflebird.ui.cli import InteractiveCLI
from riflebird.ui.styles import console, render_error
from riflebird.utils.logger import setup_logging

logger = logging.getLogger("Riflebird")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="riflebird", description="AI-assisted unit test generation."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--project-root", dest="project_root", default=None)
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("--model", dest="ai_model", default=None)
    parser.add_argument("--provider", dest="llm_provider", choices=["openai", "ollama"], default=None)

    sub = parser.add_subparsers(dest="command")

    fire = sub.add_parser("fire", help="Generate unit tests for files matching the patterns")
    fire.add_argument("patterns", nargs="+")
    fire.add_argument("--no-healing", dest="healing_enabled", action="store_const", const=False)
    fire.add_argument("--concurrency", type=int, default=None)
    fire.add_argument("--output-dir", dest="test_output_dir", default=None)

    sub.add_parser("clean", help="Clear the cached project context")
    sub.add_parser("interactive", help="Open the interactive menu")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "project_root": args.project_root,
        "log_level": args.log_level,
        "ai_model": args.ai_model,
        "llm_provider": args.llm_provider,
        "healing_enabled": getattr(args, "healing_enabled", None),
        "concurrency": getattr(args, "concurrency", None),
        "test_output_dir": getattr(args, "test_output_dir", None),
    }
    return load_settings(**overrides)


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_args(args)
        setup_logging(settings)

        if args.command == "fire":
            result = await commands.fire(settings, args.patterns, console)
            return 1 if result.failures else 0
        if args.command == "clean":
            await commands.clean(settings, console)
            return 0

        await InteractiveCLI(settings, console).run()
        return 0
    except RiflebirdBaseError as e:
        logger.debug("Fatal error", exc_info=True)
        render_error(console, e.message, e.user_hint)
        return 1


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted by user[/]")
        sys.exit(130)


if __name__ == "__main__":
    run()
