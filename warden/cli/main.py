"""
Main CLI entry point for Warden.

This module parses the command line and dispatches each subcommand to the
tool front-ends in ``warden.tools_pkg``.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from warden import __version__, outcome
from warden.cli.exit_codes import ExitCode
from warden.cli.logging_utils import setup_logging
from warden.command_policy import (
    AutoAllowConfirmationStrategy,
    AutoDenyConfirmationStrategy,
    CLIConfirmationStrategy,
    ConfirmationStrategy,
    check_sudo_config,
    security_recommendations,
)
from warden.config import Config
from warden.exceptions import ErrorKind, WardenConfigError
from warden.path_guard import validate_path_safety
from warden.subprocess_manager import cleanup_all_subprocesses
from warden.tools_pkg import (
    ToolContext,
    permissions_get_execute,
    permissions_set_execute,
    shell_execute,
    watch_execute,
)

_DENIED_KINDS = (ErrorKind.PATH_DENIED.value, ErrorKind.DANGEROUS_COMMAND.value)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``warden`` command."""
    parser = argparse.ArgumentParser(
        prog="warden",
        description="Mediate local file, command, permission and watch operations.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="Config file (default ~/.warden/config.yaml)")
    parser.add_argument("--root", help="Confinement root (overrides the config)")
    parser.add_argument("--log-level", help="Console log level (default WARNING)")
    parser.add_argument("--json", action="store_true", help="Print raw outcomes as JSON")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="Show platform profile and security recommendations")

    resolve = sub.add_parser("resolve", help="Resolve a path against the sandbox root")
    resolve.add_argument("path")
    resolve.add_argument("-C", "--working-root", help="Per-call root inside the sandbox")
    resolve.add_argument("--must-exist", action="store_true")

    classify = sub.add_parser("classify", help="Classify a command without running it")
    classify.add_argument("shell_command", metavar="COMMAND")

    exec_ = sub.add_parser("exec", help="Classify and run a command")
    exec_.add_argument("shell_command", metavar="COMMAND")
    answer = exec_.add_mutually_exclusive_group()
    answer.add_argument("-y", "--yes", action="store_true", help="Confirm a warn-tier command")
    answer.add_argument(
        "--no-prompt", action="store_true", help="Decline warn-tier commands without asking"
    )
    exec_.add_argument("--timeout", type=int, help="Timeout in milliseconds")
    exec_.add_argument("-C", "--cwd", help="Working directory inside the sandbox")

    perms = sub.add_parser("perms", help="Inspect or change permissions")
    perms_sub = perms.add_subparsers(dest="perms_command", required=True)
    perms_get = perms_sub.add_parser("get", help="Show permissions")
    perms_get.add_argument("path")
    perms_set = perms_sub.add_parser("set", help="Change permissions")
    perms_set.add_argument("path")
    perms_set.add_argument("--mode", help="Octal mode such as 755 (POSIX)")
    perms_set.add_argument(
        "--readonly", action=argparse.BooleanOptionalAction, default=None, help="Windows"
    )
    perms_set.add_argument(
        "--hidden", action=argparse.BooleanOptionalAction, default=None, help="Windows"
    )
    perms_set.add_argument(
        "--system", action=argparse.BooleanOptionalAction, default=None, help="Windows"
    )
    perms_set.add_argument("--grant", action="append", help="ACL entry principal:rights")
    perms_set.add_argument("--deny", action="append", help="ACL entry principal:rights")
    perms_set.add_argument("-r", "--recursive", action="store_true")
    perms_set.add_argument("--max-depth", type=int)
    perms_set.add_argument("--skip-errors", action="store_true")

    watch = sub.add_parser("watch", help="Watch a directory for changes")
    watch.add_argument("path")
    watch.add_argument("--duration", type=float, help="Seconds to watch")
    watch.add_argument("--events", default="create,delete,modify")
    watch.add_argument("--no-recursive", dest="recursive", action="store_false")
    watch.add_argument("--max-depth", type=int)
    watch.add_argument("--debounce-ms", type=int)
    watch.add_argument("--format", dest="output_format", choices=("text", "json"), default="text")

    return parser


def exit_code_for(result: dict[str, Any]) -> int:
    """Map a tool outcome onto a process exit code."""
    metadata = result.get("metadata", {})
    status = outcome.status_of(result)
    if status is outcome.Status.NEED_CONFIRM:
        return ExitCode.NEEDS_CONFIRMATION
    if status is outcome.Status.ERROR:
        return ExitCode.DENIED if metadata.get("error") in _DENIED_KINDS else ExitCode.ERROR
    exit_code = metadata.get("exit_code")
    if exit_code not in (None, 0) or metadata.get("timed_out"):
        return ExitCode.ERROR
    return ExitCode.SUCCESS


def _print_outcome(console: Console, result: dict[str, Any], as_json: bool) -> int:
    if as_json:
        console.print_json(data=result)
        return exit_code_for(result)

    status = outcome.status_of(result)
    if status is outcome.Status.ERROR:
        console.print(f"[red]{escape(result['title'])}[/red]")
    elif status is outcome.Status.NEED_CONFIRM:
        console.print(f"[yellow]{escape(result['title'])}[/yellow]")
    console.print(result["output"], markup=False)
    return exit_code_for(result)


async def _info(ctx: ToolContext, console: Console, as_json: bool) -> int:
    sudo = await check_sudo_config(ctx.platform)
    data = {
        "version": __version__,
        "platform": ctx.platform.describe(),
        "root": ctx.resolver.confinement_root(),
        "sudo": sudo.to_dict(),
        "recommendations": security_recommendations(ctx.platform),
    }
    if as_json:
        console.print_json(data=data)
        return ExitCode.SUCCESS

    console.print(f"[bold]warden {__version__}[/bold]")
    for key, value in data["platform"].items():
        console.print(f"  {key}: {value}", markup=False)
    console.print(f"  root: {data['root']}", markup=False)
    if ctx.platform.is_linux:
        console.print(
            f"  sudo: available={sudo.available} no_password={sudo.no_password}", markup=False
        )
    console.print("\n[bold]Recommendations[/bold]")
    recommendations = data["recommendations"]
    for line in recommendations["general"] + recommendations["platform_specific"]:
        console.print(f"  - {line}", markup=False)
    return ExitCode.SUCCESS


def _resolve(ctx: ToolContext, console: Console, args: argparse.Namespace) -> int:
    report = validate_path_safety(
        ctx.resolver, args.path, working_root=args.working_root, must_exist=args.must_exist
    )
    if args.json:
        console.print_json(data=report.to_dict())
    elif report.safe:
        console.print(report.normalized_path, markup=False)
        for warning in report.warnings:
            console.print(f"[yellow]warning:[/yellow] {escape(warning)}")
    else:
        for error in report.errors:
            console.print(f"[red]denied:[/red] {escape(error)}")
    if report.safe:
        return ExitCode.SUCCESS
    return ExitCode.ERROR if report.code in ("E_NOT_FOUND", "E_INVALID_ARGS") else ExitCode.DENIED


def _classify(ctx: ToolContext, console: Console, args: argparse.Namespace) -> int:
    verdict = ctx.classifier.classify(args.shell_command)
    if args.json:
        console.print_json(data=verdict.to_dict())
    else:
        color = {"allow": "green", "warn": "yellow", "deny": "red"}[verdict.level.value]
        console.print(f"[{color}]{verdict.level.value.upper()}[/{color}] {verdict.reason}")
        if verdict.matched_rule:
            console.print(f"  rule: {verdict.matched_rule}", markup=False)
        for suggestion in verdict.suggestions:
            console.print(f"  - {suggestion}", markup=False)
    if verdict.denied:
        return ExitCode.DENIED
    return ExitCode.NEEDS_CONFIRMATION if verdict.needs_confirmation else ExitCode.SUCCESS


async def _exec(ctx: ToolContext, console: Console, args: argparse.Namespace) -> int:
    strategy: ConfirmationStrategy
    if args.yes:
        strategy = AutoAllowConfirmationStrategy()
    elif args.no_prompt:
        strategy = AutoDenyConfirmationStrategy()
    else:
        strategy = CLIConfirmationStrategy(console)

    kwargs = {"timeout": args.timeout, "working_directory": args.cwd}
    result = await shell_execute(ctx, args.shell_command, **kwargs)
    if outcome.status_of(result) is outcome.Status.NEED_CONFIRM:
        verdict = ctx.classifier.classify(args.shell_command)
        if await strategy.confirm(args.shell_command, verdict):
            result = await shell_execute(ctx, args.shell_command, confirmed=True, **kwargs)
    return _print_outcome(console, result, args.json)


async def _perms(ctx: ToolContext, console: Console, args: argparse.Namespace) -> int:
    if args.perms_command == "get":
        result = await permissions_get_execute(ctx, args.path)
    else:
        result = await permissions_set_execute(
            ctx,
            args.path,
            mode=args.mode,
            readonly=args.readonly,
            hidden=args.hidden,
            system=args.system,
            grant=args.grant,
            deny=args.deny,
            recursive=args.recursive,
            max_depth=args.max_depth,
            skip_errors=args.skip_errors,
        )
    return _print_outcome(console, result, args.json)


async def _watch(ctx: ToolContext, console: Console, args: argparse.Namespace) -> int:
    if not args.json:
        console.print(f"[dim]Watching {args.path}...[/dim]")
    result = await watch_execute(
        ctx,
        args.path,
        events=args.events,
        duration=args.duration,
        recursive=args.recursive,
        max_depth=args.max_depth,
        debounce_ms=args.debounce_ms,
        output_format=args.output_format,
    )
    return _print_outcome(console, result, args.json)


async def run(args: argparse.Namespace, config: Config, console: Console) -> int:
    """Run one parsed command against a fresh ToolContext."""
    ctx = ToolContext.create(config)
    try:
        if args.command == "info":
            return await _info(ctx, console, args.json)
        if args.command == "resolve":
            return _resolve(ctx, console, args)
        if args.command == "classify":
            return _classify(ctx, console, args)
        if args.command == "exec":
            return await _exec(ctx, console, args)
        if args.command == "perms":
            return await _perms(ctx, console, args)
        if args.command == "watch":
            return await _watch(ctx, console, args)
        return ExitCode.ERROR
    finally:
        await ctx.close()
        await cleanup_all_subprocesses()


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (see warden.cli.exit_codes.ExitCode)
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    console = Console(highlight=False)

    try:
        config = Config.load(args.config)
    except WardenConfigError as e:
        console.print(f"[red]Config error:[/red] {e.message}")
        return ExitCode.CONFIG_ERROR
    if args.root:
        config.sandbox.working_root = str(Path(args.root).expanduser())

    try:
        return asyncio.run(run(args, config, console))
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        return ExitCode.INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
