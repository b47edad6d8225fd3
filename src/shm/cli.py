from __future__ import annotations

import argparse
from dataclasses import replace
from functools import partial
from typing import Any, Never, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table
from rich_argparse import RawTextRichHelpFormatter
from sh_module import BoundaryTypeError, DecodeError, Dispatcher, ModuleConfig, create_dispatcher
from sh_module.server import HandshakeConfig, serve

_CONSOLE = Console(no_color=False)
# Methods whose argument 0 is an environment slot rather than the command.
_ENV_SLOT_METHODS = {"RunWith", "RunWithV", "Output", "OutputWith", "Exec"}


class _CLIHelpFormatter(RawTextRichHelpFormatter):
    """Rich formatter with explicit high-contrast CLI styles.

    Example:
        ```python
        parser = argparse.ArgumentParser(formatter_class=_CLIHelpFormatter)
        ```
    """

    styles = {
        "argparse.args": "bold cyan",
        "argparse.groups": "bold magenta",
        "argparse.help": "white",
        "argparse.metavar": "bold yellow",
        "argparse.prog": "bold bright_blue",
        "argparse.syntax": "bold bright_white",
        "argparse.text": "bright_white",
    }


_HELP_FORMATTER = partial(
    _CLIHelpFormatter,
    max_help_position=34,
    width=120,
)


class _RichArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that renders errors via Rich.

    Example:
        ```python
        parser = _RichArgumentParser(prog="python -m shm")
        ```
    """

    def error(self, message: str) -> Never:
        """Render parse errors with Rich and exit.

        Example:
            ```python
            # parser.error("invalid usage")
            ```
        """
        _CONSOLE.print(Panel.fit(f"[bold red]Error:[/bold red] {message}", border_style="red"))
        self.print_help()
        raise SystemExit(2)


def _parse_env(pairs: list[str]) -> dict[str, str]:
    """Turn repeated `KEY=VALUE` flags into an environment mapping.

    Example:
        ```python
        env = _parse_env(["GOOS=linux", "GOARCH=arm64"])
        ```
    """
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"--env expects KEY=VALUE, got '{pair}'")
        env[key] = value
    return env


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser for sh-module.

    Example:
        ```python
        parser = build_parser()
        ```
    """
    parser = _RichArgumentParser(
        prog="python -m shm",
        description=(
            "sh-module CLI\n"
            "Invoke the command-execution module directly or serve it to a host.\n"
            "Commands run without a shell: no globbing, pipes or redirection."
        ),
        epilog=(
            "Quick Examples:\n"
            "  python -m shm methods\n"
            "  python -m shm invoke Run go build ./...\n"
            "  python -m shm invoke --env GOOS=linux OutputWith go env GOOS\n"
            "  python -m shm invoke Exec make check\n\n"
            "Host Examples:\n"
            "  SH_MODULE_PLUGIN=<cookie> python -m shm serve"
        ),
        formatter_class=_HELP_FORMATTER,
    )
    parser.add_argument(
        "--config",
        help=(
            "Path to a TOML config file.\n"
            "Example: --config ./sh_module.toml"
        ),
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "rich"],
        help="Override the configured log format.",
    )

    sub = parser.add_subparsers(
        dest="command",
        required=True,
        parser_class=_RichArgumentParser,
    )

    sub.add_parser(
        "methods",
        help="List the invocable method names.",
        description="Show the fixed registry of method names a host may invoke.",
        formatter_class=_HELP_FORMATTER,
    )

    invoke_cmd = sub.add_parser(
        "invoke",
        help="Invoke one method and print its result envelope.",
        description=(
            "Invoke one method with a command line.\n"
            "Env-taking methods receive the --env pairs as their environment argument.\n"
            "The process exit status becomes the CLI exit status."
        ),
        epilog=(
            "Examples:\n"
            "  python -m shm invoke RunV go test ./...\n"
            "  python -m shm invoke --env CGO_ENABLED=0 RunWith go build"
        ),
        formatter_class=_HELP_FORMATTER,
    )
    invoke_cmd.add_argument(
        "--env",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Environment override (repeatable).",
    )
    invoke_cmd.add_argument("method")
    invoke_cmd.add_argument("argv", nargs=argparse.REMAINDER)

    sub.add_parser(
        "serve",
        help="Serve invocations to a host over stdin/stdout.",
        description=(
            "Verify the handshake cookie, print the handshake line,\n"
            "then answer JSON-line requests until stdin closes."
        ),
        formatter_class=_HELP_FORMATTER,
    )

    return parser


def build_config(args: argparse.Namespace) -> ModuleConfig:
    """Create the module config from global CLI flags.

    Example:
        ```python
        config = build_config(args)
        ```
    """
    config = ModuleConfig.from_file(args.config) if args.config else ModuleConfig()
    if args.log_format:
        config = replace(config, log_format=args.log_format)
    return config


def build_dispatcher(config: ModuleConfig) -> Dispatcher:
    """Create the dispatcher used by CLI commands.

    Example:
        ```python
        dispatcher = build_dispatcher(ModuleConfig())
        ```
    """
    return create_dispatcher(config)


def _print_methods(names: list[str]) -> None:
    """Render the method registry in a rich table.

    Example:
        ```python
        _print_methods(["Run", "Exec"])
        ```
    """
    table = Table(title="Methods")
    table.add_column("#", style="cyan")
    table.add_column("Method", style="magenta")
    table.add_column("Environment argument")
    for index, name in enumerate(names):
        table.add_row(str(index), name, "yes" if name in _ENV_SLOT_METHODS - {"Output"} else "no")
    _CONSOLE.print(table)


def _exit_code(result: Any) -> int:
    """Map an invocation result onto a process exit status.

    Example:
        ```python
        code = _exit_code({"code": 3})  # 3
        ```
    """
    if isinstance(result, dict):
        code = result.get("code")
        if isinstance(code, int) and 0 <= code <= 255:
            return code
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Run the `shm` CLI command handler.

    Example:
        ```python
        code = main(["invoke", "Run", "true"])
        ```
    """
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    config = build_config(args)
    dispatcher = build_dispatcher(config)

    if args.command == "methods":
        _print_methods(dispatcher.methods())
        return 0
    if args.command == "invoke":
        try:
            env = _parse_env(args.env)
        except ValueError as exc:
            parser.error(str(exc))
        call_args: list[Any] = list(args.argv)
        if args.method in _ENV_SLOT_METHODS:
            call_args.insert(0, env)
        try:
            result = dispatcher.invoke(args.method, call_args)
        except BoundaryTypeError as exc:
            _CONSOLE.print(Panel.fit(f"[bold red]Error:[/bold red] {exc}", border_style="red"))
            return 2
        if isinstance(result, DecodeError):
            _CONSOLE.print(Panel.fit(f"Decode error: {result}", style="bold red"))
            return 1
        style = "red" if "error" in result else "green"
        _CONSOLE.print(Panel.fit(Pretty(result), title=args.method, border_style=style))
        return _exit_code(result)
    if args.command == "serve":
        return serve(dispatcher, HandshakeConfig.from_config(config), logger=dispatcher.logger)

    parser.error("Unhandled command")
    return 2
