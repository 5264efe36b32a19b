"""A small command tree with flags, argument checks and usage text."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence, TextIO, Union

from .gnmi_query import _parse_duration

AUTH_HEADER_FLAG = "auth-header"
SERVICE_ADDRESS_FLAG = "service-address"

ArgsValidator = Callable[[Sequence[str]], None]
Runner = Callable[["CommandContext", list], Any]

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


class ArgsError(ValueError):
    """Raised when a command line does not fit the command it names."""


@dataclass
class Flag:
    """A named option; its type follows the type of its default."""

    name: str
    default: Any
    description: str = ""
    shorthand: str = ""

    @property
    def is_bool(self) -> bool:
        return isinstance(self.default, bool)

    @property
    def kind(self) -> str:
        if isinstance(self.default, bool):
            return ""
        if isinstance(self.default, int):
            return "int"
        if isinstance(self.default, float):
            return "float"
        if isinstance(self.default, timedelta):
            return "duration"
        return "string"

    def convert(self, text: str) -> Any:
        """Turn the text given on the command line into a flag value."""
        try:
            if isinstance(self.default, bool):
                if text in _TRUE:
                    return True
                if text in _FALSE:
                    return False
                raise ValueError(text)
            if isinstance(self.default, int):
                return int(text, 0)
            if isinstance(self.default, float):
                return float(text)
            if isinstance(self.default, timedelta):
                return timedelta(seconds=_parse_duration(text))
        except (ValueError, argparse.ArgumentTypeError):
            raise ArgsError(f'invalid argument "{text}" for "--{self.name}" flag') from None
        return text

    def usage_parts(self) -> tuple[str, str]:
        left = f"-{self.shorthand}, --{self.name}" if self.shorthand else f"    --{self.name}"
        if self.kind:
            left += f" {self.kind}"
        text = self.description
        if self.default not in (False, 0, "", timedelta(0), None):
            if isinstance(self.default, str):
                text += f' (default "{self.default}")'
            else:
                text += f" (default {self.default})"
        return left, text


def _flag_lines(flags: Iterable[Flag]) -> list[str]:
    parts = [flag.usage_parts() for flag in sorted(flags, key=lambda f: f.name)]
    if not parts:
        return []
    width = max(len(left) for left, _ in parts)
    return [f"  {left:<{width}}   {text}".rstrip() for left, text in parts]


class CommandContext:
    """What a running command sees: clients, output, settings and flag values."""

    def __init__(
        self,
        clients: Optional[Mapping[str, Callable[[str], Any]]] = None,
        out: Optional[TextIO] = None,
        settings: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.clients = dict(clients or {})
        self._out = out
        self.settings = dict(settings or {})
        self.flags: dict[str, Any] = {}
        self.changed: set[str] = set()
        self.command: Optional[Command] = None

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def client(self, service: str) -> Any:
        """Create a client for a service at the configured address."""
        factory = self.clients.get(service)
        if factory is None:
            raise ConnectionError(f"no client available for service {service}")
        return factory(self.flags.get(SERVICE_ADDRESS_FLAG, ""))

    def write(self, text: str) -> None:
        """Write text to the command output."""
        self.out.write(text)


class Command:
    """A node of the command tree."""

    def __init__(
        self,
        use: str,
        short: str = "",
        *,
        run: Optional[Runner] = None,
        args: Optional[ArgsValidator] = None,
        aliases: Sequence[str] = (),
        example: str = "",
    ) -> None:
        self.use = use
        self.short = short
        self.run = run
        self.args = args
        self.aliases = tuple(aliases)
        self.example = example
        self.commands: list[Command] = []
        self.flags: dict[str, Flag] = {}
        self.persistent_flags: dict[str, Flag] = {}
        self.parent: Optional[Command] = None

    @property
    def name(self) -> str:
        return self.use.split()[0]

    @property
    def path(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent.path} {self.name}"

    def add_command(self, *args: "Command") -> None:
        """Attach sub-commands."""
        for command in args:
            command.parent = self
            self.commands.append(command)

    def add_flag(self, name: str, default: Any, description: str = "", shorthand: str = "") -> Flag:
        """Declare a flag local to this command."""
        flag = Flag(name, default, description, shorthand)
        self.flags[name] = flag
        return flag

    def _lookup(self, token: str) -> Optional["Command"]:
        return next(
            (c for c in self.commands if token == c.name or token in c.aliases), None
        )

    def find(self, path: Union[str, Sequence[str]]) -> "Command":
        """Return the sub-command reached by following the given names."""
        names = path.split() if isinstance(path, str) else list(path)
        command = self
        for name in names:
            sub = command._lookup(name)
            if sub is None:
                raise KeyError(f'unknown command "{name}" for "{command.path}"')
            command = sub
        return command

    def _ancestors(self) -> list["Command"]:
        chain = []
        node: Optional[Command] = self.parent
        while node is not None:
            chain.append(node)
            node = node.parent
        return list(reversed(chain))

    def _inherited_flags(self) -> dict[str, Flag]:
        flags: dict[str, Flag] = {}
        for ancestor in self._ancestors():
            flags.update(ancestor.persistent_flags)
        return flags

    def _available_flags(self) -> dict[str, Flag]:
        flags = self._inherited_flags()
        flags.update(self.persistent_flags)
        flags.update(self.flags)
        return flags

    def usage(self) -> str:
        """Usage text for this command."""
        lines = ["Usage:"]
        if self.run is not None:
            prefix = f"{self.parent.path} " if self.parent is not None else ""
            lines.append(f"  {prefix}{self.use}")
        if self.commands:
            lines.append(f"  {self.path} [command]")
        if self.aliases:
            lines += ["", "Aliases:", "  " + ", ".join((self.name,) + self.aliases)]
        if self.example:
            lines += ["", "Examples:", self.example]
        if self.commands:
            lines += ["", "Available Commands:"]
            width = max(len(c.name) for c in self.commands)
            for command in sorted(self.commands, key=lambda c: c.name):
                lines.append(f"  {command.name:<{width}}   {command.short}")
        local = {**self.persistent_flags, **self.flags}
        if local:
            lines += ["", "Flags:"] + _flag_lines(local.values())
        inherited = self._inherited_flags()
        if inherited:
            lines += ["", "Global Flags:"] + _flag_lines(inherited.values())
        if self.commands:
            lines += ["", f'Use "{self.path} [command] --help" for more information about a command.']
        return "\n".join(lines) + "\n"

    @staticmethod
    def _match_flag(flags: Mapping[str, Flag], token: str) -> tuple[Flag, Optional[str]]:
        value: Optional[str]
        if token.startswith("--"):
            name, sep, text = token[2:].partition("=")
            flag = flags.get(name)
            value = text if sep else None
        else:
            short, rest = token[1:2], token[2:]
            flag = next((f for f in flags.values() if f.shorthand == short), None)
            value = rest[1:] if rest.startswith("=") else (rest or None)
        if flag is None:
            raise ArgsError(f"unknown flag: {token}")
        return flag, value

    def execute(self, argv: Optional[Sequence[str]] = None, context: Optional[CommandContext] = None) -> Any:
        """Parse a command line, pick the sub-command and run it."""
        context = context if context is not None else CommandContext()
        tokens: Iterator[str] = iter(sys.argv[1:] if argv is None else argv)
        command = self
        positional: list[str] = []
        values: dict[str, Any] = {}
        help_requested = False
        for token in tokens:
            if token == "--":
                positional.extend(tokens)
                break
            if token in ("-h", "--help"):
                help_requested = True
            elif token.startswith("-") and token != "-":
                flag, text = self._match_flag(command._available_flags(), token)
                if text is None:
                    if flag.is_bool:
                        values[flag.name] = True
                        continue
                    text = next(tokens, None)
                    if text is None:
                        raise ArgsError(f"flag needs an argument: {token}")
                values[flag.name] = flag.convert(text)
            else:
                sub = command._lookup(token) if not positional else None
                if sub is not None:
                    command = sub
                else:
                    positional.append(token)
        if help_requested:
            context.write(command.usage())
            return None
        if command.run is None:
            if positional and command.commands:
                raise ArgsError(f'unknown command "{positional[0]}" for "{command.path}"')
            context.write(command.usage())
            return None
        if command.args is not None:
            command.args(positional)
        context.command = command
        context.flags = {name: flag.default for name, flag in command._available_flags().items()}
        context.flags.update(values)
        context.changed = set(values)
        return command.run(context, positional)


def exact_args(n: int) -> ArgsValidator:
    """Accept exactly n positional arguments."""

    def validate(args: Sequence[str]) -> None:
        if len(args) != n:
            raise ArgsError(f"accepts {n} arg(s), received {len(args)}")

    return validate


def maximum_n_args(n: int) -> ArgsValidator:
    """Accept at most n positional arguments."""

    def validate(args: Sequence[str]) -> None:
        if len(args) > n:
            raise ArgsError(f"accepts at most {n} arg(s), received {len(args)}")

    return validate


def no_args() -> ArgsValidator:
    """Accept no positional arguments."""

    def validate(args: Sequence[str]) -> None:
        if args:
            raise ArgsError(f'unknown command "{args[0]}"')

    return validate


def add_config_flags(cmd: Command, default_address: str) -> None:
    """Add the connection flags shared by a service command and its children."""
    for flag in (
        Flag(SERVICE_ADDRESS_FLAG, default_address, "the gRPC endpoint"),
        Flag("tls-key-path", "", "the path to the TLS key"),
        Flag("tls-cert-path", "", "the path to the TLS certificate"),
        Flag("no-tls", False, "if present, do not use TLS"),
        Flag(AUTH_HEADER_FLAG, "", "Auth header in the form 'Bearer <base64>'"),
    ):
        cmd.persistent_flags[flag.name] = flag


def _run_config_get(context: CommandContext, args: list) -> Any:
    key = args[0]
    if key in context.settings:
        value = context.settings[key]
    elif key in context.flags:
        value = context.flags[key]
    else:
        raise ArgsError(f"unknown configuration key {key}")
    context.write(f"{value}\n")
    return value


def _run_config_set(context: CommandContext, args: list) -> Any:
    key, value = args
    context.settings[key] = value
    return value


def get_config_command() -> Command:
    """Command that reads and changes the CLI configuration."""
    cmd = Command("config {get,set} [args]", "Manage the CLI configuration")
    cmd.add_command(
        Command("get <key>", "Gets a configuration value", run=_run_config_get, args=exact_args(1)),
        Command("set <key> <value>", "Sets a configuration value", run=_run_config_set,
                args=exact_args(2)),
    )
    return cmd