"""
Command-line flag parsing.
"""


from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, NoReturn, override

from tracert.coloring import Color

__all__ = [
    "FlagParser",
    "FlagHelpFormatter",
    "PositionalFlag",
    "OptionFlag",
]


@dataclass(frozen=True, kw_only=True)
class PositionalFlag:
    help: str = "this option lacks documentation"
    nargs: int | str | None = None
    type: Callable[[str], Any] | None = None
    default: Any | None = None
    metavar: str | None = None


@dataclass(frozen=True, kw_only=True)
class OptionFlag:
    short: str | None = None
    long: str | None = None
    action: str | type[argparse.Action] | None = None
    nargs: int | str | None = None
    const: Any | None = None
    help: str = "this option lacks documentation"
    type: Callable[[str], Any] | None = None
    required: bool | None = None
    default: Any | None = None
    choices: Iterable[Any] | None = None
    metavar: str | tuple[str, ...] | None = None
    version: str | None = None


class FlagHelpFormatter(argparse.HelpFormatter):
    """
    Same as `argparse.HelpFormatter`, but section headings, the usage prefix
    and option flags are colorified.
    """

    def __init__(
            self,
            prog: str,
            indent_increment: int = 2,
            max_help_position: int = 40,
            width: int = 100,
    ) -> None:
        super().__init__(prog, indent_increment, max_help_position, width)

    @override
    def _format_usage(
            self,
            usage: str | None,
            actions: Iterable[argparse.Action],
            groups: Any,
            prefix: str | None,
    ) -> str:
        if prefix is None:
            prefix = f"{Color.color('usage', 'blue bold')}: "
        return super()._format_usage(usage, actions, groups, prefix)

    @override
    def start_section(self, heading: str | None) -> None:
        if heading is not None:
            heading = Color.color(heading, "blue bold")
        super().start_section(heading)

    @override
    def _format_action_invocation(self, action: argparse.Action) -> str:
        # positional
        if not action.option_strings:
            default = self._get_default_metavar_for_positional(action)
            metavar, = self._metavar_formatter(action, default)(1)
            return Color.cyan(metavar)

        # optional with no arguments
        if action.nargs == 0:
            return ", ".join(Color.cyan(s) for s in action.option_strings)

        # optional with a value, the metavar goes after the last spelling only
        #
        # -c, --config <path>
        default = f"<{self._get_default_metavar_for_optional(action)}>"
        args_string = self._format_args(action, default)
        parts = [Color.cyan(s) for s in action.option_strings]
        parts[-1] += f" {Color.yellow(args_string)}"
        return ", ".join(parts)


class FlagParser(argparse.ArgumentParser):
    """
    Command line argument parser.
    """

    def __init__(
            self,
            prog: str | None = None,
            usage: str | None = None,
            description: str | None = None,
            epilog: str | None = None,
            parents: Sequence[argparse.ArgumentParser] | None = None,
            formatter_class: type[argparse.HelpFormatter] = FlagHelpFormatter,
            add_help: bool = True,
            exit_on_error: bool = True,
    ) -> None:
        if parents is None:
            parents = []
        super().__init__(prog=prog, usage=usage, description=description,
                         epilog=epilog, parents=parents,
                         formatter_class=formatter_class, add_help=add_help,
                         exit_on_error=exit_on_error)

    def add_arguments(self, arguments: dict[str, PositionalFlag | OptionFlag]) -> None:
        """
        Register every flag of a `dest -> flag` table.

        :param arguments:
            Mapping of destination names to flag descriptions.
        """
        for dest, flag in arguments.items():
            try:
                if isinstance(flag, PositionalFlag):
                    kwargs = {
                        "nargs": flag.nargs,
                        "type": flag.type,
                        "help": flag.help,
                        "default": flag.default,
                        "metavar": flag.metavar,
                    }
                    kwargs = {k: v for k, v in kwargs.items() if v is not None}
                    self.add_argument(dest, **kwargs)
                    continue

                # since it's possible to None the flags, throw the exception in
                # that case
                if flag.short is None and flag.long is None:
                    raise ValueError("neither short nor long flag was supplied")

                flags = [f for f in (flag.short, flag.long) if f is not None]
                kwargs = {
                    "action": flag.action,
                    "nargs": flag.nargs,
                    "const": flag.const,
                    "type": flag.type,
                    "required": flag.required,
                    "default": flag.default,
                    "choices": flag.choices,
                    "help": flag.help,
                    "metavar": flag.metavar,
                    "dest": dest,
                    "version": flag.version,
                }
                kwargs = {k: v for k, v in kwargs.items() if v is not None}
                self.add_argument(*flags, **kwargs)
            except argparse.ArgumentError as e:
                self.error(e.message)

    @override
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        args = {
            "precedence": f"{Color.red(Color.bold('error'))}: "
                          f"{Color.red(Color.bold(self.prog))}",
            "message": message,
        }
        self.exit(2, "%(precedence)s: %(message)s\n" % args)
