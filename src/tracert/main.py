import signal
import sys
from types import FrameType
from typing import Final

from tracert.coloring import Color, disable_colors
from tracert.configure import DEFAULT_CONFIG_DIR
from tracert.confreader import ConfError, ConfReader
from tracert.exitcode import ExitCode
from tracert.flag import FlagParser, OptionFlag, PositionalFlag
from tracert.logrwp import LogRWP
from tracert.output import ConsoleDisplay, session_log_lines
from tracert.printing import eprint, wprint
from tracert.probe import EchoProbeSender
from tracert.resolve import SocketResolver
from tracert.tracer import (HopTracer, InvalidConfiguration, TraceCancelled,
                            TraceStatus, UnresolvableTarget)

__all__ = ["main", "TRACERT_FLAGS"]


_NAME: Final = "tracert"
_VERSION: Final = "1.0.0"
_RELEASE_DATE: Final = "2026-10-19"

LOG_FILE: Final = "trace.log"


def _error(message: str) -> None:
    precedence = (f"{Color.red(Color.bold('error'))}: "
                  f"{Color.red(Color.bold('tracert'))}")
    eprint(message, terminate=False, precedence=precedence)


TRACERT_FLAGS: Final = {
    "target_name": PositionalFlag(
        help="specifies the destination, identified either by IP address or "
             "host name",
        nargs="?",
        type=str,
        default=None,
    ),
    "config": OptionFlag(
        short="-c",
        long="--config",
        help=f"read settings from <path> (default {DEFAULT_CONFIG_DIR}/config.json)",
        type=str,
        required=False,
        default=None,
        metavar="<path>",
    ),
    "no_color": OptionFlag(
        long="--no-color",
        help="disable colors if supported",
        action="store_true",
        required=False,
        default=False,
    ),
    "show_config": OptionFlag(
        long="--show-config",
        help="show the contents of the config file and exit",
        action="store_true",
        required=False,
        default=False,
    ),
    "show_log": OptionFlag(
        long="--show-log",
        help="show the trace log and exit",
        action="store_true",
        required=False,
        default=False,
    ),
    "version": OptionFlag(
        long="--version",
        help="show version and exit",
        action="version",
        version=f"{_NAME} {_VERSION} ({_RELEASE_DATE})",
    ),
}


class _Interrupt:
    """
    SIGINT handler that asks the tracer to stop before its next probe.
    """

    def __init__(self) -> None:
        self.requested = False

    def __call__(self, signum: int, frame: FrameType | None) -> None:
        self.requested = True


def main(args: list[str]) -> ExitCode:
    parser = FlagParser(
        prog=_NAME,
        description="record the path packets take through the network to "
                    "reach the destination host",
    )
    parser.add_arguments(TRACERT_FLAGS)
    flags = parser.parse_args(args)

    if flags.no_color:
        disable_colors()

    conf = ConfReader(flags.config or f"{DEFAULT_CONFIG_DIR}/config.json")
    try:
        conf_data = conf.read()
    except ConfError as e:
        _error(str(e))
        return ExitCode.FAILURE

    if not conf_data["colors"]:
        disable_colors()

    if flags.show_config:
        conf.print()
        return ExitCode.SUCCESS

    if flags.show_log:
        LogRWP(conf_data["log_dir"], "read").print(LOG_FILE)
        return ExitCode.SUCCESS

    if flags.target_name is None:
        parser.print_usage(sys.stderr)
        _error("the following arguments are required: target_name")
        return ExitCode.USAGE

    interrupt = _Interrupt()
    previous_handler = signal.signal(signal.SIGINT, interrupt)

    tracer = HopTracer(EchoProbeSender, SocketResolver(), ConsoleDisplay(),
                       should_stop=lambda: interrupt.requested)
    try:
        session = tracer.trace(flags.target_name, conf_data["max_hops"],
                               conf_data["timeout"])
    except InvalidConfiguration as e:
        _error(f"invalid configuration: {e}")
        return ExitCode.FAILURE
    except UnresolvableTarget as e:
        _error(str(e))
        return ExitCode.FAILURE
    except TraceCancelled as e:
        print()
        wprint("trace cancelled")
        session = e.session
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if conf_data["log"]:
        try:
            LogRWP(conf_data["log_dir"], "write").write_lines(
                LOG_FILE, session_log_lines(session))
        except OSError as e:
            wprint(f"could not write the trace log: {e}")

    if session.status == TraceStatus.ABORTED:
        return ExitCode.FAILURE
    if interrupt.requested:
        return ExitCode.INTERRUPTED
    return ExitCode.SUCCESS
