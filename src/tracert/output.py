"""
Console rendering of a trace.
"""


import sys
from typing import Final

from tracert.coloring import Color
from tracert.printing import Assets, eprint
from tracert.probe import Failed, HopReply, ProbeOutcome, Reached, TimedOut
from tracert.tracer import HopRecord, TraceObserver, TraceSession, TraceStatus

__all__ = ["TIMEOUT_MESSAGE", "format_host", "ConsoleDisplay", "session_log_lines"]


TIMEOUT_MESSAGE: Final = "Request timed out."


def format_host(address: str, hostname: str | None) -> str:
    """
    `hostname [address]` when a name is known, the bare address otherwise.
    """
    if hostname:
        return f"{hostname} [{address}]"
    return address


def _format_target(session: TraceSession) -> str:
    if session.target_name != session.address:
        return format_host(session.address, session.target_name)
    return format_host(session.address, session.hostname)


def _format_rtt(elapsed: float) -> str:
    return f"{int(elapsed)} ms"


class ConsoleDisplay(TraceObserver):
    """
    Print a trace the way the classic `tracert` does, one line per hop:

        1     1 ms    1 ms    2 ms    router.lan [192.168.1.1]
    """

    def header(self, session: TraceSession) -> None:
        target = Color.green(_format_target(session))
        print(f"Tracing route to {target}")
        print(f"over a maximum of {Color.yellow(str(session.max_hops))} hops:",
              end="\n\n")

    def probe(self, ttl: int, index: int, outcome: ProbeOutcome) -> None:
        if index == 0:
            sys.stdout.write(Color.yellow(f"{ttl:>3}"))

        if isinstance(outcome, (Reached, HopReply)):
            sys.stdout.write("\t" + Color.color(_format_rtt(outcome.elapsed), "pink"))
        else:
            sys.stdout.write("\t" + Color.light_gray(Assets.TIMEOUT_MARK))

        sys.stdout.flush()

    def hop(self, record: HopRecord) -> None:
        if record.responder is not None:
            host = format_host(record.responder, record.hostname)
            print("\t" + Color.cyan(host))
        elif record.timed_out:
            print("\t" + Color.light_gray(TIMEOUT_MESSAGE))
        else:
            print()

    def footer(self, session: TraceSession) -> None:
        if session.status == TraceStatus.ABORTED:
            print()
            eprint(f"trace aborted: {session.error}", terminate=False,
                   precedence="error: tracert")
            return

        print("\nTrace complete.")


def _log_probe(outcome: ProbeOutcome) -> str:
    match outcome:
        case Reached() | HopReply():
            return _format_rtt(outcome.elapsed)
        case TimedOut():
            return Assets.TIMEOUT_MARK
        case Failed():
            return f"! {outcome.message}"
    return "?"


def session_log_lines(session: TraceSession) -> list[str]:
    """
    Uncolored lines describing a finished trace, for the trace log.
    """
    lines = [f"trace {format_host(session.address, session.target_name)} "
             f"max_hops={session.max_hops} timeout={session.timeout}ms"]

    for record in session.hops:
        probes = "  ".join(_log_probe(o) for o in record.outcomes)
        if record.responder is not None:
            host = format_host(record.responder, record.hostname)
        elif record.timed_out:
            host = TIMEOUT_MESSAGE
        else:
            host = "-"
        lines.append(f"{record.ttl:>3}  {probes}  {Assets.RIGHTWARDS_ARROW} {host}")

    status = session.status.value if session.status is not None else "unknown"
    if session.error:
        status += f": {session.error}"
    lines.append(f"status {status}")

    return lines
