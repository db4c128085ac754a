"""
Record the path packets take through the network to reach the destination
host.
"""


from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from tracert.probe import Failed, HopReply, ProbeOutcome, ProbeSender, Reached, TimedOut
from tracert.resolve import Resolver

__all__ = [
    "NUMBER_OF_PACKETS",
    "DEFAULT_MAX_HOPS",
    "DEFAULT_TIMEOUT",
    "TracertError",
    "InvalidConfiguration",
    "UnresolvableTarget",
    "TraceCancelled",
    "TraceStatus",
    "HopRecord",
    "TraceSession",
    "TraceObserver",
    "HopTracer",
]


NUMBER_OF_PACKETS: Final = 3
DEFAULT_MAX_HOPS: Final = 30
DEFAULT_TIMEOUT: Final = 4000


class TracertError(Exception):
    pass


class InvalidConfiguration(TracertError, ValueError):
    pass


class UnresolvableTarget(TracertError):
    def __init__(self, target_name: str) -> None:
        super().__init__(f"Unable to resolve target system name {target_name}.")
        self.target_name = target_name


class TraceCancelled(TracertError):
    def __init__(self, session: "TraceSession") -> None:
        super().__init__("trace cancelled")
        self.session = session


class TraceStatus(Enum):
    COMPLETED = "completed"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


@dataclass
class HopRecord:
    ttl: int
    outcomes: list[ProbeOutcome] = field(default_factory=list)
    responder: str | None = None
    hostname: str | None = None

    @property
    def timed_out(self) -> bool:
        """Whether the last probe of the hop went unanswered."""
        return bool(self.outcomes) and isinstance(self.outcomes[-1], TimedOut)

    @property
    def rtts(self) -> list[float | None]:
        """Round-trip time of every answered probe, `None` for the rest."""
        return [o.elapsed if isinstance(o, (Reached, HopReply)) else None
                for o in self.outcomes]


@dataclass
class TraceSession:
    target_name: str
    address: str
    hostname: str | None
    max_hops: int
    timeout: int
    hops: list[HopRecord] = field(default_factory=list)
    status: TraceStatus | None = None
    error: str | None = None


class TraceObserver:
    """
    Receives trace progress as it happens. Every hook does nothing by
    default.
    """

    def header(self, session: TraceSession) -> None:
        pass

    def probe(self, ttl: int, index: int, outcome: ProbeOutcome) -> None:
        pass

    def hop(self, record: HopRecord) -> None:
        pass

    def footer(self, session: TraceSession) -> None:
        pass


class HopTracer:
    """
    Probe a destination with increasing TTL values, `NUMBER_OF_PACKETS`
    probes per hop, until it answers, `max_hops` is reached, or a probe
    fails.

    :param sender_factory:
        Called once per trace to get the probe sender. The sender is entered
        as a context manager for the duration of the probe loop.

    :param resolver:
        Forward and reverse name resolution.

    :param observer:
        Gets notified about the header, every probe, every finished hop and
        the footer.

    :param should_stop:
        Polled before each probe; returning True cancels the trace.
    """

    def __init__(
            self,
            sender_factory: Callable[[], ProbeSender],
            resolver: Resolver,
            observer: TraceObserver | None = None,
            should_stop: Callable[[], bool] | None = None,
    ) -> None:
        self._sender_factory = sender_factory
        self._resolver = resolver
        self._observer = observer if observer is not None else TraceObserver()
        self._should_stop = should_stop

    def _reverse(self, address: str) -> str | None:
        # reverse lookups only decorate the output, never let them end a trace
        try:
            return self._resolver.resolve_name(address)
        except (OSError, UnicodeError):
            return None

    def trace(
            self,
            target_name: str,
            max_hops: int = DEFAULT_MAX_HOPS,
            timeout: int = DEFAULT_TIMEOUT,
    ) -> TraceSession:
        if max_hops <= 0:
            raise InvalidConfiguration(f"max_hops must be greater than 0, got {max_hops}")
        if timeout <= 0:
            raise InvalidConfiguration(f"timeout must be greater than 0, got {timeout}")

        target_name = target_name.strip()
        address = self._resolver.resolve_address(target_name)
        if address is None:
            raise UnresolvableTarget(target_name)

        session = TraceSession(
            target_name=target_name,
            address=address,
            hostname=self._reverse(address),
            max_hops=max_hops,
            timeout=timeout,
        )
        self._observer.header(session)

        with self._sender_factory() as sender:
            for ttl in range(1, max_hops + 1):
                record = HopRecord(ttl)
                session.hops.append(record)

                finished = self._probe_hop(sender, session, record)

                last = record.outcomes[-1]
                if isinstance(last, (HopReply, Reached)):
                    record.responder = last.address
                    record.hostname = self._reverse(last.address)

                self._observer.hop(record)

                if finished:
                    break
            else:
                session.status = TraceStatus.EXHAUSTED

        self._observer.footer(session)
        return session

    def _probe_hop(
            self,
            sender: ProbeSender,
            session: TraceSession,
            record: HopRecord,
    ) -> bool:
        """
        Run the probes of one hop. Returns True when the session is over.
        """
        for index in range(NUMBER_OF_PACKETS):
            if self._should_stop is not None and self._should_stop():
                if not record.outcomes:
                    session.hops.remove(record)
                session.status = TraceStatus.CANCELLED
                raise TraceCancelled(session)

            outcome = sender.send(session.address, record.ttl, session.timeout)
            record.outcomes.append(outcome)
            self._observer.probe(record.ttl, index, outcome)

            if isinstance(outcome, Failed):
                session.status = TraceStatus.ABORTED
                session.error = outcome.message
                return True

            if isinstance(outcome, Reached) or (
                    isinstance(outcome, HopReply) and outcome.address == session.address):
                session.status = TraceStatus.COMPLETED
                return True

        return False
