"""
Send a single ICMP echo probe with a given TTL and classify what came back.
"""


import errno
import secrets
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum, unique
from types import TracebackType
from typing import Any, Final, Self

from tracert.printing import eprint

try:
    import logging
    logging.getLogger("scapy.runtime").setLevel(logging.ERROR)

    from scapy.config import conf
    from scapy.layers.inet import ICMP, IP
    from scapy.packet import Packet, Raw
except ModuleNotFoundError:
    eprint("scapy is not installed. Install scapy and try again: "
           "'python3 -m pip install scapy'")

__all__ = [
    "IPStatus",
    "status_message",
    "icmp_status",
    "classify_reply",
    "os_error_outcome",
    "Reached",
    "HopReply",
    "TimedOut",
    "Failed",
    "ProbeOutcome",
    "ProbeSender",
    "EchoProbeSender",
]


BUFFER_SIZE: Final = 32


@unique
class IPStatus(IntEnum):
    """
    Low-level status of an echo request, numbered after the IP helper status
    codes.
    """

    SUCCESS = 0
    DESTINATION_NETWORK_UNREACHABLE = 11002
    DESTINATION_HOST_UNREACHABLE = 11003
    DESTINATION_PROTOCOL_UNREACHABLE = 11004
    DESTINATION_PORT_UNREACHABLE = 11005
    NO_RESOURCES = 11006
    PACKET_TOO_BIG = 11009
    TIMED_OUT = 11010
    BAD_ROUTE = 11012
    TTL_EXPIRED = 11013
    TTL_REASSEMBLY_TIME_EXCEEDED = 11014
    PARAMETER_PROBLEM = 11015
    SOURCE_QUENCH = 11016
    BAD_DESTINATION = 11018
    DESTINATION_UNREACHABLE = 11040
    ICMP_ERROR = 11044
    GENERAL_FAILURE = 11050


_STATUS_MESSAGES: Final = {
    IPStatus.DESTINATION_NETWORK_UNREACHABLE: "Destination net unreachable",
    IPStatus.DESTINATION_HOST_UNREACHABLE: "Destination host unreachable",
    IPStatus.DESTINATION_PROTOCOL_UNREACHABLE: "Destination protocol unreachable",
    IPStatus.DESTINATION_PORT_UNREACHABLE: "Destination port unreachable",
    IPStatus.NO_RESOURCES: "No resources",
    IPStatus.PACKET_TOO_BIG: "Packet needs to be fragmented but DF set",
    IPStatus.TIMED_OUT: "Request timed out",
    IPStatus.BAD_ROUTE: "Source route failed",
    IPStatus.PARAMETER_PROBLEM: "Parameter problem",
    IPStatus.SOURCE_QUENCH: "Source quench received",
    IPStatus.BAD_DESTINATION: "Bad destination",
    IPStatus.DESTINATION_UNREACHABLE: "Destination unreachable",
    IPStatus.ICMP_ERROR: "ICMP error",
    IPStatus.GENERAL_FAILURE: "General Failure",
}

# ICMP destination unreachable codes
_UNREACH_STATUS: Final = {
    0: IPStatus.DESTINATION_NETWORK_UNREACHABLE,
    1: IPStatus.DESTINATION_HOST_UNREACHABLE,
    2: IPStatus.DESTINATION_PROTOCOL_UNREACHABLE,
    3: IPStatus.DESTINATION_PORT_UNREACHABLE,
    4: IPStatus.PACKET_TOO_BIG,
    5: IPStatus.BAD_ROUTE,
}

_ERRNO_STATUS: Final = {
    errno.ENETUNREACH: IPStatus.DESTINATION_NETWORK_UNREACHABLE,
    errno.EHOSTUNREACH: IPStatus.DESTINATION_HOST_UNREACHABLE,
    errno.ENOBUFS: IPStatus.NO_RESOURCES,
    errno.EMSGSIZE: IPStatus.PACKET_TOO_BIG,
    errno.EADDRNOTAVAIL: IPStatus.BAD_DESTINATION,
}


def status_message(status: int, /) -> str:
    """
    Turn a status code into a human readable message. Codes that are not
    part of `IPStatus` read as a general failure.
    """
    try:
        status = IPStatus(status)
    except ValueError:
        status = IPStatus.GENERAL_FAILURE

    return _STATUS_MESSAGES.get(status, status.name.replace("_", " ").capitalize())


def icmp_status(icmp_type: int, icmp_code: int, /) -> IPStatus:
    """
    Map an ICMP (type, code) pair of a reply to an `IPStatus`.
    """
    match icmp_type:
        case 0:
            return IPStatus.SUCCESS
        case 3:
            return _UNREACH_STATUS.get(icmp_code, IPStatus.DESTINATION_UNREACHABLE)
        case 4:
            return IPStatus.SOURCE_QUENCH
        case 11:
            return (IPStatus.TTL_EXPIRED if icmp_code == 0
                    else IPStatus.TTL_REASSEMBLY_TIME_EXCEEDED)
        case 12:
            return IPStatus.PARAMETER_PROBLEM
        case _:
            return IPStatus.ICMP_ERROR


# ==============
# probe outcomes
# ==============


@dataclass(frozen=True)
class Reached:
    """The destination itself answered."""

    address: str
    elapsed: float


@dataclass(frozen=True)
class HopReply:
    """An intermediate node answered because the TTL ran out there."""

    address: str
    elapsed: float


@dataclass(frozen=True)
class TimedOut:
    elapsed: float


@dataclass(frozen=True)
class Failed:
    """The probe could not be completed. Fatal to a trace."""

    message: str
    elapsed: float = 0.0
    status: IPStatus = IPStatus.GENERAL_FAILURE


type ProbeOutcome = Reached | HopReply | TimedOut | Failed


def _failed(status: IPStatus, elapsed: float) -> Failed:
    return Failed(status_message(status), elapsed, status)


def os_error_outcome(err: OSError, elapsed: float = 0.0) -> Failed:
    """
    Classify an error raised by the transport.
    """
    if isinstance(err, PermissionError):
        return Failed("Permission denied (sending raw packets requires root "
                      "privileges)", elapsed)

    status = _ERRNO_STATUS.get(err.errno or 0, IPStatus.GENERAL_FAILURE)
    return _failed(status, elapsed)


def classify_reply(reply: Packet | None, elapsed: float) -> ProbeOutcome:
    """
    Turn whatever answered an echo request into a probe outcome.
    """
    if reply is None:
        return TimedOut(elapsed)

    if IP not in reply or ICMP not in reply:
        return _failed(IPStatus.GENERAL_FAILURE, elapsed)

    address = reply[IP].src
    status = icmp_status(reply[ICMP].type, reply[ICMP].code)

    if status == IPStatus.SUCCESS:
        return Reached(address, elapsed)
    elif status in {IPStatus.TTL_EXPIRED, IPStatus.TTL_REASSEMBLY_TIME_EXCEEDED}:
        return HopReply(address, elapsed)

    return _failed(status, elapsed)


# =============
# probe senders
# =============


class ProbeSender(ABC):
    """
    Sends one probe at a time. Senders hold transport resources between
    `open()` and `close()` and are used as context managers by the tracer.
    They must not be shared by concurrent probes.
    """

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
            self,
            exc_type: type[BaseException] | None,
            exc: BaseException | None,
            tb: TracebackType | None,
    ) -> None:
        self.close()

    @abstractmethod
    def send(self, address: str, ttl: int, timeout: int) -> ProbeOutcome:
        """
        Send exactly one probe to `address` with the given `ttl`, waiting at
        most `timeout` milliseconds for an answer.
        """
        raise NotImplementedError


def _default_socket() -> Any:
    return conf.L3socket(filter="icmp")


class EchoProbeSender(ProbeSender):
    """
    ICMP echo request sender built on a reusable scapy layer 3 socket.
    """

    def __init__(
            self,
            socket_factory: Callable[[], Any] | None = None,
            payload_size: int = BUFFER_SIZE,
            df: bool = True,
    ) -> None:
        self._socket_factory = socket_factory or _default_socket
        self._buffer = b"\x00" * payload_size
        self._df = df
        self._ident = secrets.randbelow(0xffff)
        self._seq = 0
        self._sock: Any | None = None
        self._open_error: OSError | None = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def open(self) -> None:
        if self._sock is not None:
            return
        self._open_error = None
        try:
            self._sock = self._socket_factory()
        except OSError as e:
            # reported by the first `send()`
            self._open_error = e

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def _build_packet(self, address: str, ttl: int) -> Packet:
        self._seq = (self._seq + 1) & 0xffff
        ip = IP(
            dst=address,
            id=secrets.randbelow(0xffff),
            flags=0x2 if self._df else 0x0,
            ttl=ttl,
        )
        return ip / ICMP(type=8, code=0, id=self._ident, seq=self._seq) / Raw(self._buffer)

    def send(self, address: str, ttl: int, timeout: int) -> ProbeOutcome:
        if ttl < 1:
            raise ValueError(f"ttl must be at least 1, got {ttl}")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        if self._sock is None:
            self.open()
        if self._open_error is not None:
            return os_error_outcome(self._open_error)

        pkt = self._build_packet(address, ttl)

        start = time.perf_counter()
        try:
            reply = self._sock.sr1(pkt, timeout=timeout / 1000, verbose=False)
        except OSError as e:
            return os_error_outcome(e, (time.perf_counter() - start) * 1000)
        elapsed = (time.perf_counter() - start) * 1000

        return classify_reply(reply, elapsed)
