import errno
import logging

import pytest
from scapy.layers.inet import ICMP, IP
from scapy.packet import Raw

from tracert.probe import (BUFFER_SIZE, EchoProbeSender, Failed, HopReply,
                           IPStatus, Reached, TimedOut, classify_reply,
                           icmp_status, os_error_outcome, status_message)

logging.getLogger("scapy.runtime").setLevel(logging.ERROR)


class FakeSocket:
    def __init__(self, reply=None, exc: OSError | None = None) -> None:
        self.reply = reply
        self.exc = exc
        self.sent = []
        self.timeouts = []
        self.closed = False

    def sr1(self, pkt, timeout=None, verbose=None):
        self.sent.append(pkt)
        self.timeouts.append(timeout)
        if self.exc is not None:
            raise self.exc
        return self.reply

    def close(self) -> None:
        self.closed = True


@pytest.mark.parametrize("icmp_type, icmp_code, expected", [
    (0, 0, IPStatus.SUCCESS),
    (11, 0, IPStatus.TTL_EXPIRED),
    (11, 1, IPStatus.TTL_REASSEMBLY_TIME_EXCEEDED),
    (3, 0, IPStatus.DESTINATION_NETWORK_UNREACHABLE),
    (3, 1, IPStatus.DESTINATION_HOST_UNREACHABLE),
    (3, 3, IPStatus.DESTINATION_PORT_UNREACHABLE),
    (3, 13, IPStatus.DESTINATION_UNREACHABLE),
    (4, 0, IPStatus.SOURCE_QUENCH),
    (12, 0, IPStatus.PARAMETER_PROBLEM),
    (5, 1, IPStatus.ICMP_ERROR),
])
def test_icmp_status(icmp_type: int, icmp_code: int, expected: IPStatus) -> None:
    assert icmp_status(icmp_type, icmp_code) is expected


@pytest.mark.parametrize("status, expected", [
    (IPStatus.GENERAL_FAILURE, "General Failure"),
    (11050, "General Failure"),
    (424242, "General Failure"),
    (IPStatus.DESTINATION_HOST_UNREACHABLE, "Destination host unreachable"),
    (IPStatus.TTL_EXPIRED, "Ttl expired"),
])
def test_status_message(status: int, expected: str) -> None:
    assert status_message(status) == expected


def test_classify_no_reply() -> None:
    assert classify_reply(None, 4000.0) == TimedOut(4000.0)


def test_classify_time_exceeded() -> None:
    reply = IP(src="192.168.1.1", dst="192.168.1.10") / ICMP(type=11, code=0)
    assert classify_reply(reply, 1.5) == HopReply("192.168.1.1", 1.5)


def test_classify_echo_reply() -> None:
    reply = IP(src="93.184.216.34", dst="192.168.1.10") / ICMP(type=0, code=0)
    assert classify_reply(reply, 12.0) == Reached("93.184.216.34", 12.0)


def test_classify_unreachable_fails() -> None:
    reply = IP(src="192.168.1.1", dst="192.168.1.10") / ICMP(type=3, code=1)
    outcome = classify_reply(reply, 3.0)
    assert isinstance(outcome, Failed)
    assert outcome.message == "Destination host unreachable"
    assert outcome.status is IPStatus.DESTINATION_HOST_UNREACHABLE


def test_classify_non_icmp_is_general_failure() -> None:
    outcome = classify_reply(IP(src="10.0.0.1") / Raw(b"junk"), 1.0)
    assert isinstance(outcome, Failed)
    assert outcome.message == "General Failure"


@pytest.mark.parametrize("err, expected", [
    (OSError(errno.ENETUNREACH, "Network is unreachable"), "Destination net unreachable"),
    (OSError(errno.EHOSTUNREACH, "No route to host"), "Destination host unreachable"),
    (OSError(errno.EIO, "I/O error"), "General Failure"),
    (OSError("no errno at all"), "General Failure"),
])
def test_os_error_outcome(err: OSError, expected: str) -> None:
    assert os_error_outcome(err).message == expected


def test_permission_error_outcome() -> None:
    outcome = os_error_outcome(PermissionError(errno.EPERM, "Operation not permitted"))
    assert outcome.message.startswith("Permission denied")


def test_echo_sender_builds_probe() -> None:
    sock = FakeSocket(IP(src="10.0.0.1") / ICMP(type=11, code=0))

    with EchoProbeSender(lambda: sock) as sender:
        outcome = sender.send("93.184.216.34", 5, 4000)

    assert isinstance(outcome, HopReply)
    assert outcome.address == "10.0.0.1"
    assert outcome.elapsed >= 0

    pkt = sock.sent[0]
    assert pkt[IP].dst == "93.184.216.34"
    assert pkt[IP].ttl == 5
    assert int(pkt[IP].flags) == 0x2
    assert pkt[ICMP].type == 8
    assert pkt[Raw].load == b"\x00" * BUFFER_SIZE
    assert sock.timeouts == [4.0]
    assert sock.closed


def test_echo_sender_reuses_socket() -> None:
    opened = []

    def factory() -> FakeSocket:
        sock = FakeSocket()
        opened.append(sock)
        return sock

    with EchoProbeSender(factory) as sender:
        for ttl in range(1, 4):
            assert isinstance(sender.send("10.0.0.9", ttl, 100), TimedOut)

    assert len(opened) == 1
    assert len(opened[0].sent) == 3
    seqs = [pkt[ICMP].seq for pkt in opened[0].sent]
    assert len(set(seqs)) == 3
    assert not sender.is_open


def test_echo_sender_transport_error() -> None:
    sock = FakeSocket(exc=OSError(errno.EHOSTUNREACH, "No route to host"))

    with EchoProbeSender(lambda: sock) as sender:
        outcome = sender.send("10.0.0.9", 1, 100)

    assert isinstance(outcome, Failed)
    assert outcome.message == "Destination host unreachable"


def test_echo_sender_open_error_is_reported_on_send() -> None:
    def factory():
        raise PermissionError(errno.EPERM, "Operation not permitted")

    with EchoProbeSender(factory) as sender:
        outcome = sender.send("10.0.0.9", 1, 100)

    assert isinstance(outcome, Failed)
    assert outcome.message.startswith("Permission denied")


@pytest.mark.parametrize("ttl, timeout", [(0, 100), (1, 0), (1, -1)])
def test_echo_sender_rejects_bad_arguments(ttl: int, timeout: int) -> None:
    sender = EchoProbeSender(FakeSocket)
    with pytest.raises(ValueError):
        sender.send("10.0.0.9", ttl, timeout)
