"""
Forward and reverse name resolution.
"""


import ipaddress
import socket
from abc import ABC, abstractmethod

__all__ = ["is_valid_addr", "addr_is_v4", "Resolver", "SocketResolver"]


def is_valid_addr(addr: str, /) -> bool:
    """
    Check if an internet address is valid.

    Attributes
    ----------
    addr : str
        Internet address to check.

    Returns
    -------
    bool
        True if the supplied address is a valid IP address.
    """
    try:
        ipaddress.ip_address(addr)
    except ValueError:
        return False
    return True


def addr_is_v4(addr: str, /) -> bool | None:
    """
    Whether the supplied ip address is IPv4 address.

    Returns
    -------
    bool | None
        `True` if `addr` is IPv4 address. Otherwise `False`. In case when the
        address is not valid returns `None`.
    """
    if not is_valid_addr(addr):
        return None
    return isinstance(ipaddress.ip_address(addr), ipaddress.IPv4Address)


class Resolver(ABC):
    """
    Name resolution used by the tracer. Both lookups report failure with
    `None`, never with an exception.
    """

    @abstractmethod
    def resolve_address(self, name: str, /) -> str | None:
        """Resolve a host name or literal address to an address."""
        raise NotImplementedError

    @abstractmethod
    def resolve_name(self, address: str, /) -> str | None:
        """Reverse-resolve an address to a host name."""
        raise NotImplementedError


class SocketResolver(Resolver):
    """
    Resolver backed by the system resolver.
    """

    def resolve_address(self, name: str, /) -> str | None:
        if not name:
            return None

        if addr_is_v4(name):
            return name

        try:
            infos = socket.getaddrinfo(name, None, socket.AF_INET,
                                       proto=socket.IPPROTO_ICMP)
        except (socket.gaierror, UnicodeError, OSError):
            return None

        for _, _, _, _, sockaddr in infos:
            return str(sockaddr[0])

        return None

    def resolve_name(self, address: str, /) -> str | None:
        try:
            hostname = socket.gethostbyaddr(address)[0]
        except (socket.herror, socket.gaierror, UnicodeError, OSError):
            return None

        if not hostname or hostname == address:
            return None

        return hostname
