"""Passive-mode data connections for simpleftp.

Parses the address tuple of a PASV reply and opens the data connection
the server is listening on.
"""

import logging
import re
import socket
from dataclasses import dataclass
from typing import Optional

from simpleftp.ftp.control import ControlChannel
from simpleftp.ftp.exceptions import (
    FTPConnectionError,
    FTPProtocolError,
    FTPReplyError,
    FTPTimeoutError,
    FTPUnexpectedReplyError,
)
from simpleftp.ftp.status import PASSIVE_MODE

logger = logging.getLogger("simpleftp.passive")

PARENTHESIZED = re.compile(r"\(([^)]*)\)")
OCTET = re.compile(r"^[0-9]{1,3}$")


@dataclass(frozen=True)
class PasvAddress:
    """Host and port announced in a PASV reply."""
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_pasv_address(text: str) -> PasvAddress:
    """
    Extract the data address from PASV reply text.

    Args:
        text: Reply text containing "(h1,h2,h3,h4,p1,p2)"

    Returns:
        PasvAddress with host "h1.h2.h3.h4" and port p1*256+p2

    Raises:
        FTPProtocolError: If no well-formed six-number tuple is present
    """
    match = PARENTHESIZED.search(text)
    if match is None:
        raise FTPProtocolError(f"No address tuple in PASV reply: {text!r}")

    fields = [field.strip() for field in match.group(1).split(",")]
    if len(fields) != 6:
        raise FTPProtocolError(
            f"PASV tuple must have 6 fields, got {len(fields)}: {text!r}"
        )
    if not all(OCTET.match(field) for field in fields):
        raise FTPProtocolError(f"Non-numeric field in PASV tuple: {text!r}")

    numbers = [int(field) for field in fields]
    if any(number > 255 for number in numbers):
        raise FTPProtocolError(f"PASV tuple field out of range: {text!r}")

    host = ".".join(str(number) for number in numbers[:4])
    return PasvAddress(host=host, port=numbers[4] * 256 + numbers[5])


class DataConnection:
    """One transfer's data socket. Closing is idempotent."""

    def __init__(self, sock: socket.socket, address: PasvAddress):
        self._sock: Optional[socket.socket] = sock
        self.address = address

    @property
    def closed(self) -> bool:
        return self._sock is None

    def receive(self, blocksize: int) -> bytes:
        """Read up to blocksize bytes; b"" means the server closed."""
        return self._sock.recv(blocksize)

    def send(self, data: bytes) -> None:
        self._sock.sendall(data)

    def shutdown_write(self) -> None:
        """Signal end of upload to the server."""
        self._sock.shutdown(socket.SHUT_WR)

    def close(self) -> None:
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logger.debug(f"Ignoring error closing data connection {self.address}: {e}")
        finally:
            self._sock = None
            logger.debug(f"Data connection {self.address} closed")

    def __enter__(self) -> "DataConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def open_passive(
    control: ControlChannel,
    timeout: Optional[float] = None
) -> DataConnection:
    """
    Negotiate passive mode and connect to the announced address.

    Args:
        control: Control channel to send PASV on
        timeout: Socket timeout for the data connection

    Returns:
        Open DataConnection

    Raises:
        FTPReplyError: If the server refuses PASV with 4xx/5xx
        FTPUnexpectedReplyError: If the reply code is not 227
        FTPProtocolError: If the address tuple cannot be parsed
        FTPConnectionError: If the data connection cannot be opened
    """
    reply = control.send_command("PASV")
    if reply.code != PASSIVE_MODE:
        if reply.is_error:
            raise FTPReplyError("PASV", reply)
        raise FTPUnexpectedReplyError("PASV", reply)

    address = parse_pasv_address(reply.text)
    logger.debug(f"Opening data connection to {address}")
    try:
        sock = socket.create_connection((address.host, address.port), timeout=timeout)
    except socket.timeout as e:
        raise FTPTimeoutError("Data connection", timeout) from e
    except OSError as e:
        raise FTPConnectionError(address.host, address.port, e) from e

    return DataConnection(sock, address)
