"""FTP control connection management for simpleftp.

Provides ConnectionState enum, FTPConnectionConfig dataclass,
and ControlChannel class owning the control socket.
"""

import logging
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from simpleftp.ftp.exceptions import (
    FTPConnectionError,
    FTPIOError,
    FTPNotConnectedError,
    FTPProtocolError,
    FTPTimeoutError,
)
from simpleftp.ftp.reply import DEFAULT_ENCODING, Reply, read_reply
from simpleftp.utils.validators import (
    validate_blocksize,
    validate_host,
    validate_port,
    validate_timeout,
)

logger = logging.getLogger("simpleftp.control")

DEFAULT_PORT = 21
DEFAULT_BLOCKSIZE = 8192

CRLF = "\r\n"


class ConnectionState(Enum):
    """Control connection state."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class FTPConnectionConfig:
    """FTP connection configuration."""
    host: str
    port: int = DEFAULT_PORT
    username: str = "anonymous"
    timeout: Optional[float] = None
    blocksize: int = DEFAULT_BLOCKSIZE
    encoding: str = DEFAULT_ENCODING

    def __post_init__(self):
        """Validate configuration after initialization."""
        for valid, error in (
            validate_host(self.host),
            validate_port(self.port),
            validate_timeout(self.timeout),
            validate_blocksize(self.blocksize),
        ):
            if not valid:
                raise ValueError(error)


def format_command(verb: str, args: Optional[str] = None) -> str:
    """
    Build the wire form of a command.

    Args:
        verb: Command verb, e.g. "RETR"
        args: Argument string; None omits it, "" keeps the separating space

    Returns:
        Command line terminated by CRLF

    Raises:
        ValueError: If the command would contain a line break
    """
    line = verb if args is None else f"{verb} {args}"
    if "\r" in line or "\n" in line:
        raise ValueError("Command must not contain CR or LF characters")
    return line + CRLF


def _loggable(line: str) -> str:
    """Command line with any PASS argument masked."""
    line = line.rstrip(CRLF)
    if line[:5].upper() == "PASS ":
        return line[:5] + "*" * (len(line) - 5)
    return line


class ControlChannel:
    """
    Owns the control socket and runs one command/reply exchange at a time.

    Not safe for concurrent use; callers must serialize access.
    """

    def __init__(self, sock: socket.socket, encoding: str = DEFAULT_ENCODING):
        """
        Wrap an already connected socket.

        Args:
            sock: Connected control socket, owned from now on
            encoding: Text encoding for commands and replies
        """
        self._sock: Optional[socket.socket] = sock
        self._reader = sock.makefile("rb")
        self._state = ConnectionState.CONNECTED
        self.encoding = encoding
        self.greeting: Optional[Reply] = None

    @classmethod
    def connect(
        cls,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: Optional[float] = None,
        encoding: str = DEFAULT_ENCODING
    ) -> "ControlChannel":
        """
        Open a control connection and consume the server greeting.

        Args:
            host: Server host name or address
            port: Server control port
            timeout: Socket timeout in seconds, None blocks indefinitely
            encoding: Text encoding for commands and replies

        Returns:
            Connected channel with the greeting stored in `greeting`

        Raises:
            FTPConnectionError: If the connection cannot be opened
            FTPTimeoutError: If connecting times out
            FTPProtocolError: If the greeting is malformed
        """
        logger.info(f"Connecting to {host}:{port}")
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except socket.timeout as e:
            raise FTPTimeoutError("Connection", timeout) from e
        except OSError as e:
            raise FTPConnectionError(host, port, e) from e

        channel = cls(sock, encoding)
        channel.greeting = channel.read_reply()
        logger.info(f"Connected to {host}:{port}: {channel.greeting}")
        return channel

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True while the channel can carry commands."""
        return self._state == ConnectionState.CONNECTED

    def _require_socket(self, operation: str) -> socket.socket:
        if not self.is_connected or self._sock is None:
            raise FTPNotConnectedError(operation)
        return self._sock

    def _fail(self) -> None:
        """Mark the channel unusable after an I/O or protocol failure."""
        self._release()
        self._state = ConnectionState.ERROR

    def send_command(self, verb: str, args: Optional[str] = None) -> Reply:
        """
        Send one command and read its reply.

        Args:
            verb: Command verb
            args: Optional argument string

        Returns:
            The reply to the command

        Raises:
            ValueError: If the command contains CR or LF
            FTPNotConnectedError: If the channel is closed or failed
            FTPIOError: If the socket fails
            FTPProtocolError: If the reply is malformed
        """
        line = format_command(verb, args)
        sock = self._require_socket(verb)

        logger.debug(f"-> {_loggable(line)}")
        try:
            sock.sendall(line.encode(self.encoding))
        except socket.timeout as e:
            timeout = sock.gettimeout()
            self._fail()
            raise FTPTimeoutError(f"Sending {verb}", timeout) from e
        except OSError as e:
            self._fail()
            raise FTPIOError(f"sending {verb}", e) from e

        return self.read_reply()

    def read_reply(self) -> Reply:
        """
        Read the next reply without sending anything.

        Used for the greeting and for the final reply of a transfer.

        Raises:
            FTPNotConnectedError: If the channel is closed or failed
            FTPIOError: If the socket fails
            FTPProtocolError: If the reply is malformed
        """
        sock = self._require_socket("Reading a reply")
        try:
            reply = read_reply(self._reader, self.encoding)
        except socket.timeout as e:
            timeout = sock.gettimeout()
            self._fail()
            raise FTPTimeoutError("Reading a reply", timeout) from e
        except OSError as e:
            self._fail()
            raise FTPIOError("reading a reply", e) from e
        except FTPProtocolError:
            self._fail()
            raise

        logger.debug(f"<- {reply}")
        return reply

    def _release(self) -> None:
        if self._sock is None:
            return
        try:
            self._reader.close()
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer may already be gone
            pass
        finally:
            self._sock.close()
            self._sock = None

    def close(self) -> None:
        """Close the control connection. Safe to call more than once."""
        if self._sock is not None:
            logger.info("Closing control connection")
        self._release()
        if self._state != ConnectionState.ERROR:
            self._state = ConnectionState.DISCONNECTED
