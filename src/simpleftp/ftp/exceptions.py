"""FTP-specific exceptions for simpleftp.

Custom exception hierarchy separating the three ways an exchange can
fail: the socket broke (FTPIOError), the server spoke something that is
not FTP (FTPProtocolError), or the server answered with a 4xx/5xx reply
(FTPReplyError).
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from simpleftp.ftp.reply import Reply


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPIOError(FTPError):
    """Reading from or writing to a socket failed."""

    def __init__(self, operation: str, original_error: Exception = None):
        self.operation = operation
        message = f"I/O error during {operation}"
        super().__init__(message, original_error)


class FTPConnectionError(FTPIOError):
    """Failed to establish a control or data connection."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        super().__init__(f"connect to {host}:{port}", original_error)
        self.message = f"Failed to connect to {host}:{port}"


class FTPTimeoutError(FTPIOError):
    """Socket operation timed out."""

    def __init__(self, operation: str = "Operation", timeout: Optional[float] = None):
        self.timeout = timeout
        super().__init__(operation)
        self.message = f"{operation} timed out after {timeout} seconds"


class FTPProtocolError(FTPError):
    """Server sent something that does not follow the FTP reply grammar."""

    def __init__(self, message: str, reply: "Optional[Reply]" = None):
        self.reply = reply
        super().__init__(message)


class FTPUnexpectedReplyError(FTPProtocolError):
    """Well-formed reply whose code the command does not allow."""

    def __init__(self, command: str, reply: "Reply"):
        self.command = command
        super().__init__(f"Unexpected reply to {command}: {reply}", reply)


class FTPReplyError(FTPError):
    """Server answered with a transient (4xx) or permanent (5xx) error."""

    def __init__(self, command: str, reply: "Reply"):
        self.command = command
        self.reply = reply
        super().__init__(f"{command} failed: {reply}")

    @property
    def code(self) -> int:
        """Reply code that caused the failure."""
        return self.reply.code

    @property
    def is_transient(self) -> bool:
        """True for 4xx replies, where retrying later may succeed."""
        return 400 <= self.reply.code < 500


class FTPAuthenticationError(FTPReplyError):
    """FTP authentication (login) failed."""

    def __init__(self, username: str, command: str, reply: "Reply"):
        self.username = username
        super().__init__(command, reply)
        self.message = f"Authentication failed for user '{username}': {reply}"


class FTPTransferError(FTPReplyError):
    """Final reply of a data transfer was not a success."""

    def __init__(
        self,
        command: str,
        path: Optional[str],
        reply: "Reply",
        bytes_transferred: int = 0
    ):
        self.path = path
        self.bytes_transferred = bytes_transferred
        super().__init__(command, reply)
        target = f" {path}" if path else ""
        self.message = (
            f"{command}{target} failed after {bytes_transferred} bytes: {reply}"
        )


class FTPAccountRequiredError(FTPError):
    """Server requires an ACCT command to complete the login."""

    def __init__(self, username: str, reply: "Reply"):
        self.username = username
        self.reply = reply
        message = f"Account information required for user '{username}': {reply}"
        super().__init__(message)


class FTPNotConnectedError(FTPError):
    """Operation attempted without a usable control connection."""

    def __init__(self, operation: str = "Operation"):
        message = f"{operation} requires an active FTP connection"
        super().__init__(message)
