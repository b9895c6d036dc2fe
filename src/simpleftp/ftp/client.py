"""FTP client for simpleftp.

Provides the SessionState enum and FtpClient, the public entry point
that maps every supported FTP verb onto the control channel or the
transfer sequence.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional

from simpleftp.ftp.commands import Command, get_command
from simpleftp.ftp.control import (
    DEFAULT_BLOCKSIZE,
    DEFAULT_PORT,
    ConnectionState,
    ControlChannel,
    FTPConnectionConfig,
)
from simpleftp.ftp.exceptions import (
    FTPAccountRequiredError,
    FTPAuthenticationError,
    FTPError,
    FTPNotConnectedError,
    FTPReplyError,
)
from simpleftp.ftp.reply import DEFAULT_ENCODING, Reply, parse_quoted_path
from simpleftp.ftp.status import NEED_ACCOUNT, NEED_PASSWORD, READY_IN_MINUTES
from simpleftp.ftp.transfer import (
    ProgressCallback,
    TransferKind,
    TransferResult,
    retrieve_lines,
    transfer,
)

logger = logging.getLogger("simpleftp.client")


class SessionState(Enum):
    """FTP session state."""
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class FtpClient:
    """
    Synchronous FTP client using passive-mode data connections.

    Usage:
        with FtpClient.connect("ftp.example.com") as client:
            client.login("user", "secret")
            with open("readme.txt", "wb") as f:
                client.get("/readme.txt", f)

    One instance owns one control connection and is not safe to share
    between threads; use one client per concurrent operation.
    """

    def __init__(
        self,
        channel: ControlChannel,
        greeting: Optional[Reply] = None,
        timeout: Optional[float] = None,
        blocksize: int = DEFAULT_BLOCKSIZE
    ):
        """
        Initialize the client around a connected control channel.

        Args:
            channel: Connected control channel, owned from now on
            greeting: Server greeting, defaults to the channel's
            timeout: Socket timeout for data connections
            blocksize: Chunk size for transfers
        """
        self._channel = channel
        self._greeting = greeting or channel.greeting
        self._state = SessionState.CONNECTED
        self._username: Optional[str] = None
        self.timeout = timeout
        self.blocksize = blocksize

    @classmethod
    def connect(
        cls,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: Optional[float] = None,
        blocksize: int = DEFAULT_BLOCKSIZE,
        encoding: str = DEFAULT_ENCODING
    ) -> "FtpClient":
        """
        Connect to a server and read its greeting.

        Args:
            host: Server host name or address
            port: Control port
            timeout: Socket timeout in seconds, None blocks indefinitely
            blocksize: Chunk size for transfers
            encoding: Encoding of commands, replies and listings

        Returns:
            Connected, not yet authenticated client

        Raises:
            FTPConnectionError: If the connection cannot be opened
            FTPReplyError: If the server greets with 4xx/5xx
        """
        channel = ControlChannel.connect(host, port, timeout=timeout, encoding=encoding)
        greeting = channel.greeting
        try:
            if greeting.code == READY_IN_MINUTES:
                logger.info(f"Server not ready yet: {greeting}")
                greeting = channel.read_reply()
            if greeting.is_error:
                raise FTPReplyError("connect", greeting)
        except FTPError:
            channel.close()
            raise
        return cls(channel, greeting=greeting, timeout=timeout, blocksize=blocksize)

    @classmethod
    def open(
        cls,
        config: FTPConnectionConfig,
        password: str = "",
        account: Optional[str] = None
    ) -> "FtpClient":
        """
        Connect and log in using a connection configuration.

        Args:
            config: Connection configuration
            password: FTP password
            account: Optional ACCT information

        Returns:
            Authenticated client

        Raises:
            FTPConnectionError: If connection fails
            FTPAuthenticationError: If login fails
        """
        client = cls.connect(
            config.host,
            config.port,
            timeout=config.timeout,
            blocksize=config.blocksize,
            encoding=config.encoding
        )
        try:
            client.login(config.username, password, account=account)
        except Exception:
            client.close()
            raise
        return client

    @property
    def state(self) -> SessionState:
        """Current session state."""
        if self._state == SessionState.DISCONNECTED:
            return self._state
        if self._channel.state == ConnectionState.ERROR:
            return SessionState.ERROR
        return self._state

    @property
    def is_connected(self) -> bool:
        """True while commands can be sent."""
        return self._channel.is_connected

    @property
    def greeting(self) -> Optional[Reply]:
        """Reply the server sent when the connection opened."""
        return self._greeting

    @property
    def username(self) -> Optional[str]:
        """User of the current session, once logged in."""
        return self._username

    def _require_channel(self, operation: str) -> ControlChannel:
        if not self._channel.is_connected:
            raise FTPNotConnectedError(operation)
        return self._channel

    def _execute(self, verb: str, args: Optional[str] = None) -> Reply:
        """Send a simple command and check the reply against the verb table."""
        command = get_command(verb)
        if command.is_transfer:
            raise ValueError(f"{command.verb} needs a data connection")
        reply = self._require_channel(command.verb).send_command(command.verb, args)
        return command.check(reply)

    def _transfer_command(self, verb: str) -> Command:
        command = get_command(verb)
        if not command.is_transfer:
            raise ValueError(f"{command.verb} does not transfer data")
        return command

    def _transfer(
        self,
        verb: str,
        kind: TransferKind,
        path: Optional[str],
        stream: BinaryIO,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        command = self._transfer_command(verb)
        return transfer(
            self._require_channel(command.verb),
            kind,
            command.verb,
            path,
            stream,
            blocksize=self.blocksize,
            on_progress=on_progress,
            timeout=self.timeout
        )

    # Access control

    def login(
        self,
        user: str = "anonymous",
        password: str = "",
        account: Optional[str] = None
    ) -> Reply:
        """
        Authenticate with USER, then PASS and ACCT as the server asks.

        Args:
            user: Username
            password: Password, sent only if the server asks for one
            account: Account information, sent only on a 332 reply

        Returns:
            The reply that completed the login

        Raises:
            FTPAuthenticationError: If the server rejects the login
            FTPAccountRequiredError: If ACCT is needed and no account given
        """
        channel = self._require_channel("Login")
        verb = "USER"
        reply = channel.send_command(verb, user)

        if reply.code == NEED_PASSWORD:
            verb = "PASS"
            reply = channel.send_command(verb, password)

        if reply.code == NEED_ACCOUNT:
            if account is None:
                raise FTPAccountRequiredError(user, reply)
            verb = "ACCT"
            reply = channel.send_command(verb, account)

        if reply.is_error:
            raise FTPAuthenticationError(user, verb, reply)
        get_command(verb).check(reply)

        self._state = SessionState.AUTHENTICATED
        self._username = user
        logger.info(f"Logged in as {user}")
        return reply

    def account(self, account: str) -> Reply:
        """Send ACCT information."""
        reply = self._execute("ACCT", account)
        self._state = SessionState.AUTHENTICATED
        return reply

    def cwd(self, path: str) -> Reply:
        """Change the working directory."""
        return self._execute("CWD", path)

    def cdup(self) -> Reply:
        """Change to the parent directory."""
        return self._execute("CDUP")

    def smnt(self, path: str) -> Reply:
        """Mount a different file system structure."""
        return self._execute("SMNT", path)

    def logout(self) -> Reply:
        """
        Send QUIT and close the control connection.

        The connection is closed even if the server's reply is an error.
        """
        try:
            reply = self._execute("QUIT")
            logger.info(f"Logged out: {reply}")
            return reply
        finally:
            self.close()

    def disconnect(self) -> None:
        """Close the session gracefully, ignoring errors."""
        if self._channel.is_connected:
            try:
                self.logout()
            except FTPError as e:
                logger.debug(f"Ignoring error during logout: {e}")
        self.close()

    def close(self) -> None:
        """Close the control connection without sending QUIT."""
        self._channel.close()
        self._state = SessionState.DISCONNECTED

    def __enter__(self) -> "FtpClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    # Transfers

    def get(
        self,
        remote_path: str,
        sink: BinaryIO,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        """
        Download a file into a binary sink.

        Args:
            remote_path: File on the server
            sink: Object with write(bytes)
            on_progress: Optional progress callback

        Returns:
            TransferResult with the number of bytes received
        """
        return self._transfer("RETR", TransferKind.DOWNLOAD, remote_path, sink, on_progress)

    def put(
        self,
        source: BinaryIO,
        remote_path: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        """
        Upload a binary source, replacing any existing file.

        Args:
            source: Object with read(size) returning bytes
            remote_path: Destination on the server
            on_progress: Optional progress callback

        Returns:
            TransferResult with the number of bytes sent
        """
        return self._transfer("STOR", TransferKind.UPLOAD, remote_path, source, on_progress)

    def put_unique(
        self,
        source: BinaryIO,
        on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """
        Upload under a name chosen by the server.

        Returns:
            Name the server stored the file under
        """
        result = self._transfer("STOU", TransferKind.UPLOAD, None, source, on_progress)
        text = result.preliminary.lines[0]
        # RFC 1123: "150 FILE: name"
        if text.upper().startswith("FILE:"):
            return text[5:].strip()
        return result.preliminary.text

    def append(
        self,
        source: BinaryIO,
        remote_path: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        """Upload a binary source, appending to any existing file."""
        return self._transfer("APPE", TransferKind.APPEND, remote_path, source, on_progress)

    def list(self, path: Optional[str] = None) -> List[str]:
        """Long directory listing, one entry per line."""
        return self._listing("LIST", path)

    def nlst(self, path: Optional[str] = None) -> List[str]:
        """Names in a directory."""
        return self._listing("NLST", path)

    def _listing(self, verb: str, path: Optional[str]) -> List[str]:
        command = self._transfer_command(verb)
        channel = self._require_channel(command.verb)
        return retrieve_lines(
            channel,
            command.verb,
            path or None,
            channel.encoding,
            blocksize=self.blocksize,
            timeout=self.timeout
        )

    def download_file(
        self,
        remote_path: str,
        local_path: Path,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        """
        Download a remote file to a local path.

        A partially written local file is removed if the transfer fails.
        """
        local_path = Path(local_path)
        try:
            with open(local_path, "wb") as f:
                return self.get(remote_path, f, on_progress)
        except FTPError:
            local_path.unlink(missing_ok=True)
            raise

    def upload_file(
        self,
        local_path: Path,
        remote_path: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        """
        Upload a local file.

        If remote_path is not given, the local file name is used.
        """
        local_path = Path(local_path)
        if remote_path is None:
            remote_path = local_path.name
        with open(local_path, "rb") as f:
            return self.put(f, remote_path, on_progress)

    # File and directory commands

    def allo(self, size: int) -> Reply:
        """Reserve storage for an upload of the given size."""
        return self._execute("ALLO", str(size))

    def rename(self, from_path: str, to_path: str) -> Reply:
        """Rename a file with RNFR followed by RNTO."""
        self._execute("RNFR", from_path)
        return self._execute("RNTO", to_path)

    def abort(self) -> Reply:
        """Abort the previous data transfer."""
        return self._execute("ABOR")

    def dele(self, path: str) -> Reply:
        """Delete a file."""
        return self._execute("DELE", path)

    def rmd(self, path: str) -> Reply:
        """Remove a directory."""
        return self._execute("RMD", path)

    def mkd(self, path: str) -> str:
        """
        Create a directory.

        Returns:
            Directory name as reported by the server
        """
        return parse_quoted_path(self._execute("MKD", path))

    def pwd(self) -> str:
        """Current working directory on the server."""
        return parse_quoted_path(self._execute("PWD"))

    # Informational commands

    def syst(self) -> str:
        """Operating system type of the server."""
        return self._execute("SYST").text

    def stat(self, path: Optional[str] = None) -> str:
        """Server status, or status of a path when given."""
        return self._execute("STAT", path or None).text

    def help(self, topic: Optional[str] = None) -> str:
        """Help text from the server."""
        return self._execute("HELP", topic or None).text

    def noop(self) -> Reply:
        """Do nothing; keeps the connection alive."""
        return self._execute("NOOP")
