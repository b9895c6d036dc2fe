"""Local FTP server for integration testing.

Uses pyftpdlib to serve a temporary directory on 127.0.0.1 with one
password-protected user and anonymous access. Sessions start in
binary (image) mode so payloads are not line-ending translated.
"""

import tempfile
import threading
import time
from pathlib import Path
from typing import Optional

from pyftpdlib.authorizers import DummyAuthorizer
from pyftpdlib.handlers import FTPHandler
from pyftpdlib.servers import FTPServer

from tests.conftest import TEST_FTP_HOST, TEST_FTP_PASS, TEST_FTP_USER


class MockFTPServer:
    """
    Real FTP server running in a background thread.

    Usage:
        with MockFTPServer() as server:
            # Connect to server.host:server.port
            # server.root_dir is the served directory
            pass

    Port 0 lets the OS pick a free control port; the chosen port is
    available from `port` once the server has started.
    """

    def __init__(
        self,
        port: int = 0,
        username: str = TEST_FTP_USER,
        password: str = TEST_FTP_PASS,
    ):
        self.requested_port = port
        self.username = username
        self.password = password

        self._server: Optional[FTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._temp_dir: Optional[tempfile.TemporaryDirectory] = None
        self._root_dir: Optional[Path] = None

    @property
    def root_dir(self) -> Path:
        """Directory served as "/"."""
        if self._root_dir is None:
            raise RuntimeError("Server not started")
        return self._root_dir

    @property
    def host(self) -> str:
        return TEST_FTP_HOST

    @property
    def port(self) -> int:
        """Control port the server is listening on."""
        if self._server is None:
            raise RuntimeError("Server not started")
        return self._server.address[1]

    def _create_files(self) -> None:
        """Populate the served directory."""
        root = self._root_dir
        (root / "readme.txt").write_text("Welcome to the test server.\n", encoding="utf-8")
        (root / "pub").mkdir()
        (root / "pub" / "data.bin").write_bytes(bytes(range(256)) * 64)
        (root / "incoming").mkdir()

    def start(self) -> None:
        """Start the FTP server in a background thread."""
        self._temp_dir = tempfile.TemporaryDirectory(prefix="simpleftp_test_")
        self._root_dir = Path(self._temp_dir.name)
        self._create_files()

        authorizer = DummyAuthorizer()
        authorizer.add_user(
            self.username,
            self.password,
            str(self._root_dir),
            perm="elradfmwMT"
        )
        authorizer.add_anonymous(str(self._root_dir))

        class Handler(FTPHandler):
            def on_connect(self):
                # The client never sends TYPE; serve files byte for byte
                self._current_type = "i"

        Handler.authorizer = authorizer
        Handler.passive_ports = range(60000, 60100)
        Handler.auth_failed_timeout = 0.01
        Handler.banner = "simpleftp test server ready."

        self._server = FTPServer((self.host, self.requested_port), Handler)

        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

        # Give server time to start
        time.sleep(0.2)

    def stop(self) -> None:
        """Stop the FTP server and clean up."""
        if self._server:
            self._server.close_all()

        if self._temp_dir:
            self._temp_dir.cleanup()

        self._server = None
        self._thread = None
        self._temp_dir = None
        self._root_dir = None

    def __enter__(self) -> "MockFTPServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
