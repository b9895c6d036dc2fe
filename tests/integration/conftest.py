"""Fixtures for integration tests against a local FTP server."""

import pytest

from tests.integration.mock_ftp_server import MockFTPServer


@pytest.fixture
def ftp_server():
    """Provide a running FTP server with a fresh directory per test."""
    server = MockFTPServer()
    server.start()
    yield server
    server.stop()
