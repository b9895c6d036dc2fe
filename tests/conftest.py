"""Pytest configuration and shared fixtures for simpleftp tests."""

import socket

import pytest

from tests.fakes import FakeNetwork


# Test constants
TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"


@pytest.fixture
def network(monkeypatch) -> FakeNetwork:
    """Patch socket.create_connection with a scripted fake network."""
    fake = FakeNetwork()
    monkeypatch.setattr(socket, "create_connection", fake.create_connection)
    return fake
