"""Unit tests for connection parameter validators."""

import pytest

from simpleftp.utils.validators import (
    validate_blocksize,
    validate_host,
    validate_hostname,
    validate_ip_address,
    validate_port,
    validate_timeout,
)


class TestHostValidation:
    """Tests for host, hostname and IP validation."""

    @pytest.mark.parametrize("ip", ["127.0.0.1", "192.168.1.100", "255.255.255.255"])
    def test_valid_ip(self, ip):
        assert validate_ip_address(ip) == (True, None)

    @pytest.mark.parametrize("ip", ["256.1.1.1", "1.2.3", "a.b.c.d"])
    def test_invalid_ip(self, ip):
        is_valid, error = validate_ip_address(ip)
        assert is_valid is False
        assert "Invalid IP address" in error

    def test_hostname(self):
        assert validate_hostname("ftp.example.com") == (True, None)
        assert validate_hostname("-bad.example.com")[0] is False

    @pytest.mark.parametrize("host", ["localhost", "ftp.example.com", "10.0.0.1", " 10.0.0.1 "])
    def test_valid_host(self, host):
        assert validate_host(host) == (True, None)

    @pytest.mark.parametrize("host", ["", "   ", "bad host", "ftp://example.com"])
    def test_invalid_host(self, host):
        is_valid, error = validate_host(host)
        assert is_valid is False
        assert error


class TestNumericValidation:
    """Tests for port, timeout and block size validation."""

    @pytest.mark.parametrize("port", [1, 21, 2121, 65535, "21"])
    def test_valid_port(self, port):
        assert validate_port(port) == (True, None)

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_port_out_of_range(self, port):
        is_valid, error = validate_port(port)
        assert is_valid is False
        assert "between 1 and 65535" in error

    def test_port_not_a_number(self):
        assert validate_port("ftp") == (False, "Port must be a number")

    def test_timeout(self):
        """Test None disables the timeout and positive values are accepted."""
        assert validate_timeout(None) == (True, None)
        assert validate_timeout(0.5) == (True, None)
        assert validate_timeout(0)[0] is False
        assert validate_timeout(-3)[0] is False
        assert validate_timeout("soon") == (False, "Timeout must be a number")

    def test_blocksize(self):
        assert validate_blocksize(8192) == (True, None)
        assert validate_blocksize(0)[0] is False
        assert validate_blocksize(True)[0] is False
        assert validate_blocksize(1.5) == (False, "Block size must be an integer")
