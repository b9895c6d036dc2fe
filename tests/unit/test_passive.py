"""Unit tests for passive-mode negotiation."""

import pytest

from simpleftp.ftp.control import ControlChannel
from simpleftp.ftp.exceptions import (
    FTPConnectionError,
    FTPProtocolError,
    FTPReplyError,
    FTPUnexpectedReplyError,
)
from simpleftp.ftp.passive import DataConnection, PasvAddress, open_passive, parse_pasv_address
from tests.fakes import FakeDataSocket


class TestParsePasvAddress:
    """Tests for extracting the address tuple."""

    def test_loopback_tuple(self):
        """Test (127,0,0,1,200,0) gives 127.0.0.1:51200."""
        address = parse_pasv_address("Entering Passive Mode (127,0,0,1,200,0).")
        assert address == PasvAddress(host="127.0.0.1", port=51200)

    def test_port_arithmetic(self):
        """Test port is p1*256+p2."""
        address = parse_pasv_address("(10,1,2,3,4,210)")
        assert address.host == "10.1.2.3"
        assert address.port == 4 * 256 + 210

    def test_spaces_inside_tuple(self):
        """Test whitespace around fields is ignored."""
        address = parse_pasv_address("=(192, 168, 0, 9, 19, 137)")
        assert address == PasvAddress("192.168.0.9", 19 * 256 + 137)

    def test_str(self):
        assert str(PasvAddress("127.0.0.1", 21)) == "127.0.0.1:21"

    @pytest.mark.parametrize("text", [
        "Entering Passive Mode 127,0,0,1,200,0",
        "Entering Passive Mode (127,0,0,1,200)",
        "Entering Passive Mode (127,0,0,1,200,0,7)",
        "Entering Passive Mode (127,0,0,x,200,0)",
        "Entering Passive Mode (127,0,0,-1,200,0)",
        "Entering Passive Mode (127,0,0,1,256,0)",
        "Entering Passive Mode (127,0,0,1,200,)",
        "Entering Passive Mode ()",
    ])
    def test_malformed_tuples(self, text):
        """Test wrong field counts and bad fields are protocol errors."""
        with pytest.raises(FTPProtocolError):
            parse_pasv_address(text)


class TestDataConnection:
    """Tests for DataConnection."""

    def test_context_manager_closes(self):
        sock = FakeDataSocket()
        with DataConnection(sock, PasvAddress("127.0.0.1", 1)) as data:
            assert data.closed is False
        assert data.closed is True
        assert sock.closed is True

    def test_close_is_idempotent(self):
        sock = FakeDataSocket()
        data = DataConnection(sock, PasvAddress("127.0.0.1", 1))

        data.close()
        data.close()

        assert sock.events.count(("data-close", None)) == 1


class TestOpenPassive:
    """Tests for PASV negotiation over the control channel."""

    def test_connects_to_announced_address(self, network):
        """Test PASV is sent and the tuple's address is dialled."""
        control_sock = network.control("220 hi", "227 Entering Passive Mode (127,0,0,1,200,0)")
        data_sock = network.data()
        channel = ControlChannel.connect("ftp.example.com")

        data = open_passive(channel)

        assert control_sock.sent_lines == ["PASV"]
        assert network.addresses[-1] == ("127.0.0.1", 51200)
        assert data.address == PasvAddress("127.0.0.1", 51200)
        data.close()
        assert data_sock.closed is True

    def test_refused_pasv(self, network):
        """Test a 5xx reply raises FTPReplyError with the code."""
        network.control("220 hi", "530 Please login with USER and PASS")
        channel = ControlChannel.connect("ftp.example.com")

        with pytest.raises(FTPReplyError) as exc_info:
            open_passive(channel)

        assert exc_info.value.code == 530
        assert len(network.addresses) == 1

    def test_unexpected_code(self, network):
        """Test a positive reply other than 227 is a protocol error."""
        network.control("220 hi", "200 whatever")
        channel = ControlChannel.connect("ftp.example.com")

        with pytest.raises(FTPUnexpectedReplyError):
            open_passive(channel)

    def test_unparsable_tuple(self, network):
        """Test a 227 without a tuple is a protocol error."""
        network.control("220 hi", "227 Entering Passive Mode")
        channel = ControlChannel.connect("ftp.example.com")

        with pytest.raises(FTPProtocolError, match="No address tuple"):
            open_passive(channel)

    def test_data_connection_refused(self, network):
        """Test failure to dial the data port raises FTPConnectionError."""
        network.control("220 hi", "227 Entering Passive Mode (127,0,0,1,200,0)")
        network.refuse()
        channel = ControlChannel.connect("ftp.example.com")

        with pytest.raises(FTPConnectionError):
            open_passive(channel)

        # Control channel stays usable
        assert channel.is_connected is True
