"""Unit tests for the FTP command table."""

import pytest

from simpleftp.ftp.commands import COMMANDS, Command, CommandKind, get_command
from simpleftp.ftp.exceptions import FTPReplyError, FTPUnexpectedReplyError
from simpleftp.ftp.reply import Reply


class TestCommandTable:
    """Tests for the verb table contents."""

    @pytest.mark.parametrize("verb", ["RETR", "STOR", "STOU", "APPE", "LIST", "NLST"])
    def test_transfer_verbs(self, verb):
        """Test data-bearing verbs are marked as transfers."""
        assert COMMANDS[verb].is_transfer is True

    @pytest.mark.parametrize("verb, code", [
        ("USER", 331),
        ("USER", 202),
        ("PASS", 230),
        ("ACCT", 202),
        ("CWD", 250),
        ("QUIT", 221),
        ("PASV", 227),
        ("RNFR", 350),
        ("RNTO", 250),
        ("ABOR", 226),
        ("MKD", 257),
        ("PWD", 257),
        ("SYST", 215),
        ("STAT", 213),
        ("HELP", 214),
        ("NOOP", 200),
    ])
    def test_success_codes(self, verb, code):
        assert COMMANDS[verb].accepts(Reply(code, ("ok",)))

    def test_lookup_is_case_insensitive(self):
        assert get_command("noop") is COMMANDS["NOOP"]

    def test_unknown_verb(self):
        with pytest.raises(KeyError):
            get_command("SITE")


class TestCommandCheck:
    """Tests for Command.check."""

    def test_accepted_reply_returned(self):
        reply = Reply(250, ("Deleted",))
        assert COMMANDS["DELE"].check(reply) is reply

    def test_error_reply(self):
        with pytest.raises(FTPReplyError) as exc_info:
            COMMANDS["DELE"].check(Reply(550, ("No such file",)))
        assert exc_info.value.command == "DELE"

    def test_other_positive_code_is_unexpected(self):
        """Test a 2xx outside the allowed set is a protocol error."""
        with pytest.raises(FTPUnexpectedReplyError):
            COMMANDS["RNFR"].check(Reply(250, ("too eager",)))

    def test_empty_code_set_accepts_any_completion(self):
        command = Command("XYZ", CommandKind.SIMPLE)
        assert command.accepts(Reply(299, ("fine",)))
        assert not command.accepts(Reply(350, ("more",)))
