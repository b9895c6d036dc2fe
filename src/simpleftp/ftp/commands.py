"""FTP command table for simpleftp.

Each supported verb is described once: whether it is a plain
command/reply exchange or a data transfer, and which reply codes count
as success for it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet

from simpleftp.ftp.exceptions import FTPReplyError, FTPUnexpectedReplyError
from simpleftp.ftp.reply import Reply
from simpleftp.ftp.status import (
    CLOSING_DATA_CONNECTION,
    COMMAND_OK,
    COMMAND_SUPERFLUOUS,
    DATA_CONNECTION_OPEN,
    DIRECTORY_STATUS,
    FILE_ACTION_OK,
    FILE_ACTION_PENDING,
    FILE_STATUS,
    HELP_MESSAGE,
    LOGGED_IN,
    NAME_SYSTEM,
    NEED_ACCOUNT,
    NEED_PASSWORD,
    PASSIVE_MODE,
    PATH_CREATED,
    SERVICE_CLOSING,
    SYSTEM_STATUS,
)


class CommandKind(Enum):
    """How a command is carried out."""
    SIMPLE = "simple"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class Command:
    """Descriptor for one FTP verb."""
    verb: str
    kind: CommandKind = CommandKind.SIMPLE
    # Empty means any 2xx reply
    success_codes: FrozenSet[int] = frozenset()

    @property
    def is_transfer(self) -> bool:
        return self.kind is CommandKind.TRANSFER

    def accepts(self, reply: Reply) -> bool:
        """True if the reply completes this command successfully."""
        if self.success_codes:
            return reply.code in self.success_codes
        return reply.is_positive_completion

    def check(self, reply: Reply) -> Reply:
        """
        Return the reply if it is a success for this command.

        Raises:
            FTPReplyError: For 4xx/5xx replies
            FTPUnexpectedReplyError: For any other code not accepted
        """
        if self.accepts(reply):
            return reply
        if reply.is_error:
            raise FTPReplyError(self.verb, reply)
        raise FTPUnexpectedReplyError(self.verb, reply)


def _simple(verb: str, *codes: int) -> Command:
    return Command(verb, CommandKind.SIMPLE, frozenset(codes))


def _transfer(verb: str) -> Command:
    return Command(verb, CommandKind.TRANSFER)


COMMANDS: Dict[str, Command] = {
    command.verb: command
    for command in (
        # Access control
        _simple("USER", COMMAND_SUPERFLUOUS, LOGGED_IN, NEED_PASSWORD, NEED_ACCOUNT),
        _simple("PASS", COMMAND_SUPERFLUOUS, LOGGED_IN, NEED_ACCOUNT),
        _simple("ACCT", COMMAND_SUPERFLUOUS, LOGGED_IN),
        _simple("CWD", COMMAND_OK, FILE_ACTION_OK),
        _simple("CDUP", COMMAND_OK, FILE_ACTION_OK),
        _simple("SMNT", COMMAND_OK, COMMAND_SUPERFLUOUS, FILE_ACTION_OK),
        _simple("QUIT", SERVICE_CLOSING),
        # Transfer parameters
        _simple("PASV", PASSIVE_MODE),
        # Service commands
        _transfer("RETR"),
        _transfer("STOR"),
        _transfer("STOU"),
        _transfer("APPE"),
        _transfer("LIST"),
        _transfer("NLST"),
        _simple("ALLO", COMMAND_OK, COMMAND_SUPERFLUOUS),
        _simple("RNFR", FILE_ACTION_PENDING),
        _simple("RNTO", FILE_ACTION_OK),
        _simple("ABOR", DATA_CONNECTION_OPEN, CLOSING_DATA_CONNECTION),
        _simple("DELE", FILE_ACTION_OK),
        _simple("RMD", FILE_ACTION_OK),
        _simple("MKD", PATH_CREATED),
        _simple("PWD", PATH_CREATED),
        _simple("SYST", NAME_SYSTEM),
        _simple("STAT", SYSTEM_STATUS, DIRECTORY_STATUS, FILE_STATUS),
        _simple("HELP", SYSTEM_STATUS, HELP_MESSAGE),
        _simple("NOOP", COMMAND_OK),
    )
}


def get_command(verb: str) -> Command:
    """
    Look up the descriptor for a verb.

    Raises:
        KeyError: If the verb is not supported
    """
    return COMMANDS[verb.upper()]
