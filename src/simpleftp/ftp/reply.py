"""FTP reply parsing for simpleftp.

Provides the Reply dataclass and the parser that turns bytes read from
the control connection into replies, including multi-line replies.
"""

import io
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Tuple

from simpleftp.ftp.exceptions import FTPProtocolError

logger = logging.getLogger("simpleftp.reply")

DEFAULT_ENCODING = "utf-8"

# Longest reply line accepted before the server is considered broken
MAX_LINE = 8192

# "ddd" followed by a space (last line) or dash (first line of several)
REPLY_LINE = re.compile(r"^([0-9]{3})([ -])(.*)$", re.DOTALL)


class ReplyCategory(Enum):
    """Reply category given by the first digit of the code."""
    PRELIMINARY = 1
    COMPLETION = 2
    INTERMEDIATE = 3
    TRANSIENT_ERROR = 4
    PERMANENT_ERROR = 5


@dataclass(frozen=True)
class Reply:
    """One complete server reply."""
    code: int
    lines: Tuple[str, ...]

    @property
    def category(self) -> ReplyCategory:
        """Category of the reply code."""
        return ReplyCategory(self.code // 100)

    @property
    def text(self) -> str:
        """Message text, one line per reply line."""
        return "\n".join(self.lines)

    @property
    def is_preliminary(self) -> bool:
        return self.category is ReplyCategory.PRELIMINARY

    @property
    def is_positive_completion(self) -> bool:
        return self.category is ReplyCategory.COMPLETION

    @property
    def is_intermediate(self) -> bool:
        return self.category is ReplyCategory.INTERMEDIATE

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx replies."""
        return self.code >= 400

    def __str__(self) -> str:
        return f"{self.code} {self.text}"


def _read_line(stream: BinaryIO, encoding: str) -> str:
    """
    Read one CRLF-terminated line and return it without the terminator.

    Raises:
        FTPProtocolError: On EOF, an overlong line or undecodable bytes
    """
    raw = stream.readline(MAX_LINE + 1)
    if len(raw) > MAX_LINE:
        raise FTPProtocolError(f"Reply line exceeds {MAX_LINE} bytes")
    if not raw:
        raise FTPProtocolError("Connection closed while waiting for a reply")
    if not raw.endswith(b"\n"):
        raise FTPProtocolError(f"Connection closed in the middle of a reply line: {raw!r}")

    # Bare LF is tolerated
    raw = raw[:-2] if raw.endswith(b"\r\n") else raw[:-1]
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise FTPProtocolError(f"Reply line is not valid {encoding}: {raw!r}") from e


def read_reply(stream: BinaryIO, encoding: str = DEFAULT_ENCODING) -> Reply:
    """
    Read exactly one reply from a binary stream.

    The stream is left positioned just after the reply's last line.

    Args:
        stream: Binary file-like object providing readline()
        encoding: Text encoding of the control connection

    Returns:
        Parsed Reply

    Raises:
        FTPProtocolError: If the bytes are not a well-formed reply
    """
    first = _read_line(stream, encoding)
    match = REPLY_LINE.match(first)
    if match is None:
        raise FTPProtocolError(f"Malformed reply line: {first!r}")

    code = int(match.group(1))
    if not 100 <= code <= 599:
        raise FTPProtocolError(f"Reply code out of range: {first!r}")

    lines = [match.group(3)]
    if match.group(2) == " ":
        return Reply(code, tuple(lines))

    continuation = match.group(1) + "-"
    while True:
        line = _read_line(stream, encoding)
        last = REPLY_LINE.match(line)
        if last is not None and last.group(2) == " ":
            if int(last.group(1)) != code:
                raise FTPProtocolError(
                    f"Multi-line reply opened with {code} but closed with {line!r}"
                )
            lines.append(last.group(3))
            break
        if line.startswith(continuation):
            line = line[len(continuation):]
        lines.append(line)

    logger.debug(f"Multi-line {code} reply ({len(lines)} lines)")
    return Reply(code, tuple(lines))


def parse_reply(data: bytes, encoding: str = DEFAULT_ENCODING) -> Reply:
    """
    Parse a complete reply held in memory.

    Args:
        data: Raw reply bytes, CRLF line endings included
        encoding: Text encoding

    Returns:
        Parsed Reply
    """
    return read_reply(io.BytesIO(data), encoding)


def parse_quoted_path(reply: Reply) -> str:
    """
    Extract the directory name from a 257 reply.

    The name is enclosed in double quotes, with embedded quotes doubled.
    Replies that do not start with a quoted name are returned verbatim.
    """
    text = reply.lines[0]
    if not text.startswith('"'):
        return reply.text

    dirname = []
    i = 1
    while i < len(text):
        char = text[i]
        i += 1
        if char == '"':
            if i >= len(text) or text[i] != '"':
                break
            i += 1
        dirname.append(char)
    return "".join(dirname)
