"""Data transfers for simpleftp.

Runs the PASV -> command -> payload -> final reply sequence shared by
RETR, STOR, STOU, APPE, LIST and NLST.
"""

import io
import logging
import socket
import time
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, List, Optional

from simpleftp.ftp.control import DEFAULT_BLOCKSIZE, ControlChannel
from simpleftp.ftp.exceptions import (
    FTPError,
    FTPIOError,
    FTPReplyError,
    FTPTimeoutError,
    FTPTransferError,
    FTPUnexpectedReplyError,
)
from simpleftp.ftp.passive import DataConnection, open_passive
from simpleftp.ftp.reply import Reply

logger = logging.getLogger("simpleftp.transfer")


class TransferKind(Enum):
    """Direction of a transfer's payload."""
    DOWNLOAD = "download"
    UPLOAD = "upload"
    APPEND = "append"


@dataclass
class TransferProgress:
    """Progress information for a running transfer."""
    verb: str
    path: Optional[str]
    bytes_transferred: int


@dataclass
class TransferResult:
    """Outcome of a completed transfer."""
    verb: str
    path: Optional[str]
    bytes_transferred: int
    preliminary: Reply
    final: Reply
    duration_seconds: float = 0.0


# Type alias for progress callback
ProgressCallback = Callable[[TransferProgress], None]


def _receive(
    data: DataConnection,
    sink: BinaryIO,
    blocksize: int,
    report: Callable[[int], None]
) -> int:
    total = 0
    while True:
        chunk = data.receive(blocksize)
        if not chunk:
            return total
        sink.write(chunk)
        total += len(chunk)
        report(total)


def _send(
    data: DataConnection,
    source: BinaryIO,
    blocksize: int,
    report: Callable[[int], None]
) -> int:
    total = 0
    while True:
        chunk = source.read(blocksize)
        if not chunk:
            break
        data.send(chunk)
        total += len(chunk)
        report(total)
    data.shutdown_write()
    return total


def _drain_final_reply(control: ControlChannel, verb: str) -> None:
    """Best-effort read of the final reply after a failed transfer."""
    try:
        reply = control.read_reply()
        logger.debug(f"Final reply after failed {verb}: {reply}")
    except FTPError as e:
        logger.debug(f"Ignoring error while cleaning up {verb}: {e}")


def transfer(
    control: ControlChannel,
    kind: TransferKind,
    verb: str,
    path: Optional[str],
    stream: BinaryIO,
    blocksize: int = DEFAULT_BLOCKSIZE,
    on_progress: Optional[ProgressCallback] = None,
    timeout: Optional[float] = None
) -> TransferResult:
    """
    Run one data-bearing command to completion.

    The data connection is always closed before the final reply is read.

    Args:
        control: Control channel of the session
        kind: Whether payload flows from the server or to it
        verb: Transfer command, e.g. "RETR"
        path: Command argument, None sends the bare verb
        stream: Sink with write() for downloads, source with read() otherwise
        blocksize: Chunk size for socket and stream I/O
        on_progress: Optional callback invoked after every chunk
        timeout: Socket timeout for the data connection

    Returns:
        TransferResult with byte count and both replies

    Raises:
        FTPReplyError: If the command is refused
        FTPTransferError: If the final reply is not 2xx
        FTPIOError: If moving the payload fails
        FTPTimeoutError: If the data connection times out
        FTPProtocolError: On malformed or unexpected replies
    """
    start_time = time.time()

    def report(total: int) -> None:
        if on_progress:
            on_progress(TransferProgress(verb=verb, path=path, bytes_transferred=total))

    with open_passive(control, timeout=timeout) as data:
        preliminary = control.send_command(verb, path)
        if not preliminary.is_preliminary:
            if preliminary.is_error:
                raise FTPReplyError(verb, preliminary)
            raise FTPUnexpectedReplyError(verb, preliminary)

        try:
            if kind is TransferKind.DOWNLOAD:
                bytes_transferred = _receive(data, stream, blocksize, report)
            else:
                bytes_transferred = _send(data, stream, blocksize, report)
        except socket.timeout as e:
            data.close()
            _drain_final_reply(control, verb)
            raise FTPTimeoutError(f"{verb} data transfer", timeout) from e
        except OSError as e:
            data.close()
            _drain_final_reply(control, verb)
            raise FTPIOError(f"{verb} data transfer", e) from e
        except Exception:
            data.close()
            _drain_final_reply(control, verb)
            raise

    final = control.read_reply()
    if not final.is_positive_completion:
        raise FTPTransferError(verb, path, final, bytes_transferred)

    duration = time.time() - start_time
    logger.info(f"{verb} {path or ''} complete: {bytes_transferred} bytes in {duration:.2f}s")
    return TransferResult(
        verb=verb,
        path=path,
        bytes_transferred=bytes_transferred,
        preliminary=preliminary,
        final=final,
        duration_seconds=duration
    )


def retrieve_lines(
    control: ControlChannel,
    verb: str,
    path: Optional[str],
    encoding: str,
    blocksize: int = DEFAULT_BLOCKSIZE,
    timeout: Optional[float] = None
) -> List[str]:
    """
    Run a listing command and return its payload as text lines.

    Args:
        control: Control channel of the session
        verb: "LIST" or "NLST"
        path: Directory or file to list, None for the current directory
        encoding: Encoding of the listing text
        blocksize: Chunk size for the data connection
        timeout: Socket timeout for the data connection

    Returns:
        Listing lines without line terminators
    """
    buffer = io.BytesIO()
    transfer(
        control,
        TransferKind.DOWNLOAD,
        verb,
        path,
        buffer,
        blocksize=blocksize,
        timeout=timeout
    )
    return buffer.getvalue().decode(encoding, errors="replace").splitlines()
