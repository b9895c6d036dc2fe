"""Command-line entry point for simpleftp.

Wires settings, stored credentials and logging around FtpClient and runs
one FTP operation per invocation.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from simpleftp.config.credentials import CredentialManager
from simpleftp.config.paths import get_log_file_path
from simpleftp.config.settings import ClientSettings, SettingsManager
from simpleftp.ftp.client import FtpClient
from simpleftp.ftp.control import FTPConnectionConfig
from simpleftp.ftp.exceptions import FTPError
from simpleftp.utils.logging import setup_logging

EXIT_OK = 0
EXIT_FTP_ERROR = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the simpleftp command."""
    parser = argparse.ArgumentParser(
        prog="simpleftp",
        description="Minimal passive-mode FTP client."
    )
    parser.add_argument("-H", "--host", help="server host (default: last used)")
    parser.add_argument("-p", "--port", type=int, help="control port (default: last used or 21)")
    parser.add_argument("-u", "--user", help="username (default: last used or anonymous)")
    parser.add_argument("--password", help="password (default: keyring, then empty)")
    parser.add_argument(
        "--save-password",
        action="store_true",
        help="store the password in the system keyring after a successful login"
    )
    parser.add_argument("--timeout", type=float, help="socket timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="log protocol traffic")

    commands = parser.add_subparsers(dest="command", required=True)

    ls = commands.add_parser("ls", help="long directory listing")
    ls.add_argument("path", nargs="?")
    nlst = commands.add_parser("nlst", help="names in a directory")
    nlst.add_argument("path", nargs="?")

    get = commands.add_parser("get", help="download a file")
    get.add_argument("remote")
    get.add_argument("local", nargs="?", type=Path)

    put = commands.add_parser("put", help="upload a file")
    put.add_argument("local", type=Path)
    put.add_argument("remote", nargs="?")

    append = commands.add_parser("append", help="append a local file to a remote one")
    append.add_argument("local", type=Path)
    append.add_argument("remote")

    for name, help_text in (
        ("rm", "delete a file"),
        ("mkdir", "create a directory"),
        ("rmdir", "remove a directory"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("path")

    mv = commands.add_parser("mv", help="rename a file")
    mv.add_argument("source")
    mv.add_argument("target")

    commands.add_parser("pwd", help="print the working directory")
    commands.add_parser("syst", help="show the server system type")
    stat = commands.add_parser("stat", help="server or path status")
    stat.add_argument("path", nargs="?")
    commands.add_parser("forget", help="remove the stored password for the server and user")

    return parser


def _resolve_config(args: argparse.Namespace, settings: ClientSettings) -> FTPConnectionConfig:
    """Merge command-line options over saved settings."""
    return FTPConnectionConfig(
        host=args.host or settings.last_host,
        port=args.port or settings.last_port,
        username=args.user or settings.last_username,
        timeout=args.timeout if args.timeout is not None else settings.timeout,
        blocksize=settings.blocksize,
    )


def _run_command(client: FtpClient, args: argparse.Namespace) -> None:
    """Execute the requested operation and print its output."""
    command = args.command
    if command == "ls":
        for line in client.list(args.path):
            print(line)
    elif command == "nlst":
        for line in client.nlst(args.path):
            print(line)
    elif command == "get":
        local = args.local or Path(args.remote.rstrip("/").rsplit("/", 1)[-1])
        result = client.download_file(args.remote, local)
        print(f"{args.remote} -> {local} ({result.bytes_transferred} bytes)")
    elif command == "put":
        result = client.upload_file(args.local, args.remote)
        print(f"{args.local} -> {result.path} ({result.bytes_transferred} bytes)")
    elif command == "append":
        with open(args.local, "rb") as f:
            result = client.append(f, args.remote)
        print(f"{args.local} >> {args.remote} ({result.bytes_transferred} bytes)")
    elif command == "rm":
        client.dele(args.path)
    elif command == "mkdir":
        print(client.mkd(args.path))
    elif command == "rmdir":
        client.rmd(args.path)
    elif command == "mv":
        client.rename(args.source, args.target)
    elif command == "pwd":
        print(client.pwd())
    elif command == "syst":
        print(client.syst())
    elif command == "stat":
        print(client.stat(args.path))


def run(
    argv: Optional[List[str]] = None,
    settings_manager: Optional[SettingsManager] = None,
    credential_manager: Optional[CredentialManager] = None,
    log_file: Optional[Path] = None
) -> int:
    """
    Run one simpleftp command.

    Args:
        argv: Command-line arguments (default sys.argv[1:])
        settings_manager: Settings store (default per-user settings file)
        credential_manager: Password store (default system keyring)
        log_file: Log file (default per-user log directory)

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    logger = setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=log_file or get_log_file_path(),
        console=args.verbose
    )

    settings_manager = settings_manager or SettingsManager()
    credential_manager = credential_manager or CredentialManager()
    settings = settings_manager.load()

    try:
        config = _resolve_config(args, settings)
    except ValueError as e:
        print(f"simpleftp: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.command == "forget":
        account = f"{config.username}@{config.host}"
        if credential_manager.delete_password(config.host, config.username):
            print(f"Removed stored password for {account}")
        else:
            print(f"No stored password for {account}")
        return EXIT_OK

    password = args.password
    if password is None:
        password = credential_manager.get_password(config.host, config.username) or ""

    try:
        with FtpClient.open(config, password) as client:
            settings_manager.update(
                last_host=config.host,
                last_port=config.port,
                last_username=config.username,
            )
            if args.save_password and args.password is not None:
                credential_manager.save_password(config.host, config.username, password)
            _run_command(client, args)
    except (FTPError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"simpleftp: {e}", file=sys.stderr)
        return EXIT_FTP_ERROR

    return EXIT_OK


def main() -> None:
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
