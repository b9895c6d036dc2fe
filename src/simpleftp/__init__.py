"""simpleftp: a synchronous passive-mode FTP client.

This package is organised as:
- ftp: Control-channel protocol engine, data transfers and FtpClient
- config: Settings, credential storage and paths for the command line
- utils: Logging with credential redaction and input validation
- main: Command-line entry point
"""

__version__ = "0.1.0"
