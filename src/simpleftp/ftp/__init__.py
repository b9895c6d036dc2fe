"""FTP protocol module for simpleftp.

This module implements the client side of RFC 959:
- Reply parsing: Multi-line aware reply decoding
- ControlChannel: Command/reply exchanges on the control socket
- Passive mode: PASV negotiation and data connections
- Transfers: The PASV -> command -> payload -> final reply sequence
- FtpClient: Public API mapping each verb to an exchange or transfer
- Exceptions: FTP-specific error types
"""
