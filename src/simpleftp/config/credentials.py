"""Password storage for the simpleftp command line.

Passwords live in the system keyring (Windows Credential Manager, macOS
Keychain, Linux Secret Service), one entry per server and user, so they
never appear in the settings file or in shell history.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger("simpleftp.credentials")

SERVICE_NAME = "simpleftp"


def credential_key(host: str, username: str) -> str:
    """Keyring entry name for a user on a server."""
    return f"{host}:{username}"


class CredentialManager:
    """
    Keyring-backed password store.

    Keyring failures (no usable backend, locked keychain) are logged and
    reported through return values so the command line can carry on
    without a stored password.
    """

    def __init__(self, service_name: str = SERVICE_NAME):
        self.service_name = service_name

    def save_password(self, host: str, username: str, password: str) -> bool:
        """
        Store the password for a user on a server.

        Returns:
            True if the keyring accepted it
        """
        key = credential_key(host, username)
        try:
            keyring.set_password(self.service_name, key, password)
        except KeyringError as e:
            logger.warning(f"Could not store password for {key}: {e}")
            return False
        logger.info(f"Stored password for {key}")
        return True

    def get_password(self, host: str, username: str) -> Optional[str]:
        """Stored password, or None if there is none or the keyring fails."""
        key = credential_key(host, username)
        try:
            return keyring.get_password(self.service_name, key)
        except KeyringError as e:
            logger.warning(f"Could not read password for {key}: {e}")
            return None

    def delete_password(self, host: str, username: str) -> bool:
        """
        Remove the stored password for a user on a server.

        Returns:
            True if an entry was removed
        """
        key = credential_key(host, username)
        try:
            keyring.delete_password(self.service_name, key)
        except KeyringError as e:
            logger.debug(f"No stored password removed for {key}: {e}")
            return False
        logger.info(f"Removed stored password for {key}")
        return True
