"""Input validators for simpleftp.

Provides validation functions for connection parameters. Each returns
a (is_valid, error_message) tuple.
"""

import re
from typing import Optional, Tuple


# IPv4 address pattern
IPV4_PATTERN = re.compile(
    r'^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}'
    r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$'
)

# Hostname pattern (simplified)
HOSTNAME_PATTERN = re.compile(
    r'^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*$'
)


def validate_ip_address(ip: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an IPv4 address.

    Args:
        ip: IP address string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not ip or not ip.strip():
        return False, "IP address is required"

    ip = ip.strip()

    if IPV4_PATTERN.match(ip):
        return True, None

    return False, f"Invalid IP address format: {ip}"


def validate_hostname(hostname: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a hostname.

    Args:
        hostname: Hostname string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not hostname or not hostname.strip():
        return False, "Hostname is required"

    hostname = hostname.strip()

    if HOSTNAME_PATTERN.match(hostname):
        return True, None

    return False, f"Invalid hostname format: {hostname}"


def validate_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a host (IP address or hostname).

    Args:
        host: Host string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    host = host.strip()

    # Try IP first
    is_valid_ip, _ = validate_ip_address(host)
    if is_valid_ip:
        return True, None

    # Try hostname
    is_valid_hostname, _ = validate_hostname(host)
    if is_valid_hostname:
        return True, None

    return False, f"Invalid host: {host}. Must be a valid IP address or hostname."


def validate_port(port: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a port number.

    Args:
        port: Port number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(port, int):
        try:
            port = int(port)
        except (ValueError, TypeError):
            return False, "Port must be a number"

    if port < 1 or port > 65535:
        return False, f"Port must be between 1 and 65535, got {port}"

    return True, None


def validate_timeout(timeout: Optional[float]) -> Tuple[bool, Optional[str]]:
    """
    Validate a socket timeout in seconds.

    None is valid and means blocking without a timeout.

    Args:
        timeout: Timeout in seconds or None

    Returns:
        Tuple of (is_valid, error_message)
    """
    if timeout is None:
        return True, None

    try:
        timeout = float(timeout)
    except (ValueError, TypeError):
        return False, "Timeout must be a number"

    if timeout <= 0:
        return False, f"Timeout must be greater than 0 seconds, got {timeout}"

    return True, None


def validate_blocksize(blocksize: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a transfer block size in bytes.

    Args:
        blocksize: Block size

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(blocksize, int) or isinstance(blocksize, bool):
        return False, "Block size must be an integer"

    if blocksize < 1:
        return False, f"Block size must be positive, got {blocksize}"

    return True, None
