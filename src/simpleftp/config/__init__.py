"""Configuration module for simpleftp.

This module handles command-line client settings and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure credential storage via keyring
- Paths: Per-user data and log locations
- ClientSettings: Settings dataclass
"""
