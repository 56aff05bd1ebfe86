"""Credential storage for the Configuration Manager AdminService."""

from .secret_store import CATALOG_PASSWORD_KEY, InsecureKeyringError, SecretStore

__all__ = ["CATALOG_PASSWORD_KEY", "InsecureKeyringError", "SecretStore"]
