"""Project configuration settings.

Constants shared by the vault core and the CLI. Environment overrides are
read when a value is requested so that tests can point them elsewhere.
"""

from __future__ import annotations
from pathlib import Path
import logging
import os

import appdirs

log = logging.getLogger(__name__)

APP_NAME = "peka"
APP_AUTHOR = "nalsan"

# File format
VAULT_EXTENSION = ".peka"
FORMAT_VERSION = 1
FALLBACK_VAULT_NAME = "vault"

# Key derivation (Argon2id) defaults for new vaults
KDF_ALGORITHM = "Argon2id"
DEFAULT_MEMORY_KIB = 131_072
DEFAULT_TIME_COST = 3
DEFAULT_PARALLELISM = 2
DEFAULT_HASH_LENGTH = 32
DEFAULT_SALT_LENGTH = 16

# AES-256-GCM
KEY_LENGTH = 32
NONCE_LENGTH = 12
AUTH_TAG_LENGTH = 16

# Secure folders
PIN_LENGTH = 4

# Master password policy (advisory)
MIN_MASTER_PASSWORD_LENGTH = 12

VAULT_DIR_ENV = "PEKA_VAULT_DIR"


def log_level() -> str:
	return os.environ.get("PEKA_LOG_LEVEL", "WARNING").upper()


def resolve_vault_directory() -> Path:
	"""Return the directory holding vault files.

	PEKA_VAULT_DIR wins; otherwise the per-user data directory, falling
	back to ./vaults when that cannot be determined.
	"""
	env_dir = os.environ.get(VAULT_DIR_ENV)
	if env_dir:
		return Path(env_dir)
	try:
		base = appdirs.user_data_dir(APP_NAME, APP_AUTHOR)
	except (OSError, KeyError) as e:
		log.warning("Per-user data directory unavailable: %s", e)
		base = None
	if not base:
		return Path.cwd() / "vaults"
	return Path(base) / "vaults"


__all__ = [
	'APP_NAME', 'APP_AUTHOR', 'VAULT_EXTENSION', 'FORMAT_VERSION', 'FALLBACK_VAULT_NAME',
	'KDF_ALGORITHM', 'DEFAULT_MEMORY_KIB', 'DEFAULT_TIME_COST', 'DEFAULT_PARALLELISM',
	'DEFAULT_HASH_LENGTH', 'DEFAULT_SALT_LENGTH', 'KEY_LENGTH', 'NONCE_LENGTH', 'AUTH_TAG_LENGTH',
	'PIN_LENGTH', 'MIN_MASTER_PASSWORD_LENGTH', 'VAULT_DIR_ENV', 'log_level', 'resolve_vault_directory'
]
