"""Exception taxonomy for vault operations.

Every error raised by the vault core derives from VaultError so callers can
catch a single type at the operation boundary.
"""
from __future__ import annotations


class VaultError(Exception):
	pass

class ValidationError(VaultError): ...
class FormatError(VaultError): ...
class PayloadError(VaultError): ...
class NotFoundError(VaultError): ...
class KdfError(VaultError): ...
class PinHashError(VaultError): ...
class CryptoError(VaultError): ...

class AuthenticationError(VaultError):
	"""Wrong master password or tampered data; the two are not distinguished."""

	def __init__(self, message: str = 'Failed to decrypt vault: incorrect password or corrupted data'):
		super().__init__(message)

class PathSafetyError(VaultError):
	def __init__(self, message: str = 'Vault path is invalid'):
		super().__init__(message)

class VaultIOError(VaultError):
	"""OS-level failure. The message is generic; the OS detail goes to the log."""
