"""Folder access guard: PIN hashing and verification for secure folders.

Deliberately independent of the master-key derivation. A 4-digit PIN only
locks a folder against a glance at the screen; it does not protect the vault.
"""
from __future__ import annotations
import bcrypt

from peka.config.settings import PIN_LENGTH
from .errors import PinHashError, ValidationError
from .models import Folder


def validate_pin(pin) -> str:
	if pin is None or pin == '':
		raise ValidationError('PIN is required for secure folders.')
	if len(pin) != PIN_LENGTH or not all(c in '0123456789' for c in pin):
		raise ValidationError(f'PIN must be exactly {PIN_LENGTH} digits.')
	return pin

def hash_pin(pin: str) -> str:
	return bcrypt.hashpw(validate_pin(pin).encode(), bcrypt.gensalt()).decode()

def verify_pin(pin: str, hashed: str) -> bool:
	"""Return True when pin matches the stored hash.

	A mismatch is False; a hash that cannot be parsed raises PinHashError.
	"""
	try:
		return bcrypt.checkpw((pin or '').encode(), hashed.encode())
	except ValueError as e:
		raise PinHashError('Folder PIN hash is invalid') from e

def verify_folder(folder: Folder, pin: str) -> bool:
	if not folder.secure:
		return True
	if folder.pin_hash is None:
		raise PinHashError('Folder PIN hash not found')
	return verify_pin(pin, folder.pin_hash)
