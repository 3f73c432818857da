"""Authenticated encryption of the vault payload (AES-256-GCM)."""
from __future__ import annotations
import secrets
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from peka.config.settings import KEY_LENGTH, NONCE_LENGTH, AUTH_TAG_LENGTH
from .errors import AuthenticationError, CryptoError


def generate_nonce() -> bytes:
	return secrets.token_bytes(NONCE_LENGTH)

def _check(key: bytes, nonce: bytes):
	if len(key) != KEY_LENGTH: raise CryptoError('Bad key length')
	if len(nonce) != NONCE_LENGTH: raise CryptoError('Bad nonce length')

def seal(key: bytes, nonce: bytes, plaintext: bytes, aad: Optional[bytes] = None) -> bytes:
	"""Encrypt plaintext; the 16-byte tag is appended to the result.

	aad is authenticated but not encrypted; unseal must be given the same bytes.
	"""
	_check(key, nonce)
	return AESGCM(bytes(key)).encrypt(nonce, bytes(plaintext), aad)

def unseal(key: bytes, nonce: bytes, ciphertext: bytes, aad: Optional[bytes] = None) -> bytes:
	_check(key, nonce)
	if len(ciphertext) < AUTH_TAG_LENGTH:
		raise AuthenticationError()
	try:
		return AESGCM(bytes(key)).decrypt(nonce, ciphertext, aad)
	except InvalidTag:
		raise AuthenticationError() from None
