"""Master-key derivation (Argon2id)."""
from __future__ import annotations
import secrets
from typing import Union

from argon2.exceptions import HashingError
from argon2.low_level import ARGON2_VERSION, Type, hash_secret_raw

from peka.config.settings import KDF_ALGORITHM
from .errors import KdfError
from .models import KdfParameters

# Argon2 reference limits
MIN_HASH_LENGTH = 4
MIN_SALT_LENGTH = 8


def validate_params(params: KdfParameters) -> None:
	if params.algorithm != KDF_ALGORITHM:
		raise KdfError(f'Unsupported key derivation algorithm: {params.algorithm}')
	for name in ('memory_kib', 'time_cost', 'parallelism', 'hash_length', 'salt_length'):
		value = getattr(params, name)
		if isinstance(value, bool) or not isinstance(value, int) or value < 1:
			raise KdfError(f'{name} must be a positive integer')
	if params.memory_kib < 8 * params.parallelism:
		raise KdfError('memory_kib too low for the requested parallelism')
	if params.hash_length < MIN_HASH_LENGTH:
		raise KdfError('hash_length too short')
	if params.salt_length < MIN_SALT_LENGTH:
		raise KdfError('salt_length too short')


def generate_salt(params: KdfParameters) -> bytes:
	return secrets.token_bytes(params.salt_length)


def derive_key(password: Union[str, bytes], salt: bytes, params: KdfParameters) -> bytes:
	"""Derive params.hash_length bytes from password and salt.

	Deterministic for identical inputs so that decryption can re-derive the
	key used at encryption time.
	"""
	validate_params(params)
	secret = password.encode('utf-8') if isinstance(password, str) else bytes(password)
	try:
		return hash_secret_raw(
			secret=secret,
			salt=bytes(salt),
			time_cost=params.time_cost,
			memory_cost=params.memory_kib,
			parallelism=params.parallelism,
			hash_len=params.hash_length,
			type=Type.ID,
			version=ARGON2_VERSION,
		)
	except (HashingError, MemoryError, OverflowError) as e:
		raise KdfError(f'Unable to derive encryption key: {e}') from e
