"""Vault codec: payload <-> canonical JSON bytes, envelope <-> file text.

Envelope layout (JSON)::

	{
	  "version": 1,
	  "vaultName": "...",
	  "kdf": {"algorithm": "Argon2id", "memoryKib": ..., "timeCost": ...,
	          "parallelism": ..., "hashLength": ..., "saltLength": ...},
	  "salt": "<base64>", "nonce": "<base64>", "ciphertext": "<base64>"
	}

The payload uses the same camelCase naming and is what gets encrypted. The
clear-text fields (version, vaultName, kdf) are authenticated as AAD through
:func:`envelope_header`.
"""
from __future__ import annotations
import base64, binascii, json
from typing import Any, Dict, Optional, Union

from peka.config.settings import FORMAT_VERSION, KEY_LENGTH, NONCE_LENGTH
from .errors import FormatError, PayloadError
from .models import Credential, Folder, KdfParameters, VaultEnvelope, VaultPayload

_KDF_FIELDS = (
	('algorithm', 'algorithm'), ('memory_kib', 'memoryKib'), ('time_cost', 'timeCost'),
	('parallelism', 'parallelism'), ('hash_length', 'hashLength'), ('salt_length', 'saltLength'),
)


# ---------------------------------------------------------------------------
# Payload
# ---------------------------------------------------------------------------

def _credential_to_dict(c: Credential) -> Dict[str, Any]:
	out = {'id': c.id, 'title': c.title, 'username': c.username, 'password': c.password}
	if c.notes is not None:
		out['notes'] = c.notes
	out['createdAt'] = c.created_at
	out['updatedAt'] = c.updated_at
	return out

def _folder_to_dict(f: Folder) -> Dict[str, Any]:
	out = {'id': f.id, 'name': f.name, 'secure': f.secure}
	if f.pin_hash is not None:
		out['pinHash'] = f.pin_hash
	out['credentials'] = [_credential_to_dict(c) for c in f.credentials]
	out['createdAt'] = f.created_at
	out['updatedAt'] = f.updated_at
	return out

def encode_payload(payload: VaultPayload) -> bytes:
	doc = {'vaultName': payload.vault_name, 'folders': [_folder_to_dict(f) for f in payload.folders]}
	return json.dumps(doc, ensure_ascii=False, separators=(',', ':')).encode('utf-8')


def _field(obj: Dict[str, Any], key: str, kind, err, optional: bool = False):
	if key not in obj:
		if optional:
			return None
		raise err(f'Missing field: {key}')
	value = obj[key]
	if optional and value is None:
		return None
	# bool is an int subclass; keep the two apart
	if kind is int and isinstance(value, bool) or not isinstance(value, kind):
		raise err(f'Field {key} has the wrong type')
	return value

def _credential_from_dict(raw: Any) -> Credential:
	if not isinstance(raw, dict): raise PayloadError('Credential must be an object')
	return Credential(
		id=_field(raw, 'id', str, PayloadError),
		title=_field(raw, 'title', str, PayloadError),
		username=_field(raw, 'username', str, PayloadError),
		password=_field(raw, 'password', str, PayloadError),
		created_at=_field(raw, 'createdAt', str, PayloadError),
		updated_at=_field(raw, 'updatedAt', str, PayloadError),
		notes=_field(raw, 'notes', str, PayloadError, optional=True),
	)

def _folder_from_dict(raw: Any) -> Folder:
	if not isinstance(raw, dict): raise PayloadError('Folder must be an object')
	secure = _field(raw, 'secure', bool, PayloadError)
	pin_hash = _field(raw, 'pinHash', str, PayloadError, optional=True)
	if secure != (pin_hash is not None):
		raise PayloadError('Secure folders must carry a PIN hash and others must not')
	creds = _field(raw, 'credentials', list, PayloadError)
	return Folder(
		id=_field(raw, 'id', str, PayloadError),
		name=_field(raw, 'name', str, PayloadError),
		secure=secure,
		created_at=_field(raw, 'createdAt', str, PayloadError),
		updated_at=_field(raw, 'updatedAt', str, PayloadError),
		pin_hash=pin_hash,
		credentials=[_credential_from_dict(c) for c in creds],
	)

def decode_payload(data: Union[bytes, bytearray]) -> VaultPayload:
	try:
		doc = json.loads(bytes(data).decode('utf-8'))
	except (UnicodeDecodeError, ValueError, RecursionError) as e:
		raise PayloadError('Vault data is malformed') from e
	if not isinstance(doc, dict):
		raise PayloadError('Vault data is malformed')
	folders = _field(doc, 'folders', list, PayloadError)
	return VaultPayload(
		vault_name=_field(doc, 'vaultName', str, PayloadError),
		folders=[_folder_from_dict(f) for f in folders],
	)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

def kdf_to_dict(params: KdfParameters) -> Dict[str, Any]:
	return {key: getattr(params, attr) for attr, key in _KDF_FIELDS}

def kdf_from_dict(raw: Any) -> KdfParameters:
	if not isinstance(raw, dict): raise FormatError('kdf must be an object')
	values = {}
	for attr, key in _KDF_FIELDS:
		kind = str if attr == 'algorithm' else int
		values[attr] = _field(raw, key, kind, FormatError)
		if kind is int and values[attr] < 1:
			raise FormatError(f'kdf.{key} must be positive')
	return KdfParameters(**values)

def envelope_header(vault_name: str, kdf: KdfParameters, version: int = FORMAT_VERSION) -> bytes:
	"""Canonical bytes of the clear-text envelope fields, bound to the ciphertext as AAD."""
	doc = {'version': version, 'vaultName': vault_name, 'kdf': kdf_to_dict(kdf)}
	return json.dumps(doc, sort_keys=True, ensure_ascii=False, separators=(',', ':')).encode('utf-8')

def encode_envelope(envelope: VaultEnvelope) -> str:
	doc = {
		'version': envelope.version,
		'vaultName': envelope.vault_name,
		'kdf': kdf_to_dict(envelope.kdf),
		'salt': base64.b64encode(envelope.salt).decode('ascii'),
		'nonce': base64.b64encode(envelope.nonce).decode('ascii'),
		'ciphertext': base64.b64encode(envelope.ciphertext).decode('ascii'),
	}
	return json.dumps(doc, indent=2)

def _b64(doc: Dict[str, Any], key: str) -> bytes:
	try:
		return base64.b64decode(_field(doc, key, str, FormatError), validate=True)
	except (binascii.Error, ValueError) as e:
		raise FormatError(f'Invalid {key} encoding') from e

def decode_envelope(raw: Union[str, bytes]) -> VaultEnvelope:
	try:
		doc = json.loads(raw)
	except (UnicodeDecodeError, ValueError, RecursionError) as e:
		raise FormatError('Vault file is corrupted or invalid') from e
	if not isinstance(doc, dict):
		raise FormatError('Vault file is corrupted or invalid')
	version = _field(doc, 'version', int, FormatError)
	if version != FORMAT_VERSION:
		raise FormatError(f'Unsupported vault format version: {version}')
	kdf = kdf_from_dict(_field(doc, 'kdf', dict, FormatError))
	if kdf.hash_length != KEY_LENGTH:
		raise FormatError(f'Unsupported kdf.hashLength: {kdf.hash_length}')
	salt, nonce = _b64(doc, 'salt'), _b64(doc, 'nonce')
	if len(salt) != kdf.salt_length:
		raise FormatError('Salt length does not match kdf.saltLength')
	if len(nonce) != NONCE_LENGTH:
		raise FormatError('Invalid nonce length')
	return VaultEnvelope(
		vault_name=_field(doc, 'vaultName', str, FormatError),
		kdf=kdf, salt=salt, nonce=nonce,
		ciphertext=_b64(doc, 'ciphertext'),
		version=version,
	)
