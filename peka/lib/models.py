"""Vault data model: envelope, decrypted payload and the public view.

The payload types (Folder, Credential, VaultPayload) carry internal-only
fields such as the folder PIN hash. Callers outside the store only ever see
VaultContents, built by :func:`to_public`.
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any

from peka.config.settings import (
	KDF_ALGORITHM, DEFAULT_MEMORY_KIB, DEFAULT_TIME_COST, DEFAULT_PARALLELISM,
	DEFAULT_HASH_LENGTH, DEFAULT_SALT_LENGTH, FORMAT_VERSION
)


def utc_now() -> str:
	return datetime.now(timezone.utc).isoformat(timespec='microseconds')

def new_id() -> str:
	return str(uuid.uuid4())


@dataclass(frozen=True)
class KdfParameters:
	algorithm: str = KDF_ALGORITHM
	memory_kib: int = DEFAULT_MEMORY_KIB
	time_cost: int = DEFAULT_TIME_COST
	parallelism: int = DEFAULT_PARALLELISM
	hash_length: int = DEFAULT_HASH_LENGTH
	salt_length: int = DEFAULT_SALT_LENGTH


@dataclass
class VaultEnvelope:
	vault_name: str
	kdf: KdfParameters
	salt: bytes
	nonce: bytes
	ciphertext: bytes
	version: int = FORMAT_VERSION


@dataclass
class Credential:
	id: str
	title: str
	username: str
	password: str
	created_at: str
	updated_at: str
	notes: Optional[str] = None

	@classmethod
	def new(cls, title: str, username: str, password: str, notes: Optional[str] = None) -> 'Credential':
		now = utc_now()
		return cls(new_id(), title, username, password, now, now, notes)


@dataclass
class Folder:
	id: str
	name: str
	secure: bool
	created_at: str
	updated_at: str
	pin_hash: Optional[str] = None
	credentials: List[Credential] = field(default_factory=list)

	@classmethod
	def new(cls, name: str, pin_hash: Optional[str] = None) -> 'Folder':
		now = utc_now()
		return cls(new_id(), name, pin_hash is not None, now, now, pin_hash)

	def touch(self):
		self.updated_at = utc_now()

	def find_credential(self, credential_id: str) -> Optional[Credential]:
		return next((c for c in self.credentials if c.id == credential_id), None)


@dataclass
class VaultPayload:
	vault_name: str
	folders: List[Folder] = field(default_factory=list)

	def find_folder(self, folder_id: str) -> Optional[Folder]:
		return next((f for f in self.folders if f.id == folder_id), None)


# --- Public view (never carries pin_hash) ---

@dataclass(frozen=True)
class PublicCredential:
	id: str
	title: str
	username: str
	password: str
	created_at: str
	updated_at: str
	notes: Optional[str] = None

	def to_dict(self) -> Dict[str, Any]:
		out = {'id': self.id, 'title': self.title, 'username': self.username, 'password': self.password}
		if self.notes is not None:
			out['notes'] = self.notes
		out['createdAt'] = self.created_at
		out['updatedAt'] = self.updated_at
		return out


@dataclass(frozen=True)
class PublicFolder:
	id: str
	name: str
	secure: bool
	credentials: List[PublicCredential]
	created_at: str
	updated_at: str

	def to_dict(self) -> Dict[str, Any]:
		return {
			'id': self.id, 'name': self.name, 'secure': self.secure,
			'credentials': [c.to_dict() for c in self.credentials],
			'createdAt': self.created_at, 'updatedAt': self.updated_at,
		}


@dataclass(frozen=True)
class VaultContents:
	vault_name: str
	folders: List[PublicFolder]

	def to_dict(self) -> Dict[str, Any]:
		return {'vaultName': self.vault_name, 'folders': [f.to_dict() for f in self.folders]}


@dataclass(frozen=True)
class VaultSummary:
	path: str
	vault_name: str

	def to_dict(self) -> Dict[str, Any]:
		return {'path': self.path, 'vaultName': self.vault_name}


def to_public(payload: VaultPayload) -> VaultContents:
	folders = []
	for f in payload.folders:
		creds = [PublicCredential(**asdict(c)) for c in f.credentials]
		folders.append(PublicFolder(f.id, f.name, f.secure, creds, f.created_at, f.updated_at))
	return VaultContents(payload.vault_name, folders)
