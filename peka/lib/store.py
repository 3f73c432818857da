"""Vault store: read-modify-write cycles over encrypted vault files.

Every mutation follows the same skeleton: read the envelope, derive the key
with the envelope's own KDF parameters, decrypt, apply one change, re-encrypt
with a fresh salt and nonce under the *same* KDF parameters, then atomically
replace the file. Mutations on one path are serialized by a per-path lock;
concurrent writers in other processes are not supported.
"""
from __future__ import annotations
import contextlib, logging, os, re, shutil, tempfile, threading, weakref
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from peka.config.settings import (
	VAULT_EXTENSION, FALLBACK_VAULT_NAME, FORMAT_VERSION, resolve_vault_directory
)
from . import cipher, guard, kdf
from .codec import decode_envelope, decode_payload, encode_envelope, encode_payload, envelope_header
from .errors import (
	FormatError, NotFoundError, PathSafetyError, ValidationError, VaultIOError
)
from .models import (
	Credential, Folder, KdfParameters, VaultContents, VaultEnvelope, VaultPayload,
	VaultSummary, to_public
)

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9_-]')
_UNDERSCORE_RUN = re.compile(r'_+')

# One lock per canonical vault path, shared by every store in the process.
# Entries live only while some caller holds the lock object.
_PATH_LOCKS: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_LOCKS_GUARD = threading.Lock()


def slugify(name: str) -> str:
	"""Filesystem-safe file stem for a vault display name."""
	slug = _UNDERSCORE_RUN.sub('_', _UNSAFE_CHARS.sub('_', name.strip())).strip('_')
	return slug or FALLBACK_VAULT_NAME

def _wipe(buf: bytearray):
	for i in range(len(buf)):
		buf[i] = 0

def _require(value: Optional[str], message: str) -> str:
	if value is None or not value.strip():
		raise ValidationError(message)
	return value


class VaultStore:
	def __init__(self, vault_dir: Optional[PathLike] = None, kdf_params: Optional[KdfParameters] = None):
		# Resolved once; tests inject a temporary directory
		self.vault_dir = Path(vault_dir) if vault_dir is not None else resolve_vault_directory()
		self.kdf_params = kdf_params or KdfParameters()

	# ------------------------------------------------------------------
	# Encryption cycle
	# ------------------------------------------------------------------

	def _read_envelope(self, path: Path) -> VaultEnvelope:
		if not path.is_file():
			raise NotFoundError('Vault file not found')
		try:
			raw = path.read_bytes()
		except OSError as e:
			log.error("Failed to read vault %s: %s", path, e)
			raise VaultIOError('Unable to read vault file from disk') from e
		return decode_envelope(raw)

	def _decrypt(self, path: Path, master_password: str) -> Tuple[VaultEnvelope, VaultPayload]:
		envelope = self._read_envelope(path)
		key = bytearray(kdf.derive_key(master_password, envelope.salt, envelope.kdf))
		try:
			aad = envelope_header(envelope.vault_name, envelope.kdf, envelope.version)
			plaintext = bytearray(cipher.unseal(key, envelope.nonce, envelope.ciphertext, aad))
		finally:
			_wipe(key)
		try:
			return envelope, decode_payload(plaintext)
		finally:
			_wipe(plaintext)

	def _encrypt(self, payload: VaultPayload, master_password: str, params: KdfParameters) -> VaultEnvelope:
		# fresh salt and nonce on every write; params stay as recorded in the file
		salt = kdf.generate_salt(params)
		nonce = cipher.generate_nonce()
		plaintext = bytearray(encode_payload(payload))
		key = bytearray(kdf.derive_key(master_password, salt, params))
		try:
			ciphertext = cipher.seal(key, nonce, plaintext, envelope_header(payload.vault_name, params))
		finally:
			_wipe(key); _wipe(plaintext)
		return VaultEnvelope(payload.vault_name, params, salt, nonce, ciphertext, FORMAT_VERSION)

	def _write_atomic(self, target: Path, text: str):
		"""Write text to a sibling temp file, fsync, then rename over target."""
		try:
			fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
		except OSError as e:
			log.error("Failed to create temp file next to %s: %s", target, e)
			raise VaultIOError("Unable to write vault file") from e
		try:
			with os.fdopen(fd, 'w', encoding='utf-8') as f:
				f.write(text)
				f.flush()
				os.fsync(f.fileno())
			os.replace(tmp, target)
		except BaseException as e:
			with contextlib.suppress(OSError):
				os.unlink(tmp)
			if isinstance(e, OSError):
				log.error("Failed to write vault %s: %s", target, e)
				raise VaultIOError('Unable to write vault file') from e
			raise

	def _lock_for(self, path: Path) -> threading.Lock:
		try:
			key = str(path.resolve())
		except (OSError, ValueError) as e:
			raise NotFoundError('Vault file not found') from e
		with _LOCKS_GUARD:
			return _PATH_LOCKS.setdefault(key, threading.Lock())

	def _mutate(self, path: PathLike, master_password: str, mutation: Callable[[VaultPayload], None]) -> VaultContents:
		target = Path(path)
		with self._lock_for(target):
			envelope, payload = self._decrypt(target, master_password)
			mutation(payload)
			updated = self._encrypt(payload, master_password, envelope.kdf)
			self._write_atomic(target, encode_envelope(updated))
		return to_public(payload)

	def _new_vault_path(self, name: str) -> Path:
		try:
			self.vault_dir.mkdir(parents=True, exist_ok=True)
		except OSError as e:
			log.error("Failed to create vault directory %s: %s", self.vault_dir, e)
			raise VaultIOError('Unable to create vault directory') from e
		target = self.vault_dir / f"{slugify(name)}{VAULT_EXTENSION}"
		if target.exists():
			raise ValidationError('A vault with this name already exists')
		return target

	# ------------------------------------------------------------------
	# Vault operations
	# ------------------------------------------------------------------

	def create_vault(self, name: str, master_password: str) -> str:
		name = _require(name, 'Vault name cannot be empty').strip()
		_require(master_password, 'Master password cannot be empty')
		target = self._new_vault_path(name)
		envelope = self._encrypt(VaultPayload(name), master_password, self.kdf_params)
		self._write_atomic(target, encode_envelope(envelope))
		log.info("Vault created -> %s", target)
		return str(target)

	def open_vault(self, path: PathLike, master_password: str) -> VaultContents:
		_envelope, payload = self._decrypt(Path(path), master_password)
		return to_public(payload)

	def list_vaults(self) -> List[VaultSummary]:
		"""Vault files in the vault directory; only envelopes are parsed."""
		if not self.vault_dir.is_dir():
			return []
		summaries = []
		for p in sorted(self.vault_dir.iterdir()):
			if p.suffix != VAULT_EXTENSION or not p.is_file():
				continue
			try:
				envelope = decode_envelope(p.read_bytes())
			except (OSError, FormatError) as e:
				log.debug("Skipping unreadable vault %s: %s", p.name, e)
				continue
			summaries.append(VaultSummary(str(p), envelope.vault_name))
		return summaries

	def _safe_vault_path(self, path: PathLike) -> Path:
		"""Canonical form of path if it is a vault file inside the vault directory."""
		if path is None or not str(path).strip():
			raise ValidationError('Vault path is required')
		try:
			canonical = Path(path).resolve()
		except (OSError, ValueError) as e:
			raise PathSafetyError() from e
		base = self.vault_dir.resolve()
		if canonical == base or base not in canonical.parents or canonical.suffix != VAULT_EXTENSION:
			raise PathSafetyError()
		if not canonical.is_file():
			raise NotFoundError('Vault file not found')
		return canonical

	def delete_vault(self, path: PathLike) -> None:
		target = self._safe_vault_path(path)
		try:
			target.unlink()
		except OSError as e:
			log.error("Failed to delete vault %s: %s", target, e)
			raise VaultIOError('Unable to delete vault file') from e
		log.info("Vault deleted: %s", target)

	def export_vault_file(self, source_path: PathLike, destination_path: PathLike) -> None:
		source = self._safe_vault_path(source_path)
		if destination_path is None or not str(destination_path).strip():
			raise ValidationError('Destination path is required')
		dest = Path(destination_path)
		try:
			dest.parent.mkdir(parents=True, exist_ok=True)
			shutil.copyfile(source, dest)
		except shutil.SameFileError as e:
			raise ValidationError('Destination must differ from the vault file') from e
		except ValueError as e:
			raise ValidationError('Destination path is invalid') from e
		except OSError as e:
			log.error("Failed to export vault %s to %s: %s", source, dest, e)
			raise VaultIOError('Unable to export vault file') from e
		log.info("Vault exported to: %s", dest)

	def import_vault(self, source_path: PathLike, vault_name: str, master_password: str) -> str:
		"""Copy an external vault file into the vault directory under a new name.

		The source must decrypt with master_password. The copy is re-encrypted
		with fresh salt and nonce, keeping the source's KDF parameters.
		"""
		if source_path is None or not str(source_path).strip():
			raise ValidationError('Source path is required')
		vault_name = _require(vault_name, 'Vault name is required').strip()
		_require(master_password, 'Master password is required')
		envelope, payload = self._decrypt(Path(source_path), master_password)
		payload.vault_name = vault_name
		target = self._new_vault_path(vault_name)
		imported = self._encrypt(payload, master_password, envelope.kdf)
		self._write_atomic(target, encode_envelope(imported))
		log.info("Vault imported from %s -> %s", source_path, target)
		return str(target)

	# ------------------------------------------------------------------
	# Folder / credential mutations
	# ------------------------------------------------------------------

	def create_folder(self, path: PathLike, master_password: str, name: str, secure: bool = False, pin: Optional[str] = None) -> VaultContents:
		name = _require(name, 'Folder name is required.').strip()
		pin_hash = guard.hash_pin(pin) if secure else None

		def mutation(payload: VaultPayload):
			payload.folders.append(Folder.new(name, pin_hash))

		contents = self._mutate(path, master_password, mutation)
		log.info("Folder created in %s", path)
		return contents

	def delete_folder(self, path: PathLike, master_password: str, folder_id: str) -> VaultContents:
		def mutation(payload: VaultPayload):
			folder = payload.find_folder(folder_id)
			if folder is None:
				raise NotFoundError('Folder not found')
			payload.folders.remove(folder)

		contents = self._mutate(path, master_password, mutation)
		log.info("Folder deleted from %s", path)
		return contents

	def add_credential(self, path: PathLike, master_password: str, folder_id: str, title: str, username: str, password: str, notes: Optional[str] = None) -> VaultContents:
		title = _require(title, 'Title is required.').strip()
		if not password:
			raise ValidationError('Password is required.')
		notes = notes if notes and notes.strip() else None

		def mutation(payload: VaultPayload):
			folder = payload.find_folder(folder_id)
			if folder is None:
				raise NotFoundError('Folder not found')
			credential = Credential.new(title, username or '', password, notes)
			folder.credentials.append(credential)
			folder.updated_at = credential.updated_at

		contents = self._mutate(path, master_password, mutation)
		log.info("Credential added in %s", path)
		return contents

	def delete_credential(self, path: PathLike, master_password: str, folder_id: str, credential_id: str) -> VaultContents:
		def mutation(payload: VaultPayload):
			folder = payload.find_folder(folder_id)
			if folder is None:
				raise NotFoundError('Folder not found')
			credential = folder.find_credential(credential_id)
			if credential is None:
				raise NotFoundError('Credential not found')
			folder.credentials.remove(credential)
			folder.touch()

		contents = self._mutate(path, master_password, mutation)
		log.info("Credential deleted from %s", path)
		return contents

	def verify_folder_pin(self, path: PathLike, master_password: str, folder_id: str, pin: str) -> bool:
		_envelope, payload = self._decrypt(Path(path), master_password)
		folder = payload.find_folder(folder_id)
		if folder is None:
			raise NotFoundError('Folder not found')
		return guard.verify_folder(folder, pin)
