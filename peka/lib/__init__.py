"""Vault core: key derivation, authenticated encryption, codec, store and folder guard."""
from .errors import (
	VaultError, ValidationError, FormatError, PayloadError, AuthenticationError,
	NotFoundError, PathSafetyError, VaultIOError, KdfError, PinHashError, CryptoError
)
from .models import KdfParameters, VaultContents, VaultSummary
from .store import VaultStore, slugify
