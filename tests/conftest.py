import pytest
from peka.lib.models import KdfParameters
from peka.lib.store import VaultStore

# Cheap Argon2id profile so the suite stays fast
FAST_KDF = KdfParameters(memory_kib=1024, time_cost=1, parallelism=1)

@pytest.fixture
def store(tmp_path):
    return VaultStore(tmp_path / 'vaults', kdf_params=FAST_KDF)

@pytest.fixture
def vault(store):
    return store.create_vault('Personal', 'correct horse')
