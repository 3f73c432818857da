import base64, json
import pytest
from peka.lib.codec import decode_envelope, decode_payload, encode_envelope, encode_payload, envelope_header
from peka.lib.errors import FormatError, PayloadError
from peka.lib.models import Credential, Folder, KdfParameters, VaultEnvelope, VaultPayload

def sample_payload():
    plain = Folder.new('Banking')
    plain.credentials.append(Credential.new('Chase', 'alice', 's3cr3t'))
    plain.credentials.append(Credential.new('Notes', 'bob', 'pw', notes='línea 2\nünïcode'))
    locked = Folder.new('Private', pin_hash='$2b$12$abcdefghijklmnopqrstuv')
    return VaultPayload('Personal', [plain, locked, Folder.new('Empty')])

def sample_envelope():
    return VaultEnvelope('Personal', KdfParameters(), b's' * 16, b'n' * 12, b'ciphertext-bytes')

def test_payload_roundtrip():
    payload = sample_payload()
    assert decode_payload(encode_payload(payload)) == payload
    assert decode_payload(encode_payload(VaultPayload('x'))) == VaultPayload('x')

def test_payload_json_shape():
    doc = json.loads(encode_payload(sample_payload()))
    assert doc['vaultName'] == 'Personal'
    banking, private, _ = doc['folders']
    assert 'pinHash' not in banking and private['pinHash'].startswith('$2b$')
    assert 'notes' not in banking['credentials'][0]
    assert set(banking['credentials'][0]) == {'id', 'title', 'username', 'password', 'createdAt', 'updatedAt'}

@pytest.mark.parametrize('raw', [
    b'\xff\xfe',
    b'not json',
    b'[]',
    b'{"folders": []}',
    b'{"vaultName": "v", "folders": {}}',
    b'{"vaultName": "v", "folders": [1]}',
])
def test_decode_payload_malformed(raw):
    with pytest.raises(PayloadError):
        decode_payload(raw)

def test_decode_payload_rejects_secure_without_pin_hash():
    doc = json.loads(encode_payload(sample_payload()))
    del doc['folders'][1]['pinHash']
    with pytest.raises(PayloadError):
        decode_payload(json.dumps(doc).encode())
    doc = json.loads(encode_payload(sample_payload()))
    doc['folders'][0]['pinHash'] = 'x'
    with pytest.raises(PayloadError):
        decode_payload(json.dumps(doc).encode())

def test_envelope_roundtrip_and_fields():
    env = sample_envelope()
    text = encode_envelope(env)
    assert decode_envelope(text) == env
    assert decode_envelope(text.encode()) == env
    doc = json.loads(text)
    assert doc['version'] == 1 and doc['vaultName'] == 'Personal'
    assert doc['kdf'] == {'algorithm': 'Argon2id', 'memoryKib': 131072, 'timeCost': 3,
                          'parallelism': 2, 'hashLength': 32, 'saltLength': 16}
    assert base64.b64decode(doc['nonce']) == b'n' * 12

def _mutated(**changes):
    doc = json.loads(encode_envelope(sample_envelope()))
    for key, value in changes.items():
        if key.startswith('kdf_'):
            doc['kdf'][key[4:]] = value
        elif value is None:
            del doc[key]
        else:
            doc[key] = value
    return json.dumps(doc)

@pytest.mark.parametrize('text', [
    'garbage',
    '[1, 2]',
    _mutated(version=2),
    _mutated(version=True),
    _mutated(salt=None),
    _mutated(kdf=None),
    _mutated(vaultName=7),
    _mutated(nonce='!!not base64!!'),
    _mutated(nonce=base64.b64encode(b'n' * 16).decode()),
    _mutated(salt=base64.b64encode(b's' * 8).decode()),
    _mutated(kdf_memoryKib=0),
    _mutated(kdf_timeCost='3'),
    _mutated(kdf_hashLength=16),
    '[' * 200000,
])
def test_decode_envelope_malformed(text):
    with pytest.raises(FormatError):
        decode_envelope(text)

def test_decode_payload_deep_nesting():
    with pytest.raises(PayloadError):
        decode_payload(b'[' * 200000)

def test_envelope_header_is_canonical():
    header = envelope_header('Personal', KdfParameters())
    assert json.loads(header) == {'version': 1, 'vaultName': 'Personal', 'kdf': {
        'algorithm': 'Argon2id', 'memoryKib': 131072, 'timeCost': 3,
        'parallelism': 2, 'hashLength': 32, 'saltLength': 16}}
    assert b' ' not in header
    decoded = decode_envelope(encode_envelope(sample_envelope()))
    assert envelope_header(decoded.vault_name, decoded.kdf, decoded.version) == header
    assert envelope_header('Forged', KdfParameters()) != header
