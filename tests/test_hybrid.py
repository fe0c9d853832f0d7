# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pathlib
import secrets

from cryptography.hazmat.primitives.asymmetric import rsa
import pytest

from cryptomorph import hybrid
from cryptomorph import rsa as rsau
from cryptomorph import symmetric
from cryptomorph.errors import MalformedInputError

payloads = [b"", b"A", b"Sixteen bytes!!!", b"The quick brown fox jumps over the lazy dog" * 97,
            bytes(range(256)) * 40]


def to_local(pk: rsa.RSAPrivateKey) -> rsau.RSAPrivKey:
    privs = pk.private_numbers()
    pubs = privs.public_numbers
    return rsau.RSAPrivKey(pubs.n, pubs.e, privs.d, privs.p, privs.q)


@pytest.fixture
def keydir(reference, tmp_path) -> pathlib.Path:
    rsau.export_key_pair(to_local(reference), tmp_path / "keys")
    return tmp_path / "keys"


@pytest.fixture(scope="module")
def stranger() -> rsau.RSAPrivKey:
    return to_local(rsa.generate_private_key(public_exponent=65537, key_size=1024))


@pytest.mark.parametrize("payload", payloads)
def test_file_round_trip(payload, keydir, tmp_path):
    src, enc, dec = tmp_path / "plain", tmp_path / "plain.enc", tmp_path / "plain.dec"
    src.write_bytes(payload)
    hybrid.encrypt_file(src, keydir / rsau.PUBLIC_KEY_FILE, enc)
    assert enc.read_bytes() != payload
    hybrid.decrypt_file(enc, keydir / rsau.PRIVATE_KEY_FILE, dec)
    assert dec.read_bytes() == payload


def test_envelope_layout(reference):
    priv = to_local(reference)
    payload = b"layout check"
    envelope = hybrid.seal(payload, priv.pub)
    key_len = int.from_bytes(envelope[:hybrid.LENGTH_PREFIX], "big")
    assert 0 < key_len <= priv.pub.bsize
    ciphertext = envelope[hybrid.LENGTH_PREFIX + key_len + symmetric.BLOCK_SIZE:]
    assert len(ciphertext) == symmetric.BLOCK_SIZE
    assert len(envelope) == hybrid.LENGTH_PREFIX + key_len + symmetric.BLOCK_SIZE + len(ciphertext)
    assert hybrid.unseal(envelope, priv) == payload


def test_envelopes_are_fresh(reference):
    pub = to_local(reference).pub
    assert hybrid.seal(b"same", pub) != hybrid.seal(b"same", pub)


def test_short_symmetric_key(mocker, reference):
    priv = to_local(reference)
    short_key = b"\x00\x00\x00" + secrets.token_bytes(symmetric.KEY_SIZE - 3)
    mocker.patch("cryptomorph.symmetric.generate_key", return_value=short_key)
    envelope = hybrid.seal(b"leading zeros", priv.pub)
    assert hybrid.unseal(envelope, priv) == b"leading zeros"


@pytest.mark.parametrize("cut", [0, 1, 2, 10, -1])
def test_truncated_envelope(cut, reference, keydir, tmp_path):
    priv = to_local(reference)
    envelope = hybrid.seal(b"x" * 100, priv.pub)
    if cut == -1:
        # Key and IV intact, ciphertext torn mid block.
        cut = len(envelope) - 5
    enc, dec = tmp_path / "torn.enc", tmp_path / "torn.dec"
    enc.write_bytes(envelope[:cut])
    with pytest.raises(MalformedInputError):
        hybrid.decrypt_file(enc, keydir / rsau.PRIVATE_KEY_FILE, dec)
    assert not dec.exists()


def test_zero_key_length():
    with pytest.raises(MalformedInputError):
        hybrid.unseal(b"\x00\x00" + bytes(64), None)


def test_wrong_private_key(reference, stranger):
    envelope = hybrid.seal(b"for someone else", to_local(reference).pub)
    with pytest.raises(ValueError):
        hybrid.unseal(envelope, stranger)


def test_seal_key_too_small():
    tiny = rsau.RSAPubKey(61 * 53, 65537)
    with pytest.raises(ValueError):
        hybrid.seal(b"nope", tiny)


def test_encrypt_with_pkcs_public_key(reference, tmp_path):
    keys = tmp_path / "keys"
    rsau.export_key_pair(to_local(reference), keys, pkcs=True)
    src, enc = tmp_path / "plain", tmp_path / "plain.enc"
    src.write_bytes(b"meant for the raw key")
    with pytest.raises(MalformedInputError):
        hybrid.encrypt_file(src, keys / rsau.PUBLIC_PKCS_FILE, enc)
    assert not enc.exists()


def test_missing_public_key(tmp_path):
    src = tmp_path / "plain"
    src.write_bytes(b"data")
    with pytest.raises(FileNotFoundError):
        hybrid.encrypt_file(src, tmp_path / "nowhere.key", tmp_path / "out")
    assert not (tmp_path / "out").exists()


@pytest.mark.parametrize("sha", list(rsau.HASH_FUNCS))
def test_sign_verify_file(sha, keydir, tmp_path):
    doc, sig = tmp_path / "doc.txt", tmp_path / "doc.sig"
    doc.write_bytes(b"I owe you exactly nothing.")
    hybrid.sign_file(doc, keydir / rsau.PRIVATE_KEY_FILE, sig, sha)
    assert hybrid.verify_file(doc, keydir / rsau.PUBLIC_KEY_FILE, sig, sha)


def test_verify_file_tampered(keydir, tmp_path):
    doc, sig = tmp_path / "doc.txt", tmp_path / "doc.sig"
    doc.write_bytes(b"I owe you exactly nothing.")
    hybrid.sign_file(doc, keydir / rsau.PRIVATE_KEY_FILE, sig)
    doc.write_bytes(b"I owe you exactly 1000000.")
    assert not hybrid.verify_file(doc, keydir / rsau.PUBLIC_KEY_FILE, sig)


def test_verify_file_wrong_key(keydir, stranger, tmp_path):
    doc, sig = tmp_path / "doc.txt", tmp_path / "doc.sig"
    doc.write_bytes(b"Signed by a stranger.")
    other = tmp_path / "other"
    rsau.export_key_pair(stranger, other)
    hybrid.sign_file(doc, other / rsau.PRIVATE_KEY_FILE, sig)
    assert not hybrid.verify_file(doc, keydir / rsau.PUBLIC_KEY_FILE, sig)


def test_signature_is_minimal(reference, keydir, tmp_path):
    doc, sig = tmp_path / "doc.txt", tmp_path / "doc.sig"
    doc.write_bytes(b"minimal")
    hybrid.sign_file(doc, keydir / rsau.PRIVATE_KEY_FILE, sig)
    raw = sig.read_bytes()
    assert len(raw) <= to_local(reference).pub.bsize
    assert len(raw) == 1 or raw[0] != 0


@pytest.mark.parametrize("payload", payloads)
def test_symmetric_round_trip(payload):
    key, iv = symmetric.generate_key(), secrets.token_bytes(symmetric.BLOCK_SIZE)
    ciphertext = symmetric.encrypt(key, iv, payload)
    assert len(ciphertext) % symmetric.BLOCK_SIZE == 0
    assert 0 < len(ciphertext) - len(payload) <= symmetric.BLOCK_SIZE
    assert symmetric.decrypt(key, iv, ciphertext) == payload


def test_symmetric_wrong_key():
    iv = secrets.token_bytes(symmetric.BLOCK_SIZE)
    ciphertext = symmetric.encrypt(bytes(32), iv, b"secret")
    try:
        recovered = symmetric.decrypt(b"\x01" * 32, iv, ciphertext)
    except MalformedInputError:
        return
    # Padding can validate by chance, the plaintext never will.
    assert recovered != b"secret"


@pytest.mark.parametrize("key,iv", [(bytes(16), bytes(16)), (bytes(32), bytes(8)), (b"", b"")])
def test_symmetric_validates_params(key, iv):
    with pytest.raises(MalformedInputError):
        symmetric.encrypt(key, iv, b"data")
    with pytest.raises(MalformedInputError):
        symmetric.decrypt(key, iv, bytes(16))


@pytest.mark.parametrize("ciphertext", [b"", bytes(15), bytes(17)])
def test_symmetric_validates_ciphertext(ciphertext):
    with pytest.raises(MalformedInputError):
        symmetric.decrypt(bytes(32), bytes(16), ciphertext)


@pytest.mark.parametrize("hex_key", ["zz" * 32, "00" * 16, "0" * 63, ""])
def test_parse_hex_key_validates(hex_key):
    with pytest.raises(MalformedInputError):
        symmetric.parse_hex_key(hex_key)


def test_parse_hex_key():
    key = symmetric.generate_key()
    assert symmetric.parse_hex_key(key.hex()) == key
    assert symmetric.parse_hex_key(f"  {key.hex().upper()}\n") == key


def test_symmetric_file_round_trip(tmp_path):
    hex_key = symmetric.generate_key().hex()
    src, enc, dec = tmp_path / "plain", tmp_path / "plain.aes", tmp_path / "plain.out"
    src.write_bytes(payloads[-1])
    symmetric.encrypt_file(src, hex_key, enc)
    assert len(enc.read_bytes()) == symmetric.BLOCK_SIZE + len(payloads[-1]) + symmetric.BLOCK_SIZE
    symmetric.decrypt_file(enc, hex_key, dec)
    assert dec.read_bytes() == payloads[-1]


@pytest.mark.parametrize("size", [0, 8, 16, 20])
def test_symmetric_file_truncated(size, tmp_path):
    enc, dec = tmp_path / "torn.aes", tmp_path / "torn.out"
    enc.write_bytes(bytes(size))
    with pytest.raises(MalformedInputError):
        symmetric.decrypt_file(enc, "00" * 32, dec)
    assert not dec.exists()
