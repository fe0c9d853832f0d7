"""Hybrid RSA + AES file encryption, and file signatures.

A file is encrypted under a fresh AES-256 key, and that key is encrypted under the recipient's RSA public key. The
resulting envelope is laid out as:

    +----------------+----------------------+--------+----------------+
    | key len (u16)  | RSA-encrypted key    | IV     | AES ciphertext |
    +----------------+----------------------+--------+----------------+

Signatures are the raw big-endian bytes of the private transform of the file digest.

Every operation reads its inputs and computes the full result before writing anything, so a failure never leaves a
partial output file behind.

Typical usage example:

    encrypt_file("report.pdf", "keys/rsa_public.key", "report.enc")
    decrypt_file("report.enc", "keys/rsa_private.key", "report.pdf")
    sign_file("report.pdf", "keys/rsa_private.key", "report.sig")
    assert verify_file("report.pdf", "keys/rsa_public.key", "report.sig")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import pathlib
from secrets import token_bytes

from cryptomorph import symmetric
from cryptomorph.errors import MalformedInputError
from cryptomorph.rsa import bytes_to_integer
from cryptomorph.rsa import integer_to_bytes
from cryptomorph.rsa import RSAPrivKey
from cryptomorph.rsa import RSAPubKey

LENGTH_PREFIX = 2

logger = logging.getLogger(__name__)


def seal(plaintext: bytes, pub: RSAPubKey) -> bytes:
    """Builds a hybrid envelope for `plaintext` addressed to `pub`.

    Raises:
        ValueError: If the modulus is too small to carry a symmetric key.
    """
    if pub.mod.bit_length() <= symmetric.KEY_SIZE * 8:
        raise ValueError(f"A {pub.mod.bit_length()}-bit key is too small to wrap a {symmetric.KEY_SIZE * 8}-bit key.")
    key = symmetric.generate_key()
    iv = token_bytes(symmetric.BLOCK_SIZE)
    ciphertext = symmetric.encrypt(key, iv, plaintext)
    enc_key = integer_to_bytes(pub.encrypt(bytes_to_integer(key)))
    return len(enc_key).to_bytes(LENGTH_PREFIX, "big") + enc_key + iv + ciphertext


def unseal(envelope: bytes, priv: RSAPrivKey) -> bytes:
    """Opens a hybrid envelope with `priv`.

    A recovered key shorter than `symmetric.KEY_SIZE` is left-padded with zero bytes, since leading zeros do not
    survive the round trip through an integer.

    Raises:
        MalformedInputError: If the envelope is truncated, or the recovered key cannot be a symmetric key.
        ValueError: If the wrapped key is out of range for `priv`.
    """
    if len(envelope) < LENGTH_PREFIX:
        raise MalformedInputError("Envelope is too short to contain a key length.")
    key_len = int.from_bytes(envelope[:LENGTH_PREFIX], "big")
    body = LENGTH_PREFIX + key_len + symmetric.BLOCK_SIZE
    if key_len == 0 or len(envelope) < body:
        raise MalformedInputError(f"Envelope is truncated: key length {key_len}, total size {len(envelope)}.")
    enc_key = envelope[LENGTH_PREFIX:LENGTH_PREFIX + key_len]
    iv = envelope[LENGTH_PREFIX + key_len:body]
    key_int = priv.decrypt(bytes_to_integer(enc_key))
    if key_int.bit_length() > symmetric.KEY_SIZE * 8:
        raise MalformedInputError("Recovered symmetric key has an invalid length, wrong private key?")
    key = integer_to_bytes(key_int, symmetric.KEY_SIZE)
    return symmetric.decrypt(key, iv, envelope[body:])


def encrypt_file(input_path: pathlib.Path, public_key_path: pathlib.Path, output_path: pathlib.Path) -> None:
    """Encrypts a file into a hybrid envelope for the given public key file."""
    pub = RSAPubKey.import_key(public_key_path)
    plaintext = pathlib.Path(input_path).read_bytes()
    envelope = seal(plaintext, pub)
    pathlib.Path(output_path).write_bytes(envelope)
    logger.info("Encrypted %d bytes from %s into %s", len(plaintext), input_path, output_path)


def decrypt_file(input_path: pathlib.Path, private_key_path: pathlib.Path, output_path: pathlib.Path) -> None:
    """Decrypts a hybrid envelope with the given private key file."""
    priv = RSAPrivKey.import_key(private_key_path)
    plaintext = unseal(pathlib.Path(input_path).read_bytes(), priv)
    pathlib.Path(output_path).write_bytes(plaintext)
    logger.info("Decrypted %s into %s", input_path, output_path)


def sign_file(input_path: pathlib.Path,
              private_key_path: pathlib.Path,
              sig_path: pathlib.Path,
              sha: str = "sha256") -> None:
    """Signs a file, writing the signature's big-endian bytes to `sig_path`."""
    priv = RSAPrivKey.import_key(private_key_path)
    signature = priv.sign(pathlib.Path(input_path).read_bytes(), sha)
    pathlib.Path(sig_path).write_bytes(integer_to_bytes(signature))
    logger.info("Signed %s into %s", input_path, sig_path)


def verify_file(input_path: pathlib.Path,
                public_key_path: pathlib.Path,
                sig_path: pathlib.Path,
                sha: str = "sha256") -> bool:
    """Checks a file against a signature file.

    Returns:
        True if the signature is valid for the file and key, False otherwise.
    """
    pub = RSAPubKey.import_key(public_key_path)
    signature = bytes_to_integer(pathlib.Path(sig_path).read_bytes())
    valid = pub.verify(pathlib.Path(input_path).read_bytes(), signature, sha)
    logger.info("Signature %s for %s is %s", sig_path, input_path, "valid" if valid else "invalid")
    return valid
