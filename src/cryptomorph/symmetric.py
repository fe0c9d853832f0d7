"""AES-256-CBC with PKCS#7 padding, and the plain symmetric file format built on it.

The cipher itself comes from `cryptography`; this module only fixes the parameters and the on-disk layout, which is
the 16-byte IV immediately followed by the ciphertext.

Typical usage example:

    key = generate_key()
    encrypt_file("notes.txt", key.hex(), "notes.bin")
    decrypt_file("notes.bin", key.hex(), "notes.out")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import pathlib
from secrets import token_bytes

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers import modes

from cryptomorph.errors import MalformedInputError

KEY_SIZE = 32
BLOCK_SIZE = 16

logger = logging.getLogger(__name__)


def generate_key() -> bytes:
    """Returns a fresh random AES-256 key."""
    return token_bytes(KEY_SIZE)


def _check_params(key: bytes, iv: bytes) -> None:
    if len(key) != KEY_SIZE:
        raise MalformedInputError(f"Key must be {KEY_SIZE} bytes long, got {len(key)}.")
    if len(iv) != BLOCK_SIZE:
        raise MalformedInputError(f"IV must be {BLOCK_SIZE} bytes long, got {len(iv)}.")


def encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """Encrypts `plaintext` under AES-256-CBC, PKCS#7 padded.

    Args:
        key: 32-byte key.
        iv: 16-byte initialization vector.
        plaintext: Data to encrypt, any length.

    Returns:
        The ciphertext, one to `BLOCK_SIZE` bytes longer than the plaintext.

    Raises:
        MalformedInputError: If key or IV have the wrong length.
    """
    _check_params(key, iv)
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """Decrypts AES-256-CBC ciphertext and strips the PKCS#7 padding.

    Args:
        key: 32-byte key.
        iv: 16-byte initialization vector.
        ciphertext: The ciphertext. Must be a non-empty multiple of `BLOCK_SIZE`.

    Returns:
        The plaintext.

    Raises:
        MalformedInputError: If parameters have the wrong length or the padding is invalid (usually a wrong key).
    """
    _check_params(key, iv)
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise MalformedInputError(f"Ciphertext length {len(ciphertext)} is not a positive multiple of {BLOCK_SIZE}.")
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise MalformedInputError("Invalid padding, wrong key or corrupted ciphertext.") from exc


def parse_hex_key(hex_key: str) -> bytes:
    """Decodes a hexadecimal AES-256 key.

    Raises:
        MalformedInputError: If the string is not hex or does not decode to `KEY_SIZE` bytes.
    """
    try:
        key = bytes.fromhex(hex_key.strip())
    except ValueError as exc:
        raise MalformedInputError("Key is not a valid hexadecimal string.") from exc
    if len(key) != KEY_SIZE:
        raise MalformedInputError(f"Key must be {KEY_SIZE} bytes ({KEY_SIZE * 2} hex digits), got {len(key)}.")
    return key


def encrypt_file(input_path: pathlib.Path, hex_key: str, output_path: pathlib.Path) -> None:
    """Encrypts a file into the `IV | ciphertext` layout under a hex-encoded key."""
    key = parse_hex_key(hex_key)
    plaintext = pathlib.Path(input_path).read_bytes()
    iv = token_bytes(BLOCK_SIZE)
    payload = iv + encrypt(key, iv, plaintext)
    pathlib.Path(output_path).write_bytes(payload)
    logger.info("Encrypted %d bytes from %s into %s", len(plaintext), input_path, output_path)


def decrypt_file(input_path: pathlib.Path, hex_key: str, output_path: pathlib.Path) -> None:
    """Decrypts a file in the `IV | ciphertext` layout under a hex-encoded key."""
    key = parse_hex_key(hex_key)
    data = pathlib.Path(input_path).read_bytes()
    if len(data) < BLOCK_SIZE:
        raise MalformedInputError(f"File {input_path} is too short to contain an IV.")
    plaintext = decrypt(key, data[:BLOCK_SIZE], data[BLOCK_SIZE:])
    pathlib.Path(output_path).write_bytes(plaintext)
    logger.info("Decrypted %s into %s", input_path, output_path)
