# src/invoicing/crypto.py

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from src.invoicing.errors import CipherSetupError, PaddingError

AES_BLOCK_SIZE = algorithms.AES.block_size // 8   # bytes


def pkcs7_pad(data: bytes, block_size: int) -> bytes:
    """
    Pad data to a multiple of block_size; every pad byte holds the pad length.

    A full block of padding is added when data is already aligned.
    """
    if block_size <= 0:
        raise PaddingError("invalid blocksize")
    if not data:
        raise PaddingError("invalid PKCS7 data (empty or not padded)")

    padder = padding.PKCS7(block_size * 8).padder()
    return padder.update(data) + padder.finalize()


def new_cipher(key: bytes, iv: bytes) -> Cipher:
    try:
        return Cipher(algorithms.AES(key), modes.CBC(iv))
    except ValueError as e:
        # never put the key itself in the message
        raise CipherSetupError(
            f"error creating new cipher (key {len(key)} bytes, iv {len(iv)} bytes): {e}"
        ) from e


def encrypt(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """AES-CBC encrypt plaintext after PKCS#7 padding it."""
    cipher = new_cipher(key, iv)
    data = pkcs7_pad(plaintext, AES_BLOCK_SIZE)
    encryptor = cipher.encryptor()
    return encryptor.update(data) + encryptor.finalize()
