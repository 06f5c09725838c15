# tests/test_crypto.py

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from src.invoicing import crypto
from src.invoicing.errors import CipherSetupError, PaddingError

KEY = b"12345678901234567890123456789012"
IV = b"abcdefghijklmnop"

def decrypt(ciphertext: bytes, key: bytes = KEY, iv: bytes = IV) -> bytes:
    """Test oracle: AES-CBC decrypt + PKCS7 unpad."""
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    return unpadder.update(padded) + unpadder.finalize()

def test_pkcs7_pad_fills_to_block_size():
    padded = crypto.pkcs7_pad(b"abc", 16)

    assert padded == b"abc" + bytes([13]) * 13

def test_pkcs7_pad_adds_full_block_when_aligned():
    padded = crypto.pkcs7_pad(b"x" * 16, 16)

    assert len(padded) == 32
    assert padded[16:] == bytes([16]) * 16

def test_pkcs7_pad_other_block_sizes():
    assert crypto.pkcs7_pad(b"abcde", 8) == b"abcde\x03\x03\x03"

@pytest.mark.parametrize("block_size", [0, -16])
def test_pkcs7_pad_rejects_invalid_block_size(block_size):
    with pytest.raises(PaddingError, match="invalid blocksize"):
        crypto.pkcs7_pad(b"abc", block_size)

def test_pkcs7_pad_rejects_empty_data():
    with pytest.raises(PaddingError, match="invalid PKCS7 data"):
        crypto.pkcs7_pad(b"", 16)

def test_encrypt_round_trip():
    plaintext = "MerchantOrderNo=20261018&ItemName=%E7%AD%86".encode("utf-8")

    ciphertext = crypto.encrypt(plaintext, KEY, IV)

    assert len(ciphertext) % 16 == 0
    assert ciphertext != plaintext
    assert decrypt(ciphertext) == plaintext

def test_encrypt_is_deterministic_for_fixed_key_and_iv():
    assert crypto.encrypt(b"same input", KEY, IV) == crypto.encrypt(b"same input", KEY, IV)

@pytest.mark.parametrize("key_size", [16, 24, 32])
def test_all_aes_key_sizes_are_accepted(key_size):
    key = b"k" * key_size

    ciphertext = crypto.encrypt(b"payload", key, IV)

    assert decrypt(ciphertext, key=key) == b"payload"

def test_invalid_key_size_fails_cipher_setup():
    with pytest.raises(CipherSetupError) as excinfo:
        crypto.encrypt(b"payload", b"short-key", IV)

    # the key itself must not leak into the message
    assert "short-key" not in str(excinfo.value)

def test_invalid_iv_size_fails_cipher_setup():
    with pytest.raises(CipherSetupError):
        crypto.encrypt(b"payload", KEY, b"short-iv")

def test_empty_plaintext_is_rejected():
    with pytest.raises(PaddingError):
        crypto.encrypt(b"", KEY, IV)
