"""Shared fixtures: reference `openssl enc` bundles built without the code under test"""
import base64
import hashlib
import json
import pytest
from Crypto.Cipher import AES
from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2
from Crypto.Util.Padding import pad

ZERO_SALT = bytes(8)


def reference_evp_md5(password: bytes, salt: bytes, length: int = 48) -> bytes:
    """Single-round MD5 chain, written independently of the service code."""
    blocks = [hashlib.md5(password + salt).digest()]
    while sum(len(b) for b in blocks) < length:
        blocks.append(hashlib.md5(blocks[-1] + password + salt).digest())
    return b"".join(blocks)[:length]


def reference_pbkdf2_sha256(password: bytes, salt: bytes, iterations: int) -> bytes:
    return PBKDF2(password, salt, dkLen=48, count=iterations, hmac_hash_module=SHA256)


def openssl_bundle(plaintext: bytes, password: str, salt: bytes = ZERO_SALT,
                   legacy: bool = False, iterations: int = 100000) -> str:
    if legacy:
        key_iv = reference_evp_md5(password.encode("utf-8"), salt)
    else:
        key_iv = reference_pbkdf2_sha256(password.encode("utf-8"), salt, iterations)
    cipher = AES.new(key_iv[:32], AES.MODE_CBC, key_iv[32:])
    return base64.b64encode(b"Salted__" + salt + cipher.encrypt(pad(plaintext, 16))).decode("ascii")


@pytest.fixture
def sample_cookies():
    return [
        {"name": "sessionid", "value": "abc123", "domain": ".tiktok.com", "path": "/",
         "httpOnly": True, "secure": True, "sameSite": "no_restriction", "expirationDate": 1893456000.5},
        {"name": "tt_csrf_token", "value": "xyz", "domain": ".tiktok.com", "path": "/",
         "httpOnly": False, "secure": True, "sameSite": "lax"},
        {"name": "sessionid", "value": "dup", "domain": "www.tiktok.com", "path": "/upload"},
    ]


@pytest.fixture
def make_bundle():
    def _make(payload, password="p", salt=ZERO_SALT, legacy=False, iterations=1000):
        if not isinstance(payload, bytes):
            payload = json.dumps(payload).encode("utf-8")
        return openssl_bundle(payload, password, salt, legacy=legacy, iterations=iterations)
    return _make
