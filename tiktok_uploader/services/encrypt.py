"""
Produce a COOKIES_FILE bundle from a cookie JSON export.

Output is byte-compatible with

    openssl enc -aes-256-cbc -salt -pbkdf2 -iter 100000 -md sha256 -a

(or the legacy `openssl enc -aes-256-cbc -salt -md md5 -a` with
COOKIE_KDF_MODE=legacy), so either tool can create bundles.

Usage:
    COOKIE_PASSWORD=... python -m tiktok_uploader.services.encrypt cookies.json
"""
import os
import sys
import json
import base64
import getpass
from typing import List, Optional, Union
from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad

from tiktok_uploader.services.decrypt import (
    DEFAULT_DIGEST,
    DEFAULT_ITERATIONS,
    OPENSSL_MAGIC,
    SALT_LEN,
    KdfMode,
    derive_key_iv,
)


def encrypt_cookie_bundle(cookies: Union[List[dict], bytes, str], password: str,
                          kdf_mode: KdfMode = KdfMode.PBKDF2, iterations: int = DEFAULT_ITERATIONS,
                          digest: str = DEFAULT_DIGEST, salt: Optional[bytes] = None) -> str:
    if isinstance(cookies, (list, dict)):
        plaintext = json.dumps(cookies).encode("utf-8")
    elif isinstance(cookies, str):
        plaintext = cookies.encode("utf-8")
    else:
        plaintext = cookies

    if salt is None:
        salt = get_random_bytes(SALT_LEN)
    if len(salt) != SALT_LEN:
        raise ValueError(f"Salt must be exactly {SALT_LEN} bytes")

    key, iv = derive_key_iv(password.encode("utf-8"), salt, kdf_mode, iterations, digest)
    ciphertext = AES.new(key, AES.MODE_CBC, iv).encrypt(pad(plaintext, AES.block_size))
    return base64.b64encode(OPENSSL_MAGIC + salt + ciphertext).decode("ascii")


def main(argv: List[str]) -> int:
    if len(argv) != 2:
        print(__doc__)
        return 1

    with open(argv[1], "rb") as f:
        plaintext = f.read()
    json.loads(plaintext.decode("utf-8"))  # refuse to encrypt something we could not read back

    password = os.environ.get("COOKIE_PASSWORD") or getpass.getpass("Cookie password: ")
    if not password:
        print("❌ No password provided. Exiting.")
        return 1

    kdf_mode = KdfMode(os.environ.get("COOKIE_KDF_MODE", KdfMode.PBKDF2.value).lower())
    iterations = int(os.environ.get("COOKIE_KDF_ITERATIONS", DEFAULT_ITERATIONS))
    digest = os.environ.get("COOKIE_KDF_DIGEST", DEFAULT_DIGEST)

    print(encrypt_cookie_bundle(plaintext, password, kdf_mode, iterations, digest))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
