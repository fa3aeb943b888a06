import re
import json
import base64
import binascii
import hashlib
from enum import Enum
from dataclasses import dataclass
from typing import List, Optional, Tuple
from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from tiktok_uploader.config.logging import get_logger

logger = get_logger(__name__)

OPENSSL_MAGIC = b"Salted__"
SALT_LEN = 8
KEY_LEN = 32
IV_LEN = 16
DEFAULT_ITERATIONS = 100000
DEFAULT_DIGEST = "sha256"
REQUIRED_COOKIE_FIELDS = ("name", "value", "domain", "path")

_DATA_URI_PREFIX = re.compile(r"^(?:data:[^,]*;base64,)+", re.IGNORECASE)
_STRIP_CHARS = re.compile("[\\s\\u200b-\\u200d\\ufeff]+")


class KdfMode(str, Enum):
    LEGACY = "legacy"   # EVP_BytesToKey, single MD5 round (old `openssl enc` default)
    PBKDF2 = "pbkdf2"


class DecryptErrorKind(str, Enum):
    MISSING_CREDENTIAL = "MissingCredential"
    MALFORMED_BUNDLE = "MalformedBundle"
    DECRYPTION_FAILED = "DecryptionFailed"
    PAYLOAD_CORRUPT = "PayloadCorrupt"


@dataclass(frozen=True)
class DecryptError:
    kind: DecryptErrorKind
    message: str


class CookieDecryptError(Exception):
    def __init__(self, kind: DecryptErrorKind, message: str):
        super().__init__(f"{kind.value}: {message}")
        self.error = DecryptError(kind, message)


@dataclass(frozen=True)
class DecryptConfig:
    """
    Everything one decrypt call needs. Built by the caller (see
    config.get_decrypt_config); the decryptor never reads the environment.
    """
    bundle: str
    password: str
    kdf_mode: KdfMode = KdfMode.PBKDF2
    iterations: int = DEFAULT_ITERATIONS
    digest: str = DEFAULT_DIGEST

    def __post_init__(self):
        if not isinstance(self.kdf_mode, KdfMode):
            raise ValueError(f"Unknown KDF mode: {self.kdf_mode!r}")
        if self.iterations < 1:
            raise ValueError("KDF iterations must be >= 1")
        try:
            hashlib.pbkdf2_hmac(self.digest, b"", b"", 1)
        except (ValueError, TypeError):
            raise ValueError(f"Unsupported KDF digest: {self.digest!r}")

    def __repr__(self):
        return (f"DecryptConfig(bundle={mask_secret(self.bundle)}, password=<hidden>, "
                f"kdf_mode={self.kdf_mode.value}, iterations={self.iterations}, digest={self.digest})")


@dataclass(frozen=True)
class DecryptResult:
    cookies: Optional[List[dict]] = None
    error: Optional[DecryptError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> List[dict]:
        if self.error is not None:
            raise CookieDecryptError(self.error.kind, self.error.message)
        return self.cookies


def mask_secret(value: Optional[str], visible: int = 8) -> str:
    """Length plus a short non-secret prefix, for diagnostics only."""
    if not value:
        return "<empty>"
    return f"<len={len(value)} prefix={value[:visible]!r}>"


# -------------------------------
# Input Sanitizer
# -------------------------------
def sanitize_base64(raw: Optional[str]) -> str:
    """
    Normalize a pasted/env-supplied Base64 string: drop a `data:...;base64,`
    prefix, whitespace, zero-width characters and BOMs.
    """
    text = _STRIP_CHARS.sub("", raw or "")
    text = _DATA_URI_PREFIX.sub("", text, count=1).strip()
    if not text:
        raise CookieDecryptError(DecryptErrorKind.MISSING_CREDENTIAL, "Encrypted cookie bundle is empty")
    return text


def _sanitize_password(password: Optional[str]) -> str:
    # Only the surrounding junk from env files / copy-paste is removed
    cleaned = (password or "").strip(" \t\r\n\u200b\u200c\u200d\ufeff")
    if not cleaned:
        raise CookieDecryptError(DecryptErrorKind.MISSING_CREDENTIAL, "Cookie password is empty")
    return cleaned


# -------------------------------
# Bundle Parser
# -------------------------------
def parse_bundle(b64_bundle: str) -> Tuple[bytes, bytes]:
    try:
        raw = base64.b64decode(b64_bundle, validate=True)
    except (binascii.Error, ValueError):
        raise CookieDecryptError(DecryptErrorKind.MALFORMED_BUNDLE, "Bundle is not valid Base64")

    if len(raw) < len(OPENSSL_MAGIC) + SALT_LEN:
        raise CookieDecryptError(
            DecryptErrorKind.MALFORMED_BUNDLE,
            f"Bundle too short ({len(raw)} bytes, need at least {len(OPENSSL_MAGIC) + SALT_LEN})",
        )
    if raw[:len(OPENSSL_MAGIC)] != OPENSSL_MAGIC:
        raise CookieDecryptError(
            DecryptErrorKind.MALFORMED_BUNDLE,
            "Missing Salted__ header. Invalid OpenSSL data.",
        )

    salt = raw[8:16]
    ciphertext = raw[16:]
    return salt, ciphertext


# -------------------------------
# Key Derivation
# -------------------------------
def _evp_bytes_to_key(password: bytes, salt: bytes, key_len: int, iv_len: int):
    """
    OpenSSL EVP_BytesToKey (MD5, one round) as used by `openssl enc` without -pbkdf2.
    """
    d = b""
    prev = b""
    while len(d) < key_len + iv_len:
        prev = hashlib.md5(prev + password + salt).digest()
        d += prev
    return d[:key_len], d[key_len:key_len + iv_len]


def derive_key_iv(password: bytes, salt: bytes, kdf_mode: KdfMode = KdfMode.PBKDF2,
                  iterations: int = DEFAULT_ITERATIONS, digest: str = DEFAULT_DIGEST) -> Tuple[bytes, bytes]:
    if kdf_mode == KdfMode.LEGACY:
        return _evp_bytes_to_key(password, salt, KEY_LEN, IV_LEN)

    key_iv = hashlib.pbkdf2_hmac(digest, password, salt, iterations, dklen=KEY_LEN + IV_LEN)
    return key_iv[:KEY_LEN], key_iv[KEY_LEN:]


# -------------------------------
# Decryptor
# -------------------------------
def decrypt_ciphertext(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    if not ciphertext or len(ciphertext) % AES.block_size:
        raise CookieDecryptError(
            DecryptErrorKind.DECRYPTION_FAILED,
            f"Ciphertext length {len(ciphertext)} is not a positive multiple of {AES.block_size}",
        )

    cipher = AES.new(key, AES.MODE_CBC, iv)
    plaintext = cipher.decrypt(ciphertext)
    try:
        return unpad(plaintext, AES.block_size, style="pkcs7")
    except ValueError:
        raise CookieDecryptError(
            DecryptErrorKind.DECRYPTION_FAILED,
            "Bad padding after decryption. Wrong password or KDF settings?",
        )


# -------------------------------
# Payload Parser
# -------------------------------
def parse_cookie_payload(plaintext: bytes) -> List[dict]:
    try:
        payload = json.loads(plaintext.decode("utf-8"))
    except UnicodeDecodeError:
        raise CookieDecryptError(DecryptErrorKind.PAYLOAD_CORRUPT, "Decrypted payload is not valid UTF-8")
    except json.JSONDecodeError as e:
        raise CookieDecryptError(
            DecryptErrorKind.PAYLOAD_CORRUPT,
            f"Decrypted payload is not valid JSON (line {e.lineno}, column {e.colno})",
        )

    # Playwright storage_state exports wrap the list: {"cookies": [...], "origins": [...]}
    if isinstance(payload, dict) and isinstance(payload.get("cookies"), list):
        payload = payload["cookies"]

    if not isinstance(payload, list):
        raise CookieDecryptError(DecryptErrorKind.PAYLOAD_CORRUPT, "Decrypted payload is not a cookie array")

    for index, record in enumerate(payload):
        if not isinstance(record, dict):
            raise CookieDecryptError(DecryptErrorKind.PAYLOAD_CORRUPT, f"Cookie #{index} is not an object")
        missing = [field for field in REQUIRED_COOKIE_FIELDS if field not in record]
        if missing:
            raise CookieDecryptError(
                DecryptErrorKind.PAYLOAD_CORRUPT,
                f"Cookie #{index} is missing field(s): {', '.join(missing)}",
            )
    return payload


def decrypt_cookies(config: DecryptConfig) -> DecryptResult:
    """
    Decrypt an `openssl enc -aes-256-cbc -salt [-pbkdf2]` cookie bundle.

    Sanitize -> parse bundle -> derive key/IV -> AES-256-CBC -> JSON.
    The first failing step decides the error kind. The KDF mode comes only
    from config; there is no fallback to the other mode.
    """
    try:
        b64_bundle = sanitize_base64(config.bundle)
        password = _sanitize_password(config.password)
        logger.debug(f"Cookie bundle received {mask_secret(b64_bundle)}, kdf={config.kdf_mode.value}")

        salt, ciphertext = parse_bundle(b64_bundle)
        key, iv = derive_key_iv(password.encode("utf-8"), salt, config.kdf_mode,
                                config.iterations, config.digest)
        plaintext = decrypt_ciphertext(ciphertext, key, iv)
        del key, iv
        cookies = parse_cookie_payload(plaintext)
    except CookieDecryptError as e:
        logger.error(f"❌ Cookie decryption failed [{e.error.kind.value}]: {e.error.message} "
                     f"(bundle {mask_secret(config.bundle)})")
        return DecryptResult(error=e.error)

    logger.info(f"🔓 Cookies decrypted successfully ({len(cookies)} cookies).")
    return DecryptResult(cookies=cookies)
