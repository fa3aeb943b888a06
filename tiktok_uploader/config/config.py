import os

from tiktok_uploader.services.decrypt import DecryptConfig, KdfMode, DEFAULT_DIGEST, DEFAULT_ITERATIONS

# -------------------------------
# Cookie vault
# -------------------------------
COOKIES_FILE = os.getenv("COOKIES_FILE", "")          # Base64 `openssl enc` output
COOKIE_PASSWORD = os.getenv("COOKIE_PASSWORD", "")
COOKIE_KDF_MODE = os.getenv("COOKIE_KDF_MODE", KdfMode.PBKDF2.value)
COOKIE_KDF_ITERATIONS = int(os.getenv("COOKIE_KDF_ITERATIONS", DEFAULT_ITERATIONS))
COOKIE_KDF_DIGEST = os.getenv("COOKIE_KDF_DIGEST", DEFAULT_DIGEST)

# -------------------------------
# Browser / TikTok
# -------------------------------
TIKTOK_UPLOAD_URL = os.getenv("TIKTOK_UPLOAD_URL", "https://www.tiktok.com/upload")
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "true").lower() == "true"
PAGE_TIMEOUT_MS = int(os.getenv("PAGE_TIMEOUT_MS", 60000))
POST_SETTLE_MS = int(os.getenv("POST_SETTLE_MS", 8000))
DOWNLOAD_TIMEOUT_SECONDS = float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", 60))

# -------------------------------
# Service
# -------------------------------
PORT = int(os.getenv("PORT", 3000))
REGION = os.getenv("REGION", "UK")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "pretty")


def parse_kdf_mode(value: str) -> KdfMode:
    try:
        return KdfMode((value or "").strip().lower())
    except ValueError:
        raise ValueError(f"COOKIE_KDF_MODE must be one of: {', '.join(m.value for m in KdfMode)}")


def get_decrypt_config() -> DecryptConfig:
    """Snapshot of the cookie vault settings for one decrypt call."""
    return DecryptConfig(
        bundle=COOKIES_FILE,
        password=COOKIE_PASSWORD,
        kdf_mode=parse_kdf_mode(COOKIE_KDF_MODE),
        iterations=COOKIE_KDF_ITERATIONS,
        digest=COOKIE_KDF_DIGEST,
    )


def describe_kdf_mode() -> str:
    """Configured KDF mode as the decryptor will see it, or "invalid"."""
    try:
        return parse_kdf_mode(COOKIE_KDF_MODE).value
    except ValueError:
        return "invalid"
