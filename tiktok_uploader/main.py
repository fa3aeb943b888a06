import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tiktok_uploader.config import config
from tiktok_uploader.config.logging import configure_logging, get_logger
from tiktok_uploader.routes.mainRouter import mainRouter
from tiktok_uploader.services.decrypt import KdfMode

configure_logging()
logger = get_logger(__name__)

app = FastAPI(title="TikTok Uploader", version="1.0.0")

# -------------------------------
# CORS Middleware
# -------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Replace in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------------
# Startup Event
# -------------------------------
@app.on_event("startup")
async def startup_event():
    logger.info(f"🚀 TikTok uploader running in {config.REGION} region on port {config.PORT}")
    if not config.COOKIES_FILE or not config.COOKIE_PASSWORD:
        logger.warning("⚠️ COOKIES_FILE / COOKIE_PASSWORD not set, uploads will fail")
    kdf_mode = config.describe_kdf_mode()
    if kdf_mode == "invalid":
        logger.warning(f"⚠️ COOKIE_KDF_MODE={config.COOKIE_KDF_MODE!r} is not a known mode, uploads will fail")
    elif kdf_mode == KdfMode.LEGACY.value:
        logger.warning("⚠️ COOKIE_KDF_MODE=legacy (single-round MD5). Re-encrypt the bundle with -pbkdf2")

# -------------------------------
# Include Routes
# -------------------------------
mainRouter(app)


def run():
    uvicorn.run("tiktok_uploader.main:app", host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    run()
