from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from tiktok_uploader.config import config
from tiktok_uploader.config.logging import get_logger
from tiktok_uploader.models import uploadModels
from tiktok_uploader.services.decrypt import decrypt_cookies
from tiktok_uploader.services.tiktok_upload import TikTokUploadError, upload_video_to_tiktok
from tiktok_uploader.services.video_download import VideoDownloadError, download_video, remove_video

logger = get_logger(__name__)

router = APIRouter()


def _error(status_code: int, message: str, error_kind: str = None) -> JSONResponse:
    body = uploadModels.UploadErrorResponse(message=message, error_kind=error_kind)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.get("/", response_class=PlainTextResponse)
def root():
    return "TikTok uploader is live. POST to /upload to upload videos."


@router.get("/health", response_model=uploadModels.HealthResponse)
def health():
    kdf_mode = config.describe_kdf_mode()
    return uploadModels.HealthResponse(
        status="misconfigured" if kdf_mode == "invalid" else "healthy",
        region=config.REGION,
        kdf_mode=kdf_mode,
    )


@router.post("/upload", response_model=uploadModels.UploadResponse)
async def upload(request: uploadModels.UploadRequest):
    logger.info(f"🚀 Upload request received: video_url={request.video_url} "
                f"caption_len={len(request.caption or '')}")

    try:
        decrypt_config = config.get_decrypt_config()
    except ValueError as e:
        logger.error(f"❌ Cookie vault misconfigured: {e}")
        return _error(500, str(e), "Configuration")

    # PBKDF2 with 100k rounds is CPU bound, keep it off the event loop
    result = await run_in_threadpool(decrypt_cookies, decrypt_config)
    if not result.ok:
        return _error(500, f"Could not decrypt cookies: {result.error.message}", result.error.kind.value)

    video_path = None
    try:
        video_path = await download_video(request.video_url)
        await upload_video_to_tiktok(video_path, request.caption, result.cookies)
    except VideoDownloadError as e:
        logger.error(f"❌ Upload failed: {e}")
        return _error(502, str(e), "VideoDownload")
    except TikTokUploadError as e:
        logger.error(f"❌ Upload failed: {e}")
        return _error(500, str(e), "BrowserUpload")
    finally:
        remove_video(video_path)

    return uploadModels.UploadResponse(status="success", message="Video uploaded to TikTok")
