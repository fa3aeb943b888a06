import os
import tempfile
from pathlib import Path
from typing import Optional
import httpx

from tiktok_uploader.config import config
from tiktok_uploader.config.logging import get_logger

logger = get_logger(__name__)


class VideoDownloadError(Exception):
    pass


def remove_video(path: Optional[Path]):
    if path is None:
        return
    try:
        os.unlink(path)
        logger.info(f"🧹 Removed temp video {path}")
    except FileNotFoundError:
        pass


async def download_video(url: str, dest_dir: Optional[str] = None,
                         client: Optional[httpx.AsyncClient] = None) -> Path:
    """
    Stream `url` into a fresh temporary .mp4 file and return its path.

    Each call gets its own file so concurrent uploads never share one.
    The caller owns the file and must remove_video() it.
    """
    fd, name = tempfile.mkstemp(prefix="tiktok_video_", suffix=".mp4", dir=dest_dir)
    path = Path(name)
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=config.DOWNLOAD_TIMEOUT_SECONDS, follow_redirects=True)

    downloaded = False
    try:
        size = 0
        with os.fdopen(fd, "wb") as fh:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                async for chunk in response.aiter_bytes():
                    fh.write(chunk)
                    size += len(chunk)
        if size == 0:
            raise VideoDownloadError(f"Video download returned an empty body: {url}")
        logger.info(f"⬇️ Downloaded {size} bytes to {path}")
        downloaded = True
        return path
    except httpx.HTTPStatusError as e:
        raise VideoDownloadError(f"Video download failed with HTTP {e.response.status_code}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise VideoDownloadError(f"Video download failed: {e}") from e
    finally:
        if not downloaded:
            remove_video(path)
        if owns_client:
            await client.aclose()
