from pathlib import Path
from typing import List, Optional
from playwright.async_api import Error as PlaywrightError, async_playwright

from tiktok_uploader.config import config
from tiktok_uploader.config.browser import launch_browser, new_cookie_context
from tiktok_uploader.config.logging import get_logger
from tiktok_uploader.services.cookies import to_playwright_cookies

logger = get_logger(__name__)

FILE_INPUT_SELECTOR = 'input[type="file"]'
CAPTION_SELECTOR = '[placeholder="Describe your video"]'
POST_BUTTON_SELECTOR = "text=Post"
MAX_CAPTION_LEN = 2200


class TikTokUploadError(Exception):
    pass


def prepare_caption(caption: Optional[str]) -> str:
    caption = caption or ""
    if len(caption) > MAX_CAPTION_LEN:
        logger.warning(f"⚠️ Caption is {len(caption)} chars, truncating to {MAX_CAPTION_LEN}")
        caption = caption[:MAX_CAPTION_LEN]
    return caption


async def upload_video_to_tiktok(video_path: Path, caption: Optional[str], cookies: List[dict]):
    """
    Drive the TikTok upload page with an authenticated cookie session.

    The browser is always closed, whether the upload succeeds or not.
    """
    if not cookies:
        raise TikTokUploadError("Refusing to open a TikTok session without cookies")

    caption = prepare_caption(caption)
    playwright_cookies = to_playwright_cookies(cookies)

    try:
        async with async_playwright() as playwright:
            browser = await launch_browser(playwright)
            try:
                context = await new_cookie_context(browser, playwright_cookies)
                page = await context.new_page()

                logger.info("🌐 Navigating to TikTok upload page...")
                await page.goto(config.TIKTOK_UPLOAD_URL, timeout=config.PAGE_TIMEOUT_MS)

                logger.info("📤 Uploading video...")
                await page.set_input_files(FILE_INPUT_SELECTOR, str(video_path))

                logger.info("📝 Adding caption...")
                await page.wait_for_selector(CAPTION_SELECTOR, timeout=config.PAGE_TIMEOUT_MS)
                await page.fill(CAPTION_SELECTOR, caption)

                logger.info("📦 Posting...")
                await page.click(POST_BUTTON_SELECTOR)
                await page.wait_for_timeout(config.POST_SETTLE_MS)
            finally:
                await browser.close()
    except PlaywrightError as e:
        logger.error(f"❌ Browser automation failed: {e}")
        raise TikTokUploadError(f"Browser automation failed: {e.message}") from e

    logger.info("✅ Video successfully posted to TikTok!")
