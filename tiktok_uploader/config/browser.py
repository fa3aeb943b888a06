from typing import List
from playwright.async_api import Browser, BrowserContext, Playwright
from tiktok_uploader.config import config
from tiktok_uploader.config.logging import get_logger

logger = get_logger(__name__)

CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


async def launch_browser(playwright: Playwright) -> Browser:
    logger.info(f"🌐 Launching Chromium (headless={config.BROWSER_HEADLESS})")
    return await playwright.chromium.launch(
        headless=config.BROWSER_HEADLESS,
        args=CHROMIUM_ARGS,
    )


async def new_cookie_context(browser: Browser, cookies: List[dict]) -> BrowserContext:
    context = await browser.new_context()
    await context.add_cookies(cookies)
    logger.info(f"🍪 Injected {len(cookies)} cookies into browser context")
    return context
