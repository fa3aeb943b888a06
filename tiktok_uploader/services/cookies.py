from typing import List, Optional

SAME_SITE_MAP = {
    "no_restriction": "None",
    "none": "None",
    "lax": "Lax",
    "strict": "Strict",
}


def _same_site(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    # "unspecified" and anything unknown is left for the browser to default
    return SAME_SITE_MAP.get(value.strip().lower())


def _expires(record: dict) -> float:
    if record.get("session"):
        return -1
    raw = record.get("expires", record.get("expirationDate"))
    try:
        expires = float(raw)
    except (TypeError, ValueError):
        return -1
    return expires if expires > 0 else -1


def to_playwright_cookie(record: dict) -> dict:
    """
    Map a browser-extension cookie export onto the shape
    BrowserContext.add_cookies() accepts.
    """
    cookie = {
        "name": record["name"],
        "value": record["value"],
        "domain": record["domain"],
        "path": record.get("path") or "/",
        "expires": _expires(record),
        "httpOnly": bool(record.get("httpOnly", False)),
        "secure": bool(record.get("secure", False)),
    }
    same_site = _same_site(record.get("sameSite"))
    if same_site:
        cookie["sameSite"] = same_site
    return cookie


def to_playwright_cookies(records: List[dict]) -> List[dict]:
    return [to_playwright_cookie(record) for record in records]
