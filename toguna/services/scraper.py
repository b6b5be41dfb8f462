"""Fetch company web pages and pull out contact details."""

import html
import logging
import re
from typing import Any

import httpx

from toguna.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
META_DESCRIPTION_RE = re.compile(
    r"<meta[^>]*name=[\"']description[\"'][^>]*content=[\"']([^\"']*)[\"']",
    re.IGNORECASE,
)
PHONE_RE = re.compile(r"(?<!\d)(0\d{1,4}[-(]\d{1,4}[-)]\d{3,4}|0120-?\d{3}-?\d{3}|0\d{9,10})(?!\d)")
EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PREFECTURES = (
    "北海道|青森県|岩手県|宮城県|秋田県|山形県|福島県|茨城県|栃木県|群馬県|埼玉県|千葉県|東京都|"
    "神奈川県|新潟県|富山県|石川県|福井県|山梨県|長野県|岐阜県|静岡県|愛知県|三重県|滋賀県|京都府|"
    "大阪府|兵庫県|奈良県|和歌山県|鳥取県|島根県|岡山県|広島県|山口県|徳島県|香川県|愛媛県|高知県|"
    "福岡県|佐賀県|長崎県|熊本県|大分県|宮崎県|鹿児島県|沖縄県"
)
ADDRESS_RE = re.compile(rf"(〒\s?\d{{3}}-?\d{{4}}[^<\n]{{0,80}}|(?:{PREFECTURES})[^<\n]{{2,60}})")
TAG_RE = re.compile(r"<[^>]+>")
MAX_MATCHES = 5


def _unique(values: list[str]) -> list[str]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen[:MAX_MATCHES]


def _strip_tags(text: str) -> str:
    return " ".join(html.unescape(TAG_RE.sub(" ", text)).split())


def extract_company(url: str, page: str) -> dict[str, Any]:
    """Build a company candidate from raw HTML."""
    title_match = TITLE_RE.search(page)
    title = _strip_tags(title_match.group(1)) if title_match else None
    description_match = META_DESCRIPTION_RE.search(page)
    description = html.unescape(description_match.group(1)).strip()[:500] if description_match else None

    text = _strip_tags(page)
    emails = [e for e in EMAIL_RE.findall(text) if not e.lower().endswith((".png", ".jpg", ".gif"))]
    address_match = ADDRESS_RE.search(text)

    name = None
    if title:
        name = re.split(r"\s*[|｜\-–:：]\s*", title)[0].strip() or title

    return {
        "url": url,
        "name": name,
        "description": description,
        "phones": _unique(PHONE_RE.findall(text)),
        "emails": _unique(emails),
        "address": address_match.group(0).strip() if address_match else None,
    }


class ScraperService:
    """HTTP fetcher for prospect discovery."""

    def __init__(self):
        self.user_agent = settings.scraper_user_agent
        self.timeout = settings.scraper_timeout_seconds

    async def fetch(self, url: str) -> str:
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Unsupported URL: {url}")
        async with httpx.AsyncClient(follow_redirects=True) as client:
            response = await client.get(
                url,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                    "Accept-Language": "ja-JP,ja;q=0.9",
                    "Cache-Control": "no-cache",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.text

    async def scrape(self, url: str) -> dict[str, Any]:
        page = await self.fetch(url)
        company = extract_company(url, page)
        logger.info(f"Scraped {url}: {company['name']}")
        return company
