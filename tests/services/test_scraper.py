"""Tests for company page scraping."""

import pytest

from toguna.services.scraper import ScraperService, extract_company

PAGE = """
<html>
<head>
<title>株式会社ガンマ | 公式サイト</title>
<meta name="description" content="業務システムの受託開発">
</head>
<body>
<h1>会社概要</h1>
<p>〒100-0001 東京都千代田区千代田1-1</p>
<p>TEL: 03-1234-5678</p>
<p>お問い合わせ: contact@gamma.test</p>
<img src="logo@2x.png">
</body>
</html>
"""


def test_extract_company_from_page():
    company = extract_company("https://gamma.test/", PAGE)

    assert company["url"] == "https://gamma.test/"
    assert company["name"] == "株式会社ガンマ"
    assert company["description"] == "業務システムの受託開発"
    assert company["phones"] == ["03-1234-5678"]
    assert company["emails"] == ["contact@gamma.test"]
    assert company["address"].startswith("〒100-0001 東京都千代田区")


def test_extract_company_without_title():
    company = extract_company("https://empty.test/", "<html><body>準備中</body></html>")

    assert company["name"] is None
    assert company["phones"] == []
    assert company["address"] is None


@pytest.mark.asyncio
async def test_fetch_rejects_non_http_urls():
    with pytest.raises(ValueError):
        await ScraperService().fetch("ftp://gamma.test/")
