import logging
from typing import Any, Dict, List, Optional

import requests

from app.core.config import settings
from app.core.exceptions import ScraperError

logger = logging.getLogger(__name__)


class ScraperClient:
    """Search endpoint of the web-scraping API (markdown scrape of each hit)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.scraper.api_key
        self.url = url or settings.scraper.search_url
        self.timeout = timeout or settings.scraper.timeout_seconds
        self.http = session or requests.Session()

    def search(self, query: str, limit: Optional[int] = None, country: Optional[str] = None) -> List[Dict[str, Any]]:
        if not self.api_key:
            raise ScraperError("FIRECRAWL_API_KEY is not configured")

        payload = {
            "query": query,
            "limit": limit or settings.scraper.results_per_query,
            "country": country or settings.scraper.country,
            "scrapeOptions": {"formats": ["markdown"]},
        }
        try:
            response = self.http.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ScraperError(f"Scraper request failed: {e}")

        if not response.ok:
            raise ScraperError(
                f"Scraper returned error: {response.status_code}",
                details={"status": response.status_code},
            )

        data = response.json().get("data")
        results = data if isinstance(data, list) else []
        logger.info(f"Search results: {len(results)}")
        return results
