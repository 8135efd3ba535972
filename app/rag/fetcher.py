"""Generic web page fetch collaborator"""

from dataclasses import dataclass
import logging

import httpx

from app.rag.config import rag_config

logger = logging.getLogger(__name__)


@dataclass
class FetchedPage:
    """HTTP response reduced to what extraction needs"""
    url: str
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class PageFetcher:
    """HTTP GET with a descriptive user agent"""

    def __init__(self, user_agent: str = None, timeout: float = None):
        self.user_agent = user_agent or rag_config.link_user_agent
        self.timeout = timeout or rag_config.link_timeout

    def fetch(self, url: str) -> FetchedPage:
        """Fetch a page; transport errors propagate as ``httpx.HTTPError``"""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,text/plain;q=0.9,*/*;q=0.8",
        }
        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            response = client.get(url, headers=headers)

        logger.info(f"Fetched {url}: HTTP {response.status_code}, {len(response.text)} chars")
        return FetchedPage(url=str(response.url), status_code=response.status_code, text=response.text)
