from typing import Optional

import requests

from src.config.settings import (
    BROWSER_HEADERS,
    PROXY_TIMEOUT_SECONDS,
    ProxyConfig,
    load_proxy_config,
)
from src.models.errors import NetworkError
from src.utils.logger import get_logger

logger = get_logger(__name__)


class ProxyFetcher:
    """Fetches provider pages through the configured forward proxy.

    There is no direct fetch path: every request carries the proxy settings,
    so all scraping traffic leaves through one exit identity. Each call is a
    single attempt. The body is buffered whole, without a size cap.
    """

    def __init__(
        self,
        config: ProxyConfig,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = PROXY_TIMEOUT_SECONDS,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def proxies(self):
        return {"http": self.config.url, "https": self.config.url}

    def fetch(self, url: str) -> str:
        logger.info(f"Fetching via proxy {self.config.host}:{self.config.port}: {url}")

        try:
            resp = self.session.get(
                url,
                headers=BROWSER_HEADERS,
                proxies=self.proxies,
                timeout=self.timeout,
            )
            if "charset" not in resp.headers.get("Content-Type", "").lower():
                resp.encoding = resp.apparent_encoding
            markup = resp.text
        except requests.RequestException as e:
            raise NetworkError(f"Failed to fetch {url}: {e}") from e

        if not resp.ok:
            logger.warning(f"Provider answered {resp.status_code} for {url}")

        logger.info(f"Fetched {len(markup)} characters from provider")
        return markup


_fetcher_instance: Optional[ProxyFetcher] = None


def get_proxy_fetcher() -> ProxyFetcher:
    """Process-wide fetcher, built from the environment on first use.

    Raises ConfigurationError if proxy credentials are missing.
    """
    global _fetcher_instance

    if _fetcher_instance is None:
        _fetcher_instance = ProxyFetcher(load_proxy_config())

    return _fetcher_instance
