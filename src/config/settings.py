import os
from dataclasses import dataclass
from urllib.parse import quote

from dotenv import load_dotenv

from src.models.errors import ConfigurationError

load_dotenv()

# Proxy Configuration (read at first use, see load_proxy_config)
PROXY_ENV_VARS = ("PROXY_HOST", "PROXY_PORT", "PROXY_USER", "PROXY_PASSWORD")
PROXY_TIMEOUT_SECONDS = float(os.environ.get("PROXY_TIMEOUT_SECONDS", "30"))

# Provider Configuration
PROVIDER_NAME = "Google Flights"
FLIGHTS_SEARCH_URL = os.environ.get(
    "FLIGHTS_SEARCH_URL", "https://www.google.com/travel/flights"
)
PROVIDER_LOCALE_PARAMS = {"hl": "en-gb", "gl": "gb", "currency": "GBP"}
CURRENCY_SYMBOL = "£"
DEFAULT_FLIGHT_CLASS = "economy"

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Referer": "https://www.google.com/",
}

# LLM Configuration
OLLAMA_MODEL = os.environ.get("OLLAMA_MODEL", "llama3.2:3b")
OLLAMA_BASE_URL = os.environ.get("OLLAMA_BASE_URL", "http://127.0.0.1:11434")
OLLAMA_TEMPERATURE = 0

# Free-form query defaults
DEFAULT_ORIGIN = os.environ.get("DEFAULT_ORIGIN", "Glasgow")
DEFAULT_DATES = "next week"
DEFAULT_PASSENGERS = 1

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
TRANSACTION_LOG_MAX_ENTRIES = 5
TRANSACTION_LOG_MAX_CONTENT_CHARS = 50_000

# Sessions
SESSION_MAX_ENTRIES = int(os.environ.get("SESSION_MAX_ENTRIES", "1000"))

# API Configuration
API_TITLE = "FareSeeker Flight Search Assistant"
API_PORT = 8000

# CORS Configuration
CORS_ORIGINS = ["*"]


@dataclass(frozen=True)
class ProxyConfig:
    host: str
    port: int
    username: str
    password: str

    @property
    def url(self) -> str:
        """Proxy URL with credentials, in the form requests expects."""
        user = quote(self.username, safe="")
        password = quote(self.password, safe="")
        return f"http://{user}:{password}@{self.host}:{self.port}"

    def __repr__(self):
        return f"ProxyConfig(host={self.host!r}, port={self.port}, username={self.username!r})"


def load_proxy_config(environ=None) -> ProxyConfig:
    """Build the proxy configuration from the environment.

    Raises ConfigurationError naming every variable that is missing.
    """
    environ = os.environ if environ is None else environ
    values = {name: (environ.get(name) or "").strip() for name in PROXY_ENV_VARS}

    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Proxy configuration is missing: {', '.join(missing)}. "
            "Set them in the environment or the .env file."
        )

    try:
        port = int(values["PROXY_PORT"])
    except ValueError:
        raise ConfigurationError(
            f"PROXY_PORT must be an integer, got {values['PROXY_PORT']!r}"
        ) from None

    return ProxyConfig(
        host=values["PROXY_HOST"],
        port=port,
        username=values["PROXY_USER"],
        password=values["PROXY_PASSWORD"],
    )
