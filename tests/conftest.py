from datetime import date

import pytest

from src.config.settings import ProxyConfig
from src.models.schemas import ExtractionStatus, SearchResult, StructuredQuery
from src.services.date_resolver import DateResolver
from src.services.query_builder import QueryBuilder
from src.services.search_service import price_only_flight
from src.services.session_service import session_service
from src.utils.transaction_log import transaction_logs

# A Monday; the next Sunday is 2026-10-25.
FIXED_TODAY = date(2026, 10, 19)
SEARCH_URL = "https://www.google.com/travel/flights"


class FakeResponse:
    def __init__(self, text="", status_code=200, content_type="text/html; charset=utf-8"):
        self.text = text
        self.status_code = status_code
        self.headers = {"Content-Type": content_type} if content_type else {}
        self.encoding = "utf-8" if content_type and "charset" in content_type else "ISO-8859-1"
        self.apparent_encoding = "utf-8"

    @property
    def ok(self):
        return self.status_code < 400


class FakeSession:
    """Stands in for requests.Session; returns a canned response or raises."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


class FakeFetcher:
    def __init__(self, markup="", error=None):
        self.markup = markup
        self.error = error
        self.urls = []

    def fetch(self, url):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.markup


@pytest.fixture
def today():
    return FIXED_TODAY


@pytest.fixture
def resolver():
    return DateResolver(today_provider=lambda: FIXED_TODAY)


@pytest.fixture
def builder(resolver):
    return QueryBuilder(resolver=resolver, base_url=SEARCH_URL)


@pytest.fixture
def proxy_config():
    return ProxyConfig(host="proxy.example", port=8080, username="scraper", password="p@ss")


@pytest.fixture
def proxy_env(monkeypatch):
    env_vars = {
        "PROXY_HOST": "proxy.example",
        "PROXY_PORT": "8080",
        "PROXY_USER": "scraper",
        "PROXY_PASSWORD": "secret",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def no_proxy_env(monkeypatch):
    for key in ("PROXY_HOST", "PROXY_PORT", "PROXY_USER", "PROXY_PASSWORD"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def clean_state():
    for log in transaction_logs.values():
        log.clear()
    session_service.sessions.clear()
    yield
    for log in transaction_logs.values():
        log.clear()
    session_service.sessions.clear()


class FakeStructuredModel:
    def __init__(self, llm, schema):
        self.llm = llm
        self.schema = schema

    def invoke(self, prompt):
        self.llm.prompts.append(prompt)
        self.llm.schemas.append(self.schema)
        if self.llm.error:
            raise self.llm.error
        return self.llm.outputs.pop(0)


class FakeLLM:
    """Chat model double: with_structured_output(...).invoke() pops scripted outputs."""

    def __init__(self, outputs=None, error=None):
        self.outputs = list(outputs or [])
        self.error = error
        self.prompts = []
        self.schemas = []

    def with_structured_output(self, schema):
        return FakeStructuredModel(self, schema)


class FakeExtraction:
    """Scripted replacement for the extraction service used by the graph nodes."""

    def __init__(self, replies=None, parsed=None, error=None):
        self.replies = list(replies or [])
        self.parsed = parsed
        self.error = error
        self.transcripts = []
        self.queries = []

    def converse(self, transcript):
        self.transcripts.append(transcript)
        if self.error:
            raise self.error
        return self.replies.pop(0)

    def parse_query(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.parsed


class FakeSearch:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.queries = []

    def search(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def chennai_query():
    return StructuredQuery(origin="Glasgow", destination="Chennai", dates="next week", passengers=1)


@pytest.fixture
def priced_result():
    url = f"{SEARCH_URL}?q=Flights+to+Chennai+from+Glasgow+on+2026-10-25+1+adult"
    return SearchResult(
        flights=[price_only_flight(289.5)],
        redirect_url=url,
        raw_content="Cheapest\n£289.50",
        cheapest_price=289.5,
        extraction=ExtractionStatus.PRICE_ONLY,
    )
