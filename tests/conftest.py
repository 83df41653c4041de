from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


class FakeMarketDataService:
    """In-memory stand-in for the Yahoo Finance client"""

    def __init__(self, quote=None, summary=None, search_results=None, error=None):
        self.quote = quote or {}
        self.summary = summary or {}
        self.search_results = search_results or []
        self.error = error
        self.calls = []

    async def get_quote(self, symbol):
        self.calls.append(("quote", symbol))
        if self.error:
            raise self.error
        return self.quote

    async def get_quote_summary(self, symbol, modules):
        self.calls.append(("quote_summary", symbol, list(modules)))
        if self.error:
            raise self.error
        return self.summary

    async def search_stocks(self, query):
        self.calls.append(("search", query))
        if self.error:
            raise self.error
        return self.search_results


class FakeCompletions:
    def __init__(self, content="Hi there!", error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message)],
            usage=SimpleNamespace(total_tokens=12),
        )


class FakeOpenAIClient:
    def __init__(self, completions):
        self.chat = SimpleNamespace(completions=completions)
        self.closed = False

    async def close(self):
        self.closed = True


class FakeImageService:
    def __init__(self, image_url="https://cdn.example.com/logo.png", error=None):
        self.image_url = image_url
        self.error = error
        self.calls = []

    async def generate(self, stock_name, is_disconnected=None):
        self.calls.append((stock_name, is_disconnected))
        if self.error:
            raise self.error
        return self.image_url


@pytest.fixture
def settings():
    return Settings(_env_file=None, LOG_LEVEL="WARNING")


@pytest.fixture
def app(settings):
    application = create_app(settings)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)
