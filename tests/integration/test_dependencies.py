"""Integration tests for the FastAPI dependency providers."""
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from webhelpers.api.dependencies import (
    get_domain_matcher,
    get_serializer,
    get_settings,
    require_local_referrer,
)
from webhelpers.config import settings
from webhelpers.serialization.provider import JsonSerializationProvider, SerializationProvider
from webhelpers.utils.domain import DomainMatcher, default_matcher
from webhelpers.utils.suffix_list import LazySuffixList, SuffixList


def create_app() -> FastAPI:
    app = FastAPI()

    @app.get("/page", dependencies=[Depends(require_local_referrer)])
    async def page():
        return {"ok": True}

    @app.get("/domain")
    async def domain(url: str, matcher: DomainMatcher = Depends(get_domain_matcher)):
        result = matcher.domain_of(url)
        return {"domain": result.domain, "matched_suffix": result.matched_suffix}

    @app.get("/echo")
    async def echo(value: str, serializer: SerializationProvider = Depends(get_serializer)):
        return {"encoded": serializer.serialize({"value": value})}

    return app


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app, base_url="http://www.example.com")


class TestProviders:
    """Test provider singletons."""

    def test_settings(self):
        assert get_settings() is settings

    def test_domain_matcher(self):
        assert get_domain_matcher() is default_matcher

    def test_serializer_singleton(self):
        assert isinstance(get_serializer(), JsonSerializationProvider)
        assert get_serializer() is get_serializer()


class TestRequireLocalReferrer:
    """Test referrer guard on a route."""

    def test_no_referrer(self, client):
        response = client.get("/page")
        assert response.status_code == 200

    def test_same_host_referrer(self, client):
        response = client.get("/page", headers={"Referer": "http://www.example.com/home"})
        assert response.status_code == 200

    def test_same_domain_referrer(self, client):
        response = client.get("/page", headers={"Referer": "https://blog.example.com/post/1"})
        assert response.status_code == 200

    def test_foreign_referrer(self, client):
        response = client.get("/page", headers={"Referer": "https://evil.example.org/"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Foreign referrer"

    def test_malformed_referrer(self, client):
        response = client.get("/page", headers={"Referer": "not a url"})
        assert response.status_code == 403

    def test_overridden_matcher(self, app):
        # "example.com" is a public suffix here, so blog. and www. are separate sites
        suffixes = LazySuffixList(lambda: SuffixList.from_rules(["com", "example.com"]))
        app.dependency_overrides[get_domain_matcher] = lambda: DomainMatcher(suffixes)
        client = TestClient(app, base_url="http://www.example.com")

        response = client.get("/page", headers={"Referer": "https://blog.example.com/"})
        assert response.status_code == 403


class TestInjectedHelpers:
    """Test helpers injected into route handlers."""

    def test_domain_route(self, client):
        response = client.get("/domain", params={"url": "https://shop.example.co.uk/cart"})
        assert response.json() == {"domain": "example.co.uk", "matched_suffix": True}

    def test_serializer_route(self, client):
        response = client.get("/echo", params={"value": "x"})
        assert response.json() == {"encoded": '{"value":"x"}'}
