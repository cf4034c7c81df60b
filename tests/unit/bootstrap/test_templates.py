"""Tests for the template catalog client."""

import httpx
import pytest

from lkcli.bootstrap.templates import (
    Template,
    TemplateCatalog,
    parse_template_index,
)
from lkcli.errors import CatalogError, ResolutionError

INDEX_URL = "https://index.example.test/templates.yaml"
SERVER_URL = "https://cloud.example.test"

INDEX_YAML = """\
templates:
  - name: voice-agent
    url: https://github.com/livekit-examples/voice-agent
    desc: A voice assistant
    tags: [python, agents]
  - name: meet
    url: https://github.com/livekit-examples/meet
  - desc: entry without name or url
"""


def _catalog(handler):
    return TemplateCatalog(INDEX_URL, transport=httpx.MockTransport(handler))


class TestTemplateModel:
    """Tests for the Template model."""

    def test_from_url_names_template_after_repository(self):
        template = Template.from_url("https://github.com/acme/my-template.git")
        assert template.name == "my-template"
        assert template.url == "https://github.com/acme/my-template.git"

    def test_from_url_trailing_slash(self):
        assert Template.from_url("https://github.com/acme/thing/").name == "thing"

    def test_template_is_immutable(self):
        template = Template(name="a", url="https://x/a")
        with pytest.raises(Exception):
            template.name = "b"


class TestParseTemplateIndex:
    """Tests for index parsing."""

    def test_accepts_list_document(self):
        templates = parse_template_index([{"name": "a", "url": "https://x/a"}])
        assert [t.name for t in templates] == ["a"]

    def test_skips_malformed_entries(self):
        templates = parse_template_index(
            {"templates": [{"name": "a", "url": "https://x/a"}, {"desc": "broken"}]}
        )
        assert len(templates) == 1

    def test_rejects_unexpected_shape(self):
        with pytest.raises(CatalogError):
            parse_template_index("not a list")


class TestFetchTemplates:
    """Tests for TemplateCatalog.fetch_templates."""

    def test_fetches_and_parses_index(self):
        def handler(request):
            assert str(request.url) == INDEX_URL
            return httpx.Response(200, text=INDEX_YAML)

        templates = _catalog(handler).fetch_templates()

        assert [t.name for t in templates] == ["voice-agent", "meet"]
        assert templates[0].tags == ("python", "agents")
        assert templates[0].desc == "A voice assistant"

    def test_http_error_status(self):
        with pytest.raises(CatalogError) as exc_info:
            _catalog(lambda request: httpx.Response(503)).fetch_templates()
        assert exc_info.value.details["status_code"] == 503

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CatalogError) as exc_info:
            _catalog(handler).fetch_templates()
        assert exc_info.value.error_code == "CATALOG-RequestFailed"

    def test_invalid_yaml(self):
        with pytest.raises(CatalogError):
            _catalog(lambda request: httpx.Response(200, text="a: [b")).fetch_templates()


class TestFetchSandboxDetails:
    """Tests for TemplateCatalog.fetch_sandbox_details."""

    def test_sends_token_and_sandbox_id(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["id"] = request.url.params["id"]
            seen["path"] = request.url.path
            return httpx.Response(
                200,
                json={
                    "name": "abc123",
                    "childTemplates": [
                        {"name": "frontend", "url": "https://x/frontend"},
                        {"name": "agent", "url": "https://x/agent"},
                    ],
                },
            )

        details = _catalog(handler).fetch_sandbox_details("abc123", "tok", SERVER_URL)

        assert seen == {"auth": "Bearer tok", "id": "abc123", "path": "/api/sandbox/details"}
        assert [t.name for t in details.child_templates] == ["frontend", "agent"]

    def test_missing_children_is_empty_list(self):
        details = _catalog(
            lambda request: httpx.Response(200, json={"name": "abc123"})
        ).fetch_sandbox_details("abc123", "tok", SERVER_URL)
        assert details.child_templates == []

    def test_unknown_sandbox(self):
        with pytest.raises(ResolutionError) as exc_info:
            _catalog(lambda request: httpx.Response(404)).fetch_sandbox_details(
                "nope", "tok", SERVER_URL
            )
        assert exc_info.value.details["sandbox_id"] == "nope"

    def test_unauthorized_has_suggestion(self):
        with pytest.raises(CatalogError) as exc_info:
            _catalog(lambda request: httpx.Response(401)).fetch_sandbox_details(
                "abc123", "tok", SERVER_URL
            )
        assert exc_info.value.suggestion

    def test_invalid_json(self):
        with pytest.raises(CatalogError):
            _catalog(
                lambda request: httpx.Response(200, text="<html>")
            ).fetch_sandbox_details("abc123", "tok", SERVER_URL)
