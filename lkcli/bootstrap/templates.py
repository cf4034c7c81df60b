"""
Template catalog client.

Fetches the public template index and resolves sandbox identifiers to
their child templates through the cloud API. Both calls are plain
synchronous httpx requests; failures surface as CatalogError (transport
or server problems) or ResolutionError (unknown sandbox).
"""

from typing import Any, Optional
from urllib.parse import urlparse

import httpx
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lkcli.errors import CatalogError, ResolutionError
from lkcli.logging import get_logger

logger = get_logger(__name__)


class Template(BaseModel):
    """A cloneable application skeleton."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str
    url: str
    desc: str = ""
    docs: str = ""
    image: str = ""
    tags: tuple[str, ...] = ()

    @classmethod
    def from_url(cls, url: str) -> "Template":
        """Build a template from a bare source URL, naming it after the repository."""
        path = urlparse(url).path or url
        name = path.rstrip("/").rsplit("/", 1)[-1]
        if name.endswith(".git"):
            name = name[: -len(".git")]
        return cls(name=name or url, url=url)


class SandboxDetails(BaseModel):
    """Sandbox description returned by the cloud API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = ""
    template: Optional[Template] = None
    child_templates: list[Template] = Field(default_factory=list, alias="childTemplates")


def parse_template_index(raw: Any) -> list[Template]:
    """
    Parse the template index document.

    The index is either a list of template entries or a mapping with a
    ``templates`` list. Entries without a name or URL are skipped.

    Raises:
        CatalogError: If the document has an unexpected shape
    """
    entries = raw.get("templates") if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise CatalogError(
            "template index is not a list of templates",
            error_code="CATALOG-InvalidIndex",
        )

    templates = []
    for entry in entries:
        try:
            templates.append(Template.model_validate(entry))
        except ValidationError:
            logger.debug(f"Skipping malformed template entry: {entry!r}")
    return templates


class TemplateCatalog:
    """HTTP client for the template index and sandbox details.

    Usage:
        catalog = TemplateCatalog(index_url)
        templates = catalog.fetch_templates()

    Attributes:
        index_url: URL of the YAML template index
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        index_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the catalog client.

        Args:
            index_url: URL of the YAML template index
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.index_url = index_url
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout, transport=self._transport, follow_redirects=True
        )

    def _get(
        self,
        url: str,
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            with self._client() as client:
                response = client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise CatalogError(
                f"request to {url} failed: {e}",
                error_code="CATALOG-RequestFailed",
                details={"url": url},
            ) from e
        logger.debug(f"GET {url} -> {response.status_code}")
        return response

    def fetch_templates(self) -> list[Template]:
        """
        Fetch the list of available templates.

        Returns:
            Templates in index order

        Raises:
            CatalogError: On transport failure, error status or malformed index
        """
        response = self._get(self.index_url)
        if response.status_code != 200:
            raise CatalogError(
                f"failed to fetch templates: HTTP {response.status_code}",
                error_code="CATALOG-HTTPError",
                details={"url": self.index_url, "status_code": response.status_code},
            )

        try:
            raw = yaml.safe_load(response.text)
        except yaml.YAMLError as e:
            raise CatalogError(
                f"template index is not valid YAML: {e}",
                error_code="CATALOG-InvalidIndex",
                details={"url": self.index_url},
            ) from e

        templates = parse_template_index(raw)
        logger.debug(f"Fetched {len(templates)} template(s)")
        return templates

    def fetch_sandbox_details(
        self, sandbox_id: str, token: str, server_url: str
    ) -> SandboxDetails:
        """
        Resolve a sandbox identifier to its details and child templates.

        Args:
            sandbox_id: Sandbox identifier
            token: Bearer token authorizing the request
            server_url: Cloud API base URL

        Returns:
            The sandbox details

        Raises:
            ResolutionError: If the sandbox does not exist
            CatalogError: On transport failure, error status or malformed body
        """
        url = f"{server_url.rstrip('/')}/api/sandbox/details"
        response = self._get(
            url,
            params={"id": sandbox_id},
            headers={"Authorization": f"Bearer {token}"},
        )

        if response.status_code == 404:
            raise ResolutionError(
                f"sandbox not found: {sandbox_id}",
                error_code="RESOLVE-SandboxNotFound",
                details={"sandbox_id": sandbox_id},
            )
        if response.status_code != 200:
            suggestion = None
            if response.status_code in (401, 403):
                suggestion = "Check that the selected project owns this sandbox"
            raise CatalogError(
                f"failed to fetch sandbox details: HTTP {response.status_code}",
                error_code="CATALOG-HTTPError",
                details={"sandbox_id": sandbox_id, "status_code": response.status_code},
                suggestion=suggestion,
            )

        try:
            details = SandboxDetails.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CatalogError(
                f"invalid sandbox details for {sandbox_id}",
                error_code="CATALOG-InvalidResponse",
                details={"sandbox_id": sandbox_id},
            ) from e

        logger.debug(
            f"Sandbox {sandbox_id} has {len(details.child_templates)} child template(s)"
        )
        return details
