"""
Template resolution.

Turns the user's template name, template URL or sandbox identifier into a
single concrete Template. The decision logic is pure: when the user has
not picked a template, ``choose_template`` returns an InputRequest listing
the candidates and the resolver hands it to the session's prompter.
"""

from typing import Callable, Optional, Protocol, Union

from lkcli.bootstrap.prompts import InputRequest, Option, Prompter
from lkcli.bootstrap.session import BootstrapSession
from lkcli.bootstrap.templates import SandboxDetails, Template
from lkcli.bootstrap.token import create_access_token
from lkcli.config.projects import ProjectConfig
from lkcli.errors import (
    ConfigurationError,
    EmptySandboxError,
    ProjectNotFoundError,
    TemplateNotFoundError,
)
from lkcli.logging import get_logger

logger = get_logger(__name__)


class TemplateSource(Protocol):
    """Remote catalog consumed by the resolver."""

    def fetch_templates(self) -> list[Template]: ...

    def fetch_sandbox_details(
        self, sandbox_id: str, token: str, server_url: str
    ) -> SandboxDetails: ...


TokenFactory = Callable[[ProjectConfig], str]


def check_template_flags(template_name: str, template_url: str) -> None:
    """
    Reject invocations naming both a template and a template URL.

    Raises:
        ConfigurationError: If both are set
    """
    if template_name and template_url:
        raise ConfigurationError(
            "only one of template or template-url can be specified",
            error_code="CONFIG-ConflictingFlags",
            details={"template": template_name, "template_url": template_url},
            show_help=True,
        )


def choose_template(
    options: list[Template],
    template_name: str = "",
    template_url: str = "",
) -> Union[Template, InputRequest]:
    """
    Decide the template from the available set and the user's flags.

    Args:
        options: Available templates (catalog or sandbox children)
        template_name: Exact template name requested
        template_url: Explicit source URL

    Returns:
        The chosen Template, or an InputRequest when the user must choose

    Raises:
        TemplateNotFoundError: If template_name is not in options
    """
    if template_url:
        for template in options:
            if template.url == template_url:
                return template
        return Template.from_url(template_url)

    if template_name:
        for template in options:
            if template.name == template_name:
                return template
        raise TemplateNotFoundError(template_name)

    return InputRequest(
        field="template_url",
        kind="select",
        title="Select Template",
        options=tuple(Option(label=t.name, value=t.url) for t in options),
    )


class TemplateResolver:
    """Resolves the session's template flags to a concrete Template.

    At most one network call is made: the sandbox details when a sandbox
    is being bootstrapped without an explicit URL, otherwise the template
    catalog when no explicit URL was given.
    """

    def __init__(
        self,
        catalog: TemplateSource,
        token_factory: Optional[TokenFactory] = None,
    ) -> None:
        self.catalog = catalog
        self.token_factory = token_factory or create_access_token

    def available_templates(self, session: BootstrapSession) -> list[Template]:
        """
        Fetch the candidate templates for this session.

        Raises:
            EmptySandboxError: If the sandbox has no child templates
        """
        if session.template_url:
            return []

        if session.is_sandbox:
            if session.project is None:
                raise ProjectNotFoundError(
                    "a project is required to resolve sandbox templates",
                    error_code="RESOLVE-NoProject",
                    details={"sandbox_id": session.sandbox_id},
                )
            token = self.token_factory(session.project)
            details = self.catalog.fetch_sandbox_details(
                session.sandbox_id, token, session.server_url
            )
            if not details.child_templates:
                raise EmptySandboxError(session.sandbox_id)
            return list(details.child_templates)

        return self.catalog.fetch_templates()

    def resolve(self, session: BootstrapSession, prompter: Prompter) -> Template:
        """
        Resolve and record the session's template.

        Raises:
            ConfigurationError: If both template and template-url are set
            TemplateNotFoundError: If the named template does not exist
            EmptySandboxError: If the sandbox has no child templates
        """
        check_template_flags(session.template_name, session.template_url)

        options = self.available_templates(session)
        decision = choose_template(options, session.template_name, session.template_url)

        if isinstance(decision, InputRequest):
            chosen_url = prompter.ask(decision)
            decision = next(
                (t for t in options if t.url == chosen_url),
                Template.from_url(chosen_url),
            )

        session.template = decision
        session.template_url = decision.url
        logger.debug(f"Resolved template {decision.name} -> {decision.url}")
        return decision
