"""
Input requests for the bootstrap flow.

Decision functions in the bootstrap core never prompt directly. When a
value is missing they produce an InputRequest describing what is needed
(field, kind, options, default, validation) and hand it to a Prompter.
The CLI supplies an interactive prompter; tests and non-interactive
invocations supply a CannedPrompter with prepared answers.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping, Optional, Protocol, Union

from lkcli.errors import InputRequiredError

InputKind = Literal["select", "text", "confirm"]

# Returns an error message for invalid input, None when the value is acceptable
Validator = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class Option:
    """A selectable option: label shown to the user, value returned."""

    label: str
    value: str


@dataclass(frozen=True)
class InputRequest:
    """Description of a value the flow cannot decide on its own.

    Attributes:
        field: Stable identifier of the requested value (e.g., "template_url")
        kind: How the value is collected (select, text or confirm)
        title: Short question shown to the user
        description: Optional longer explanation
        options: Choices for select requests
        default: Prefilled value; text and confirm requests fall back to it
        validate: Optional validator for text input
    """

    field: str
    kind: InputKind
    title: str
    description: str = ""
    options: tuple[Option, ...] = ()
    default: Optional[Union[str, bool]] = None
    validate: Optional[Validator] = field(default=None, compare=False)

    def option_values(self) -> list[str]:
        return [option.value for option in self.options]

    def check(self, value: str) -> Optional[str]:
        """Validate a text answer, returning an error message or None."""
        if self.kind == "select" and value not in self.option_values():
            return f"not one of the available options: {value}"
        if self.validate is not None:
            return self.validate(value)
        return None


class Prompter(Protocol):
    """Presentation layer that satisfies input requests."""

    def ask(self, request: InputRequest) -> Any:
        """Return the answer for a request (str for select/text, bool for confirm)."""
        ...


class CannedPrompter:
    """Prompter answering from a prepared mapping of field -> value.

    Requests without a prepared answer fall back to their default; when
    there is no default either, InputRequiredError is raised naming the
    field. With an empty mapping this is the non-interactive prompter.

    Attributes:
        asked: Requests received, in order
    """

    def __init__(self, answers: Optional[Mapping[str, Any]] = None) -> None:
        self._answers = dict(answers or {})
        self.asked: list[InputRequest] = []

    def ask(self, request: InputRequest) -> Any:
        self.asked.append(request)

        if request.field in self._answers:
            value = self._answers[request.field]
        elif request.default is not None:
            value = request.default
        else:
            raise InputRequiredError(
                request.field, request.title, request.option_values()
            )

        if request.kind != "confirm":
            error = request.check(str(value))
            if error:
                raise InputRequiredError(
                    request.field, f"{request.title}: {error}", request.option_values()
                )
        return value
