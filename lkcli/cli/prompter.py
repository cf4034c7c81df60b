"""Interactive prompter rendering input requests with rich."""

from typing import Any, Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, IntPrompt, Prompt

from lkcli.bootstrap.prompts import InputRequest
from lkcli.errors import InputRequiredError


class RichPrompter:
    """Prompter for terminal sessions.

    Select requests show a numbered list, text requests loop until the
    validator accepts the answer, confirm requests ask yes/no.
    """

    def __init__(
        self, console: Optional[Console] = None, stream: Optional[TextIO] = None
    ) -> None:
        self.console = console or Console()
        self.stream = stream

    def ask(self, request: InputRequest) -> Any:
        if request.description:
            self.console.print(f"[dim]{escape(request.description)}[/dim]")

        if request.kind == "select":
            return self._select(request)
        if request.kind == "confirm":
            return Confirm.ask(
                request.title,
                default=bool(request.default),
                console=self.console,
                stream=self.stream,
            )
        return self._text(request)

    def _select(self, request: InputRequest) -> str:
        if not request.options:
            raise InputRequiredError(request.field, f"{request.title}: nothing to choose from")

        self.console.print(f"[bold]{escape(request.title)}[/bold]")
        default_index = 1
        for index, option in enumerate(request.options, start=1):
            self.console.print(f"  {index}. {escape(option.label)}")
            if option.value == request.default:
                default_index = index

        choice = IntPrompt.ask(
            "Choice",
            choices=[str(i) for i in range(1, len(request.options) + 1)],
            default=default_index,
            show_choices=False,
            console=self.console,
            stream=self.stream,
        )
        return request.options[choice - 1].value

    def _text(self, request: InputRequest) -> str:
        default = request.default if isinstance(request.default, str) else None
        while True:
            if default is None:
                answer = Prompt.ask(request.title, console=self.console, stream=self.stream)
            else:
                answer = Prompt.ask(
                    request.title, default=default, console=self.console, stream=self.stream
                )
            answer = answer.strip()
            error = request.check(answer)
            if not error:
                return answer
            self.console.print(f"[red]{escape(error)}[/red]")
