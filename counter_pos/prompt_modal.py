"""Single-line text entry modal screen."""

from __future__ import annotations

from typing import Callable

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

Validator = Callable[[str], str | None]


class PromptModal(ModalScreen[str | None]):
    """Prompt for one value; dismisses with the text, or ``None`` on cancel.

    ``validate`` returns an error message to keep the dialog open.
    """

    CSS = """
    PromptModal {
        align: center middle;
        background: $background 60%;
    }

    #prompt-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #prompt-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #prompt-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #prompt-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #prompt-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        title: str,
        prompt: str = "",
        initial: str = "",
        secret: bool = False,
        max_length: int = 60,
        validate: Validator | None = None,
    ) -> None:
        super().__init__()
        self.title_text = title
        self.prompt_text = prompt
        self.value = initial
        self.secret = secret
        self.max_length = max_length
        self.validator = validate
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="prompt-dialog"):
            yield Static(self.title_text, id="prompt-title")
            if self.prompt_text:
                yield Static(self.prompt_text)
            yield Static(id="prompt-value")
            yield Static(id="prompt-error")
            yield Static("Enter confirm. Backspace delete. Esc/Ctrl+C cancel.", id="prompt-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            if len(self.value) < self.max_length:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        value = self.value if self.secret else self.value.strip()
        if self.validator is not None:
            problem = self.validator(value)
            if problem:
                self.error = problem
                self._refresh_content()
                return
        self.dismiss(value)

    def _refresh_content(self) -> None:
        shown = "*" * len(self.value) if self.secret else self.value
        self.query_one("#prompt-value", Static).update(f"{shown}|")
        self.query_one("#prompt-error", Static).update(self.error or "")
