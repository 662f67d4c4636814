from rich.text import Text
from textual.widgets import Static


class Footer(Static):
    """Single-line footer showing key hints, or a transient status message in their place."""

    def __init__(self, text: str | None = None, classes: str = "footer") -> None:
        self._hints = text if text is not None else " [orange1]q[/orange1] Quit"
        super().__init__(Text.from_markup(self._hints), classes=classes)

    @property
    def hints(self) -> str:
        return self._hints

    def set_hints(self, text: str) -> None:
        self._hints = text
        self.update(Text.from_markup(text))

    def show_status(self, message: str | None, *, error: bool = False, prefix: str = "") -> None:
        """Show ``message`` (plain text) after ``prefix`` markup, or restore the hints."""
        if not message:
            self.update(Text.from_markup(prefix + self._hints if prefix else self._hints))
            return
        text = Text.from_markup(prefix) if prefix else Text()
        text.append(f" {message}", style="bold red" if error else "bold green")
        self.update(text)
