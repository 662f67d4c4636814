"""Base screen shared by every Delta History screen.

Standardizes the composition pattern: Header + main content + Footer.
"""

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Header

from delta_history.utils.error_handling import log_ui_error
from delta_history.widgets.footer import Footer


class BaseScreen(Screen):
    """Base class for all Delta History screens.

    Subclasses implement compose_main_content() and get_footer_text(); the
    header and footer are added here.
    """

    def __init__(self, page_name: str):
        super().__init__()
        self.page_name = page_name
        self.title = f"Delta History — {page_name}"

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield from self.compose_main_content()
        yield Footer(text=self.get_footer_text())

    def compose_main_content(self) -> ComposeResult:
        raise NotImplementedError("Subclasses must implement compose_main_content()")

    def get_footer_text(self) -> str:
        raise NotImplementedError("Subclasses must implement get_footer_text()")

    @property
    def footer(self) -> Footer:
        return self.query_one(Footer)

    def set_page_name(self, page_name: str) -> None:
        self.page_name = page_name
        self.title = f"Delta History — {page_name}"

    def safe_set_focus(self, widget) -> None:
        try:
            self.set_focus(widget)
        except (AttributeError, RuntimeError) as e:
            log_ui_error("screen", "setting focus", e)

    def action_go_back(self):
        try:
            self.app.pop_screen()
        except (AttributeError, RuntimeError) as e:
            log_ui_error("screen", "going back", e)

    async def on_mount(self):
        self.title = f"Delta History — {self.page_name}"
