import logging
import os
import shlex
import subprocess
from typing import Callable, List, Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Static

from gittree.config import Settings
from gittree.dag.store import CommitGraphStore
from gittree.errors import GitTreeError
from gittree.nav.controller import DANGEROUS_EVENTS, CommandResult, Event, NavigationController
from gittree.render.projection import DisplayLine, project, render_details

logger = logging.getLogger(__name__)

NAMED_KEYS = {
    "up": Event.MOVE_UP,
    "down": Event.MOVE_DOWN,
    "left": Event.JUMP_TO_PARENT,
    "right": Event.JUMP_TO_CHILD,
    "pageup": Event.PAGE_UP,
    "pagedown": Event.PAGE_DOWN,
    "home": Event.JUMP_TOP,
    "end": Event.JUMP_BOTTOM,
    "enter": Event.OPEN_DETAILS,
    "escape": Event.REQUEST_QUIT,
}

CHAR_KEYS = {
    "q": Event.REQUEST_QUIT,
    "?": Event.TOGGLE_HELP,
    "u": Event.TOGGLE_GLYPHS,
    "k": Event.MOVE_UP,
    "j": Event.MOVE_DOWN,
    "h": Event.JUMP_TO_PARENT,
    "l": Event.JUMP_TO_CHILD,
    "g": Event.JUMP_TOP,
    "G": Event.JUMP_BOTTOM,
    "c": Event.CHECKOUT,
    "x": Event.RESET,
    "p": Event.CHERRY_PICK,
    "r": Event.REVERT,
    "b": Event.BRANCH,
    "t": Event.TAG,
}

THEMES = {"light": "textual-light", "dark": "textual-dark"}

def key_to_event(key: str, character: Optional[str]) -> Optional[Event]:
    if key in NAMED_KEYS:
        return NAMED_KEYS[key]
    if character:
        return CHAR_KEYS.get(character)
    return None

def styled_line(line: DisplayLine) -> Text:
    if not line.graph:
        return Text(line.text)
    body_end = len(line.text) - len(line.refs)
    text = Text(line.graph, style=line.graph_color or "")
    text.append(line.text[len(line.graph):body_end])
    if line.refs:
        text.append(line.refs, style=line.ref_color or "")
    if line.selected:
        text.stylize("reverse")
    return text

class DetailScreen(ModalScreen):
    """Commit details; any key closes it."""

    def __init__(self, lines: List[str]):
        super().__init__()
        self.lines = lines

    def compose(self) -> ComposeResult:
        yield Static(Text("\n".join(self.lines)), id="details")

    def on_key(self, event: events.Key) -> None:
        event.stop()
        self.dismiss()

class GitTreeApp(App):
    CSS = """
    #graph { height: 1fr; }
    #status { height: 1; dock: bottom; }
    #details { border: round $accent; padding: 0 1; }
    """

    def __init__(
        self,
        controller: NavigationController,
        settings: Optional[Settings] = None,
        reload: Optional[Callable[[], CommitGraphStore]] = None,
        assume_yes: bool = False,
        pager: bool = False,
        head: Optional[Callable[[], str]] = None,
    ):
        super().__init__()
        self.controller = controller
        self.settings = settings or Settings()
        self.reload = reload
        self.head = head
        self.head_label = ""
        self.confirm = self.settings.confirm_dangerous and not assume_yes
        self.use_pager = self.settings.paging == "always" or (pager and self.settings.paging != "never")
        self.pending: Optional[Event] = None
        self.status = ""

    def compose(self) -> ComposeResult:
        yield Static(id="graph")
        yield Static(id="status")

    def on_mount(self) -> None:
        if self.settings.style != "auto":
            self.theme = THEMES[self.settings.style]
        self.refresh_head()
        self.redraw()

    def refresh_head(self) -> None:
        if self.head is None:
            return
        try:
            self.head_label = self.head()
        except GitTreeError as e:
            logger.warning("Could not describe HEAD: %s", e)
            self.head_label = ""

    def on_resize(self, event: events.Resize) -> None:
        # One row is taken by the status line
        self.controller.resize(max(event.size.height - 1, 1))
        self.redraw()

    def redraw(self) -> None:
        frame = project(
            self.controller.store,
            self.controller.state,
            theme=self.settings.theme(),
            date_format=self.settings.date_format,
            height=self.controller.viewport_height or None,
        )
        body = Text("\n").join(styled_line(line) for line in frame.lines)
        try:
            graph = self.query_one("#graph", Static)
            status = self.query_one("#status", Static)
        except NoMatches:
            # Resize can arrive before compose
            return
        graph.update(body)
        status.update(Text(self.status or self.head_label, style="bold"))

    def on_key(self, event: events.Key) -> None:
        if self.pending is not None:
            action, self.pending = self.pending, None
            if event.character in ("y", "Y"):
                self.run_event(action)
            else:
                self.status = f"{action.value} cancelled"
            self.redraw()
            return

        action = key_to_event(event.key, event.character)
        if action is None:
            return
        logger.debug("key=%s -> %s", event.key, action.value)

        selected = self.controller.selected
        if action in DANGEROUS_EVENTS and self.confirm and selected is not None:
            self.pending = action
            self.status = f"{action.value} {selected.short_hash}? (y/N)"
        else:
            self.run_event(action)

        if self.controller.state.quit_requested:
            self.exit()
            return
        self.redraw()

    def run_event(self, action: Event) -> None:
        result = self.controller.handle(action)
        if result is not None:
            self.show_result(result)

    def show_result(self, result: CommandResult) -> None:
        if result.details is not None:
            self.status = ""
            self.show_details(render_details(result.details))
            return
        self.status = result.message
        if result.mutated and self.reload is not None:
            try:
                self.controller.replace_store(self.reload())
            except GitTreeError as e:
                logger.error("Reload after %s failed: %s", result.action.value, e)
                self.status = f"{result.message} (reload failed: {e})"
            self.refresh_head()

    def show_details(self, lines: List[str]) -> None:
        if not self.use_pager:
            self.push_screen(DetailScreen(lines))
            return
        pager = shlex.split(os.getenv("PAGER", "less"))
        try:
            with self.suspend():
                subprocess.run(pager, input="\n".join(lines) + "\n", text=True)
        except FileNotFoundError:
            logger.warning("Pager %s not found", pager[0])
            self.push_screen(DetailScreen(lines))
