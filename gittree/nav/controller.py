import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from gittree.dag.models import CommitRecord
from gittree.dag.store import CommitGraphStore
from gittree.errors import GitCommandError

logger = logging.getLogger(__name__)

PAGE_SIZE = 10

class Event(str, Enum):
    MOVE_DOWN = "move-down"
    MOVE_UP = "move-up"
    PAGE_DOWN = "page-down"
    PAGE_UP = "page-up"
    JUMP_TOP = "jump-top"
    JUMP_BOTTOM = "jump-bottom"
    JUMP_TO_PARENT = "jump-to-parent"
    JUMP_TO_CHILD = "jump-to-child"
    TOGGLE_HELP = "toggle-help"
    TOGGLE_GLYPHS = "toggle-glyphs"
    REQUEST_QUIT = "request-quit"
    OPEN_DETAILS = "open-details"
    CHECKOUT = "checkout"
    RESET = "reset"
    CHERRY_PICK = "cherry-pick"
    REVERT = "revert"
    BRANCH = "branch"
    TAG = "tag"

COMMAND_EVENTS = frozenset({
    Event.OPEN_DETAILS,
    Event.CHECKOUT,
    Event.RESET,
    Event.CHERRY_PICK,
    Event.REVERT,
    Event.BRANCH,
    Event.TAG,
})

# Front ends ask before running these when confirmations are on
DANGEROUS_EVENTS = frozenset({Event.CHECKOUT, Event.RESET})

# Commands that change the repository and call for a reload
MUTATING_EVENTS = COMMAND_EVENTS - {Event.OPEN_DETAILS}

class CommitCommands(Protocol):
    def commit_details(self, hash: str) -> CommitRecord: ...
    def checkout(self, hash: str) -> None: ...
    def reset_hard(self, hash: str) -> None: ...
    def cherry_pick(self, hash: str) -> None: ...
    def revert(self, hash: str) -> None: ...
    def create_branch(self, name: str, hash: str) -> None: ...
    def create_tag(self, name: str, hash: str) -> None: ...

@dataclass
class SelectionState:
    selected_index: Optional[int] = None
    viewport_offset: int = 0
    show_help: bool = False
    unicode: bool = False
    quit_requested: bool = False

@dataclass
class CommandResult:
    action: Event
    hash: str
    ok: bool
    message: str = ""
    details: Optional[CommitRecord] = None

    @property
    def mutated(self) -> bool:
        return self.ok and self.action in MUTATING_EVENTS

class NavigationController:
    """Selection cursor and key-event state machine over a commit store.

    One event is handled to completion per call. Commands are delegated to
    `commands` synchronously and reported back as a `CommandResult`; the
    controller never exits the process itself.
    """

    def __init__(self, store: CommitGraphStore, commands: Optional[CommitCommands] = None,
                 unicode: bool = False):
        self.store = store
        self.commands = commands
        self.state = SelectionState(selected_index=0 if store else None, unicode=unicode)
        self.viewport_height = 0

    @property
    def selected(self) -> Optional[CommitRecord]:
        index = self.state.selected_index
        return self.store[index] if index is not None else None

    def handle(self, event: Event, name: Optional[str] = None) -> Optional[CommandResult]:
        event = Event(event)
        logger.debug("Handling %s", event.value)

        if event is Event.TOGGLE_HELP:
            self.state.show_help = not self.state.show_help
        elif event is Event.TOGGLE_GLYPHS:
            self.state.unicode = not self.state.unicode
        elif event is Event.REQUEST_QUIT:
            self.state.quit_requested = True
        elif event in COMMAND_EVENTS:
            return self._dispatch(event, name)
        else:
            self._move(event)
        return None

    def _move(self, event: Event) -> None:
        index = self.state.selected_index
        if index is None:
            return
        last = len(self.store) - 1

        if event is Event.MOVE_DOWN:
            index = min(index + 1, last)
        elif event is Event.MOVE_UP:
            index = max(index - 1, 0)
        elif event is Event.PAGE_DOWN:
            index = min(index + PAGE_SIZE, last)
        elif event is Event.PAGE_UP:
            index = max(index - PAGE_SIZE, 0)
        elif event is Event.JUMP_TOP:
            index = 0
        elif event is Event.JUMP_BOTTOM:
            index = last
        elif event is Event.JUMP_TO_PARENT:
            parent = self.store.parent_index(index)
            if parent is not None:
                index = parent
        elif event is Event.JUMP_TO_CHILD:
            child = self.store.first_child_index(self.store[index].hash)
            if child is not None:
                index = child

        self.state.selected_index = index
        self._scroll_into_view()

    def _dispatch(self, event: Event, name: Optional[str]) -> Optional[CommandResult]:
        commit = self.selected
        if commit is None:
            return None
        if self.commands is None:
            return CommandResult(event, commit.hash, False, "no repository attached")

        try:
            if event is Event.OPEN_DETAILS:
                details = self.commands.commit_details(commit.hash)
                return CommandResult(event, commit.hash, True, details=details)
            if event is Event.CHECKOUT:
                self.commands.checkout(commit.hash)
                message = f"Checked out {commit.short_hash}"
            elif event is Event.RESET:
                self.commands.reset_hard(commit.hash)
                message = f"Reset to {commit.short_hash}"
            elif event is Event.CHERRY_PICK:
                self.commands.cherry_pick(commit.hash)
                message = f"Cherry-picked {commit.short_hash}"
            elif event is Event.REVERT:
                self.commands.revert(commit.hash)
                message = f"Reverted {commit.short_hash}"
            elif event is Event.BRANCH:
                name = name or f"branch-{commit.short_hash}"
                self.commands.create_branch(name, commit.hash)
                message = f"Created branch {name} at {commit.short_hash}"
            else:
                name = name or f"tag-{commit.short_hash}"
                self.commands.create_tag(name, commit.hash)
                message = f"Created tag {name} at {commit.short_hash}"
        except GitCommandError as e:
            logger.warning("%s on %s failed: %s", event.value, commit.short_hash, e)
            return CommandResult(event, commit.hash, False, str(e))

        logger.info(message)
        return CommandResult(event, commit.hash, True, message)

    def resize(self, height: int) -> None:
        self.viewport_height = max(height, 0)
        self._scroll_into_view()

    def _scroll_into_view(self) -> None:
        index = self.state.selected_index
        height = self.viewport_height
        if index is None or height <= 0:
            self.state.viewport_offset = 0
            return
        offset = self.state.viewport_offset
        if index < offset:
            offset = index
        elif index >= offset + height:
            offset = index - height + 1
        self.state.viewport_offset = max(0, min(offset, max(len(self.store) - height, 0)))

    def replace_store(self, store: CommitGraphStore) -> None:
        """Swap in a reloaded store, keeping the same commit selected if present."""
        current = self.selected
        self.store = store
        if not store:
            self.state.selected_index = None
        elif current is not None and store.index_of(current.hash) is not None:
            self.state.selected_index = store.index_of(current.hash)
        else:
            previous = self.state.selected_index or 0
            self.state.selected_index = min(previous, len(store) - 1)
        self._scroll_into_view()
