import logging
from pathlib import Path
from typing import List, Optional

from gittree.api.schemas import (
    CommandResultResponse,
    CommitResponse,
    EventResponse,
    GraphTokenResponse,
    RefResponse,
    RenderLineResponse,
    RenderResponse,
    SelectionResponse,
)
from gittree.config import Settings
from gittree.dag.models import CommitRecord, FilterOptions
from gittree.dag.store import CommitGraphStore
from gittree.errors import GitTreeError
from gittree.git.repository import GitRepository
from gittree.nav.controller import CommandResult, Event, NavigationController
from gittree.render.projection import project

logger = logging.getLogger(__name__)

class ViewerService:
    """One viewing session: a loaded store plus its navigation controller."""

    def __init__(self, repo_path: Path = Path("."), settings: Optional[Settings] = None,
                 repository: Optional[GitRepository] = None):
        self.repo_path = repo_path
        self.settings = settings or Settings()
        self._repository = repository
        self.filter = FilterOptions()
        self.controller: Optional[NavigationController] = None

    @property
    def repository(self) -> GitRepository:
        if self._repository is None:
            self._repository = GitRepository(
                self.repo_path,
                default_range=self.settings.git.default_range,
                extra_args=self.settings.git.extra_args,
            )
        return self._repository

    @property
    def store(self) -> CommitGraphStore:
        self.ensure_loaded()
        return self.controller.store

    def refresh(self, filter: Optional[FilterOptions] = None) -> CommitGraphStore:
        """Reload commits. A new filter always builds a new store."""
        if filter is not None:
            self.filter = filter
        store = self.repository.load(self.filter)
        if self.controller is None:
            self.controller = NavigationController(store, self.repository, unicode=self.settings.unicode)
        else:
            self.controller.replace_store(store)
        return store

    def ensure_loaded(self):
        if self.controller is None:
            self.refresh()

    def get_commits(self, limit: int = 50, skip: int = 0) -> List[CommitResponse]:
        selection = self.store.records[skip : skip + limit]
        return [to_response(record) for record in selection]

    def get_commit(self, hash: str) -> Optional[CommitResponse]:
        record = self.store.get(hash)
        if record is None:
            return None
        details = self.repository.commit_details(record.hash)
        response = to_response(record)
        response.files = details.files
        response.stats = details.stats
        return response

    def get_refs(self) -> List[RefResponse]:
        return [RefResponse(name=ref.name, target=ref.target) for ref in self.repository.references()]

    def selection(self) -> SelectionResponse:
        self.ensure_loaded()
        state = self.controller.state
        selected = self.controller.selected
        return SelectionResponse(
            selected_index=state.selected_index,
            selected_hash=selected.hash if selected else None,
            viewport_offset=state.viewport_offset,
            show_help=state.show_help,
            unicode=state.unicode,
            quit_requested=state.quit_requested,
        )

    def handle_event(self, event: Event, name: Optional[str] = None) -> EventResponse:
        self.ensure_loaded()
        result = self.controller.handle(event, name)
        if result is not None and result.mutated:
            # The command itself already succeeded
            try:
                self.refresh()
            except GitTreeError as e:
                logger.error("Reload after %s failed: %s", result.action.value, e)
                result.message = f"{result.message} (reload failed: {e})"
        return EventResponse(
            selection=self.selection(),
            result=to_result_response(result) if result else None,
        )

    def render(self, height: Optional[int] = None) -> RenderResponse:
        self.ensure_loaded()
        if height:
            self.controller.resize(height)
        frame = project(
            self.controller.store,
            self.controller.state,
            theme=self.settings.theme(),
            date_format=self.settings.date_format,
            height=height,
        )
        return RenderResponse(
            mode=frame.mode,
            selected_row=frame.selected_row,
            lines=[
                RenderLineResponse(
                    text=line.text,
                    index=line.index,
                    selected=line.selected,
                    graph_color=line.graph_color,
                    ref_color=line.ref_color,
                )
                for line in frame.lines
            ],
        )

def to_response(record: CommitRecord) -> CommitResponse:
    return CommitResponse(
        hash=record.hash,
        short_hash=record.short_hash,
        author=record.author,
        email=record.email,
        date=record.date,
        message=record.message,
        parents=record.parents,
        refs=record.refs,
        lane=record.lane,
        graph=[
            GraphTokenResponse(kind=t.kind.value, column=t.column, is_merge_marker=t.is_merge_marker)
            for t in record.graph_tokens
        ],
        files=record.files,
        stats=record.stats,
    )

def to_result_response(result: CommandResult) -> CommandResultResponse:
    return CommandResultResponse(
        action=result.action.value,
        hash=result.hash,
        ok=result.ok,
        message=result.message,
        details=to_response(result.details) if result.details else None,
    )
