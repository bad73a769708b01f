from datetime import datetime, timezone

from gittree.dag.builder import build_store
from gittree.dag.models import CommitRecord
from gittree.dag.parser import parse_graph_prefix
from gittree.dag.store import CommitGraphStore
from gittree.nav.controller import Event, NavigationController, SelectionState
from gittree.render.projection import (
    ASCII_GLYPHS,
    UNICODE_GLYPHS,
    Theme,
    project,
    render_details,
    render_graph,
)

from conftest import H1, SEP

def record(graph="*", refs=None, lane=0):
    return CommitRecord(
        hash=H1,
        short_hash="3333333",
        author="Alice",
        date=datetime(2024, 3, 1, 12, 5, tzinfo=timezone.utc),
        message="Add parser",
        refs=refs or [],
        lane=lane,
        graph_tokens=parse_graph_prefix(graph),
    )

def test_glyph_rendering_ascii_and_unicode():
    r = record(graph="|*-/\\+ x")
    assert render_graph(r, ASCII_GLYPHS) == "||-\\\\●  "
    assert render_graph(r, UNICODE_GLYPHS) == "││─└└●  "

def test_empty_graph_renders_node():
    assert render_graph(record(graph=""), ASCII_GLYPHS) == "●"

def test_row_format_with_refs():
    store = CommitGraphStore([record(refs=["refs/heads/main", "refs/tags/v1"])])
    frame = project(store, SelectionState(selected_index=0))
    assert frame.mode == "graph"
    assert frame.text == ["| 3333333 Alice 2024-03-01 12:05 Add parser (refs/heads/main, refs/tags/v1)"]
    assert frame.selected_row == 0
    assert frame.lines[0].selected

def test_row_without_refs_has_no_annotation():
    frame = project(CommitGraphStore([record()]), SelectionState(selected_index=0))
    assert frame.text[0].endswith("Add parser")

def test_custom_date_format():
    frame = project(CommitGraphStore([record()]), SelectionState(selected_index=0), date_format="%d.%m.%Y")
    assert "01.03.2024" in frame.text[0]

def test_help_and_empty_frames():
    store = CommitGraphStore([record()])
    help_frame = project(store, SelectionState(selected_index=0, show_help=True))
    assert help_frame.mode == "help"
    assert help_frame.selected_row is None
    assert any("Jump parent / child" in line for line in help_frame.text)

    empty = project(CommitGraphStore(), SelectionState())
    assert empty.mode == "empty"
    assert empty.text == ["No commits found"]

def test_help_wins_over_empty():
    frame = project(CommitGraphStore(), SelectionState(show_help=True))
    assert frame.mode == "help"

def test_lane_colors_alternate():
    theme = Theme(graph1="blue", graph2="magenta", head="cyan")
    store = CommitGraphStore([record(lane=0, refs=["refs/heads/main"]), record(lane=1)])
    frame = project(store, SelectionState(selected_index=1), theme=theme)
    assert [line.graph_color for line in frame.lines] == ["blue", "magenta"]
    assert frame.lines[0].ref_color == "cyan"
    assert frame.lines[1].ref_color is None

def test_no_color_theme():
    frame = project(CommitGraphStore([record()]), SelectionState(selected_index=0), theme=Theme(no_color=True))
    assert frame.lines[0].graph_color is None

def test_projection_does_not_mutate(merge_log):
    store = build_store(merge_log, delimiter=SEP)
    state = SelectionState(selected_index=2, unicode=True)
    before = [(r.lane, list(r.refs)) for r in store]
    project(store, state)
    assert state == SelectionState(selected_index=2, unicode=True)
    assert [(r.lane, list(r.refs)) for r in store] == before

def test_viewport_window():
    records = [record() for _ in range(20)]
    controller = NavigationController(CommitGraphStore(records))
    controller.resize(4)
    for _ in range(6):
        controller.handle(Event.MOVE_DOWN)
    frame = project(controller.store, controller.state, height=4)
    assert len(frame.lines) == 4
    assert [line.index for line in frame.lines] == [3, 4, 5, 6]
    assert frame.selected_row == 3

def test_toggle_glyphs_changes_only_rendering(merge_log):
    controller = NavigationController(build_store(merge_log, delimiter=SEP))
    ascii_frame = project(controller.store, controller.state)
    lanes = [r.lane for r in controller.store]
    controller.handle(Event.TOGGLE_GLYPHS)
    unicode_frame = project(controller.store, controller.state)
    assert ascii_frame.lines[1].graph == "| |"
    assert unicode_frame.lines[1].graph == "│ │"
    assert [r.lane for r in controller.store] == lanes

def test_render_details():
    r = record(refs=["refs/heads/main"])
    r.email = "alice@example.com"
    r.parents = ["2" * 40]
    r.files = ["a.py", "b.py"]
    r.stats = {"files_changed": 2, "insertions": 10, "deletions": 4}
    lines = render_details(r)
    assert lines[0] == f"Commit:  {H1}"
    assert "Author:  Alice <alice@example.com>" in lines
    assert "Refs:    refs/heads/main" in lines
    assert "2 files changed, 10 insertions(+), 4 deletions(-)" in lines
    assert lines[-2:] == ["a.py", "b.py"]
