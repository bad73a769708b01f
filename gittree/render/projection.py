from dataclasses import dataclass, field
from typing import Dict, List, Optional

from gittree.dag.models import CommitRecord, GraphTokenKind
from gittree.dag.store import CommitGraphStore
from gittree.nav.controller import SelectionState

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M"
NODE_GLYPH = "●"

@dataclass(frozen=True)
class GlyphPalette:
    glyphs: Dict[GraphTokenKind, str]

    def glyph(self, kind: GraphTokenKind) -> str:
        return self.glyphs.get(kind, " ")

UNICODE_GLYPHS = GlyphPalette({
    GraphTokenKind.NONE: " ",
    GraphTokenKind.VERTICAL: "│",
    GraphTokenKind.HORIZONTAL: "─",
    GraphTokenKind.CORNER: "└",
    GraphTokenKind.MERGE: NODE_GLYPH,
})

ASCII_GLYPHS = GlyphPalette({
    GraphTokenKind.NONE: " ",
    GraphTokenKind.VERTICAL: "|",
    GraphTokenKind.HORIZONTAL: "-",
    GraphTokenKind.CORNER: "\\",
    GraphTokenKind.MERGE: NODE_GLYPH,
})

@dataclass(frozen=True)
class Theme:
    graph1: str = "blue"
    graph2: str = "magenta"
    head: str = "cyan"
    no_color: bool = False

    def lane_color(self, lane: int) -> Optional[str]:
        if self.no_color:
            return None
        return self.graph1 if lane % 2 == 0 else self.graph2

    @property
    def ref_color(self) -> Optional[str]:
        return None if self.no_color else self.head

@dataclass
class DisplayLine:
    text: str
    graph: str = ""
    refs: str = ""
    index: Optional[int] = None
    selected: bool = False
    graph_color: Optional[str] = None
    ref_color: Optional[str] = None

@dataclass
class Frame:
    mode: str  # "help", "empty" or "graph"
    lines: List[DisplayLine] = field(default_factory=list)
    selected_row: Optional[int] = None

    @property
    def text(self) -> List[str]:
        return [line.text for line in self.lines]

HELP_TEXT = """\
gittree - commit graph viewer

KEYBINDINGS:
  Up/k / Down/j      Move selection
  Left/h / Right/l   Jump parent / child
  PgUp / PgDn        Page
  g / G              Top / Bottom
  Enter              Commit details
  c                  Checkout selected
  x                  Reset to selected
  p                  Cherry-pick selected
  r                  Revert selected
  b                  New branch at selected
  t                  New tag at selected
  u                  Toggle Unicode lanes
  ?                  Help
  q / Esc            Quit

Press ? to close this help."""

EMPTY_TEXT = "No commits found"

def render_graph(record: CommitRecord, palette: GlyphPalette) -> str:
    if not record.graph_tokens:
        return NODE_GLYPH
    return "".join(palette.glyph(token.kind) for token in record.graph_tokens)

def format_refs(refs: List[str]) -> str:
    return f" ({', '.join(refs)})" if refs else ""

def format_commit(record: CommitRecord, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    return f"{record.short_hash} {record.author} {record.date.strftime(date_format)} {record.message}"

def project(
    store: CommitGraphStore,
    selection: SelectionState,
    theme: Theme = Theme(),
    date_format: str = DEFAULT_DATE_FORMAT,
    height: Optional[int] = None,
) -> Frame:
    """Build the lines to draw for one frame. Inputs are not modified.

    With `height`, only the rows from `selection.viewport_offset` that fit
    are produced and `selected_row` is relative to the first of them.
    """
    if selection.show_help:
        return Frame("help", [DisplayLine(text) for text in HELP_TEXT.splitlines()])
    if not store:
        return Frame("empty", [DisplayLine(EMPTY_TEXT)])

    palette = UNICODE_GLYPHS if selection.unicode else ASCII_GLYPHS
    start = selection.viewport_offset if height else 0
    stop = start + height if height else len(store)

    lines = []
    selected_row = None
    for index in range(start, min(stop, len(store))):
        record = store[index]
        graph = render_graph(record, palette)
        refs = format_refs(record.refs)
        is_selected = index == selection.selected_index
        if is_selected:
            selected_row = len(lines)
        lines.append(DisplayLine(
            text=f"{graph} {format_commit(record, date_format)}{refs}",
            graph=graph,
            refs=refs,
            index=index,
            selected=is_selected,
            graph_color=theme.lane_color(record.lane),
            ref_color=theme.ref_color if refs else None,
        ))
    return Frame("graph", lines, selected_row)

def render_details(record: CommitRecord) -> List[str]:
    lines = [
        f"Commit:  {record.hash}",
        f"Author:  {record.author} <{record.email}>",
        f"Date:    {record.date.strftime('%Y-%m-%d %H:%M:%S %Z')}",
        f"Parents: {', '.join(record.parents) if record.parents else '(root)'}",
    ]
    if record.refs:
        lines.append(f"Refs:    {', '.join(record.refs)}")
    lines.append("")
    lines.extend("    " + line for line in record.message.splitlines())
    if record.stats:
        lines.append("")
        lines.append(
            f"{record.stats.get('files_changed', len(record.files))} files changed, "
            f"{record.stats.get('insertions', 0)} insertions(+), "
            f"{record.stats.get('deletions', 0)} deletions(-)"
        )
    if record.files:
        lines.append("")
        lines.extend(record.files)
    return lines
