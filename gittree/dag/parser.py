import logging
import string
from datetime import datetime, timezone
from typing import List, Optional, Union

from gittree.dag.models import CommitRecord, GraphToken, GraphTokenKind
from gittree.errors import LogDecodeError

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = "|"
MIN_FIELDS = 7
FALLBACK_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"

_GLYPH_KINDS = {
    " ": GraphTokenKind.NONE,
    "|": GraphTokenKind.VERTICAL,
    "*": GraphTokenKind.VERTICAL,
    "-": GraphTokenKind.HORIZONTAL,
    "_": GraphTokenKind.HORIZONTAL,
    "/": GraphTokenKind.CORNER,
    "\\": GraphTokenKind.CORNER,
    "+": GraphTokenKind.MERGE,
}

# ASCII whitespace only; str.strip() would also eat the \x1f field separator.
_TRIM_CHARS = string.whitespace

def classify_glyph(ch: str) -> GraphTokenKind:
    """Map one graph character to its kind. Unknown characters are NONE."""
    return _GLYPH_KINDS.get(ch, GraphTokenKind.NONE)

def parse_graph_prefix(prefix: str) -> List[GraphToken]:
    """Decode a graph prefix into one token per character column."""
    return [
        GraphToken(kind=classify_glyph(ch), column=i, is_merge_marker=(ch == "+"))
        for i, ch in enumerate(prefix)
    ]

def parse_date(value: str, now: Optional[datetime] = None) -> datetime:
    """Parse a commit date into UTC.

    Tries ISO-8601 with an explicit offset, then git's `--date=iso` layout.
    Anything else becomes the current time instead of failing the parse.
    """
    value = value.strip()
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is not None:
            return parsed.astimezone(timezone.utc)
    except ValueError:
        pass

    try:
        return datetime.strptime(value, FALLBACK_DATE_FORMAT).astimezone(timezone.utc)
    except ValueError:
        pass

    logger.debug("Unparseable commit date %r, using current time", value)
    return now if now is not None else datetime.now(timezone.utc)

def parse_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> Optional[CommitRecord]:
    """Parse one log line. Returns None for blank or short lines."""
    line = line.strip(_TRIM_CHARS)
    if not line:
        return None

    parts = line.split(delimiter)
    if len(parts) < MIN_FIELDS:
        # Graph continuation rows ("|\", "| |") land here
        logger.debug("Skipping log line with %d fields: %r", len(parts), line)
        return None

    graph_prefix, hash_, short_hash, author, email, date_str, message = parts[:MIN_FIELDS]
    parents_str = parts[MIN_FIELDS] if len(parts) > MIN_FIELDS else ""

    return CommitRecord(
        hash=hash_,
        short_hash=short_hash,
        author=author,
        email=email,
        date=parse_date(date_str),
        message=message,
        parents=parents_str.split(),
        graph_tokens=parse_graph_prefix(graph_prefix),
    )

def parse_log(output: Union[str, bytes], delimiter: str = DEFAULT_DELIMITER) -> List[CommitRecord]:
    """Parse the full output of `git log --graph` into commit records.

    Malformed lines are dropped one at a time; only output that is not text
    at all fails the whole batch.
    """
    if isinstance(output, bytes):
        try:
            output = output.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LogDecodeError(f"git log output is not valid UTF-8: {e}") from e

    records = []
    # Split on \n only; subjects may carry \r or other Unicode line breaks
    for line in output.split("\n"):
        record = parse_line(line, delimiter)
        if record is not None:
            records.append(record)
    return records
