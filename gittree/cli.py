import argparse
import logging
import re
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from gittree.config import Settings, load_settings
from gittree.dag.models import FilterOptions
from gittree.errors import GitTreeError
from gittree.git.repository import GitRepository
from gittree.nav.controller import NavigationController
from gittree.render.projection import project

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

_RELATIVE_TIME = re.compile(r"^(\d+)([hdw])$")
_UNITS = {"h": "hours", "d": "days", "w": "weeks"}

def parse_time(value: str, now: Optional[datetime] = None) -> datetime:
    """Parse a --since/--until argument into UTC.

    Accepts RFC 3339, "YYYY-MM-DD HH:MM:SS", "YYYY-MM-DD" and relative
    spans such as "12h", "3d" or "2w".
    """
    value = value.strip()
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is not None:
            return parsed.astimezone(timezone.utc)
    except ValueError:
        pass

    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    match = _RELATIVE_TIME.match(value)
    if match:
        now = now or datetime.now(timezone.utc)
        return now - timedelta(**{_UNITS[match.group(2)]: int(match.group(1))})

    raise argparse.ArgumentTypeError(f"unable to parse time: {value}")

def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="gittree",
        description="A terminal viewer that renders an ASCII/Unicode commit graph.",
    )
    parser.add_argument("--repo", default=".", help="Repository path (default: current directory)")
    parser.add_argument("--unicode", action="store_true", help="Use Unicode lane characters")
    parser.add_argument("--no-color", action="store_true", help="Disable colors")
    parser.add_argument("--since", type=parse_time, metavar="DATE", help="Show commits more recent than DATE")
    parser.add_argument("--until", type=parse_time, metavar="DATE", help="Show commits older than DATE")
    parser.add_argument("-a", "--author", metavar="PATTERN", help="Limit commits to author (regex)")
    parser.add_argument("--path", metavar="PATH", help="Limit commits to path")
    parser.add_argument("--range", metavar="RANGE", help="Rev range (e.g. main..feature)")
    parser.add_argument("--max-commits", type=int, metavar="N", help="Cap log read (0 = no limit)")
    parser.add_argument("--pager", action="store_true", help="Use $PAGER for details")
    parser.add_argument("--yes", action="store_true", help="Skip confirmations")
    parser.add_argument("--style", choices=["light", "dark", "auto"], help="Color style")
    parser.add_argument("--print", dest="print_only", action="store_true",
                        help="Print the graph and exit instead of starting the UI")
    parser.add_argument("--debug", action="store_true", help="Write debug logs to --log-file")
    parser.add_argument("--log-file", default="gittree.log", help="Debug log file (default: gittree.log)")
    parser.add_argument("--version", action="version", version=f"gittree {__version__}")
    return parser.parse_args(argv)

def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    updates = {}
    if args.unicode:
        updates["unicode"] = True
    if args.no_color:
        updates["no_color"] = True
    if args.style:
        updates["style"] = args.style
    if args.yes:
        updates["confirm_dangerous"] = False
    return settings.model_copy(update=updates)

def filter_from_args(args: argparse.Namespace) -> FilterOptions:
    return FilterOptions(
        author=args.author,
        path=args.path,
        since=args.since,
        until=args.until,
        range=args.range,
        max_commits=args.max_commits,
    )

def print_graph(controller: NavigationController, settings: Settings) -> List[str]:
    frame = project(
        controller.store,
        controller.state,
        theme=settings.theme(),
        date_format=settings.date_format,
    )
    lines = frame.text
    if frame.mode == "graph":
        print(f"Git Graph - {len(controller.store)} commits found")
        print("=" * 80)
    for line in lines:
        print(line)
    return lines

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    if args.debug:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    settings = apply_overrides(load_settings(), args)
    filter = filter_from_args(args)

    try:
        repo = GitRepository(
            Path(args.repo),
            default_range=settings.git.default_range,
            extra_args=settings.git.extra_args,
        )
        store = repo.load(filter)
    except GitTreeError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1

    logger.debug("Loaded %d commits for filter %s", len(store), filter)
    controller = NavigationController(store, repo, unicode=settings.unicode)
    if args.print_only:
        print_graph(controller, settings)
        return 0

    # textual is only needed for the interactive UI
    from gittree.tui.app import GitTreeApp

    app = GitTreeApp(
        controller,
        settings,
        reload=lambda: repo.load(filter),
        assume_yes=args.yes,
        pager=args.pager,
        head=repo.describe_head,
    )
    try:
        app.run()
    except KeyboardInterrupt:
        return 130
    except GitTreeError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
