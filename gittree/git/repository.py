import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from gittree.dag.builder import build_store
from gittree.dag.models import CommitRecord, FilterOptions, Reference
from gittree.dag.parser import parse_date
from gittree.dag.store import CommitGraphStore
from gittree.errors import GitCommandError

logger = logging.getLogger(__name__)

# git's --graph prefix contains '|', so records use the unit separator.
FIELD_SEPARATOR = "\x1f"
LOG_FIELDS = ("%H", "%h", "%an", "%ae", "%ad", "%s", "%P")
FILTER_DATE_FORMAT = "%Y-%m-%d"

def log_format() -> str:
    sep = "%x1f"
    return "format:" + sep + sep.join(LOG_FIELDS)

def build_log_args(
    filter: FilterOptions,
    default_range: str = "",
    extra_args: Sequence[str] = (),
) -> List[str]:
    """Arguments for `git log` producing one graph-prefixed record per commit."""
    args = [
        "log",
        "--graph",
        "--decorate=full",
        "--date-order",
        "--date=iso",
        f"--pretty={log_format()}",
    ]
    if filter.author:
        args += ["--author", filter.author]
    if filter.since:
        args += ["--since", filter.since.strftime(FILTER_DATE_FORMAT)]
    if filter.until:
        args += ["--until", filter.until.strftime(FILTER_DATE_FORMAT)]
    if filter.max_commits:
        args += ["-n", str(filter.max_commits)]
    args += list(extra_args)

    rev_range = filter.range or default_range
    if rev_range:
        args.append(rev_range)
    if filter.path:
        args += ["--", filter.path]
    return args

class GitRepository:
    """Runs the git executable for one working tree."""

    def __init__(self, path: Path = Path("."), default_range: str = "", extra_args: Sequence[str] = ()):
        self.path = Path(path).resolve()
        self.default_range = default_range
        self.extra_args = list(extra_args)
        # Fails early when path is not inside a repository
        self._run(["rev-parse", "--git-dir"])

    def _run(self, args: List[str]) -> bytes:
        cmd = ["git", "-C", str(self.path)] + args
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True)
        except FileNotFoundError as e:
            raise GitCommandError(args, 127, f"git executable not found: {e}") from e

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace")
            raise GitCommandError(args, proc.returncode, stderr)
        return proc.stdout

    def _run_text(self, args: List[str]) -> str:
        return self._run(args).decode("utf-8", errors="replace")

    def log_output(self, filter: Optional[FilterOptions] = None) -> bytes:
        args = build_log_args(filter or FilterOptions(), self.default_range, self.extra_args)
        return self._run(args)

    def references(self) -> List[Reference]:
        """All refs under refs/, annotated tags peeled to their commit."""
        out = self._run_text(
            ["for-each-ref", "--format=%(refname)%09%(objectname)%09%(*objectname)", "refs/"]
        )
        refs = []
        for line in out.splitlines():
            fields = line.split("\t")
            if len(fields) < 2 or not fields[0]:
                continue
            target = fields[2] if len(fields) > 2 and fields[2] else fields[1]
            refs.append(Reference(name=fields[0], target=target))
        return refs

    def load(self, filter: Optional[FilterOptions] = None) -> CommitGraphStore:
        store = build_store(self.log_output(filter), self.references(), delimiter=FIELD_SEPARATOR)
        logger.info("Loaded %d commits from %s", len(store), self.path)
        return store

    def commit_details(self, hash: str) -> CommitRecord:
        """Metadata plus changed files and line counts for one commit."""
        sep = "%x1f"
        fmt = sep.join(("%H", "%h", "%an", "%ae", "%aI", "%P", "%B"))
        header = self._run_text(["show", "-s", f"--format={fmt}", hash])
        fields = header.split(FIELD_SEPARATOR)
        fields += [""] * (7 - len(fields))
        full_hash, short_hash, author, email, date_str, parents, message = fields[:7]

        numstat = self._run_text(["show", "--numstat", "--format=", hash])
        files = []
        insertions = deletions = 0
        for line in numstat.splitlines():
            cols = line.split("\t")
            if len(cols) != 3:
                continue
            added, removed, name = cols
            files.append(name)
            # Binary files report "-"
            if added.isdigit():
                insertions += int(added)
            if removed.isdigit():
                deletions += int(removed)

        return CommitRecord(
            hash=full_hash.strip(),
            short_hash=short_hash,
            author=author,
            email=email,
            date=parse_date(date_str),
            message=message.strip(),
            parents=parents.split(),
            files=files,
            stats={"files_changed": len(files), "insertions": insertions, "deletions": deletions},
        )

    def checkout(self, hash: str) -> None:
        self._run(["checkout", hash])

    def reset_hard(self, hash: str) -> None:
        self._run(["reset", "--hard", hash])

    def cherry_pick(self, hash: str) -> None:
        self._run(["cherry-pick", hash])

    def revert(self, hash: str) -> None:
        self._run(["revert", "--no-edit", hash])

    def create_branch(self, name: str, hash: str) -> None:
        self._run(["branch", name, hash])

    def create_tag(self, name: str, hash: str) -> None:
        self._run(["tag", name, hash])

    def current_branch(self) -> str:
        try:
            return self._run_text(["symbolic-ref", "-q", "HEAD"]).strip()
        except GitCommandError:
            # Detached HEAD
            return "HEAD"

    def is_dirty(self) -> bool:
        return bool(self._run_text(["status", "--porcelain", "--untracked-files=normal"]).strip())

    def describe_head(self) -> str:
        """Status line text, e.g. "On main (dirty)"."""
        branch = self.current_branch()
        if branch.startswith("refs/heads/"):
            branch = branch[len("refs/heads/"):]
        label = f"On {branch}"
        if self.is_dirty():
            label += " (dirty)"
        return label
