import pytest

from gittree.dag.models import CommitRecord, Reference

def log_line(graph, hash, parents="", message=None, date="2024-03-01 12:00:00 +0000", sep="|"):
    return sep.join([graph, hash, hash[:7], "Alice", "alice@example.com", date,
                     message or f"commit {hash[:4]}", parents])

H1, H2, H3 = "3" * 40, "2" * 40, "1" * 40

# What GitRepository asks git for, so graph prefixes may contain "|"
SEP = "\x1f"

@pytest.fixture
def linear_log():
    # Newest first, as git log prints it
    return "\n".join([
        log_line("*", H1, H2, "Third"),
        log_line("*", H2, H3, "Second"),
        log_line("*", H3, "", "First"),
    ])

@pytest.fixture
def merge_log():
    # M merges F into B; F and B both branch from A
    m, f, b, a = "d" * 40, "c" * 40, "b" * 40, "a" * 40
    return "\n".join([
        log_line("*  ", m, f"{b} {f}", "Merge branch 'feature'", sep=SEP),
        "|\\  ",
        log_line("| *", f, a, "Feature work", sep=SEP),
        log_line("* |", b, a, "Main work", sep=SEP),
        "|/  ",
        log_line("*  ", a, "", "Initial", sep=SEP),
    ])

class FakeCommands:
    """Records delegated commands; raises `error` when set."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def _call(self, *args):
        self.calls.append(args)
        if self.error is not None:
            raise self.error

    def commit_details(self, hash):
        self._call("details", hash)
        return CommitRecord(hash=hash, short_hash=hash[:7], files=["README.md"],
                            stats={"files_changed": 1, "insertions": 3, "deletions": 0})

    def checkout(self, hash):
        self._call("checkout", hash)

    def reset_hard(self, hash):
        self._call("reset", hash)

    def cherry_pick(self, hash):
        self._call("cherry-pick", hash)

    def revert(self, hash):
        self._call("revert", hash)

    def create_branch(self, name, hash):
        self._call("branch", name, hash)

    def create_tag(self, name, hash):
        self._call("tag", name, hash)

@pytest.fixture
def fake_commands():
    return FakeCommands()

@pytest.fixture
def main_ref():
    return [Reference("refs/heads/main", H1), Reference("refs/tags/v0.1", H3)]
