class GitTreeError(Exception):
    """Base class for errors reported by gittree."""

class LogDecodeError(GitTreeError, ValueError):
    """Raised when `git log` output cannot be decoded as text."""

class GitCommandError(GitTreeError):
    """A git invocation exited with a non-zero status."""

    def __init__(self, command, returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        name = self.command[0] if self.command else "command"
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"git {name} failed: {detail}")
