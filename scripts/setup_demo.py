import shutil
import subprocess
from pathlib import Path

def git(repo_dir, *args):
    subprocess.run(["git", "-C", str(repo_dir), *args], check=True, capture_output=True)

def commit(repo_dir, name, content, message):
    (repo_dir / name).write_text(content)
    git(repo_dir, "add", name)
    git(repo_dir, "commit", "-m", message)

def main():
    repo_dir = Path("demo_repo")
    if repo_dir.exists():
        shutil.rmtree(repo_dir)
    repo_dir.mkdir()

    git(repo_dir, "init", "-b", "main")
    git(repo_dir, "config", "user.name", "Demo User")
    git(repo_dir, "config", "user.email", "demo@example.com")

    commit(repo_dir, "README.md", "# Demo\n", "Initial commit")
    commit(repo_dir, "app.py", "print('hello')\n", "Add app")

    # Two branches off main, merged back one after the other
    git(repo_dir, "checkout", "-b", "feature/login")
    commit(repo_dir, "login.py", "def login(): pass\n", "Add login")
    commit(repo_dir, "login.py", "def login(user): pass\n", "Login takes a user")

    git(repo_dir, "checkout", "main")
    git(repo_dir, "checkout", "-b", "fix/typo")
    commit(repo_dir, "README.md", "# Demo repo\n", "Fix README title")

    git(repo_dir, "checkout", "main")
    commit(repo_dir, "app.py", "print('hello, world')\n", "Greet the world")
    git(repo_dir, "merge", "--no-ff", "-m", "Merge feature/login", "feature/login")
    git(repo_dir, "merge", "--no-ff", "-m", "Merge fix/typo", "fix/typo")
    git(repo_dir, "tag", "-a", "v0.1.0", "-m", "First release")

    print(f"Demo repository created at {repo_dir.resolve()}")
    print(f"Try: gittree --repo {repo_dir} --unicode")

if __name__ == "__main__":
    main()
