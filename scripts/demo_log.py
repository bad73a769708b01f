from pathlib import Path
from gittree.dag.models import FilterOptions
from gittree.git.repository import GitRepository
from gittree.nav.controller import Event, NavigationController
from gittree.render.projection import project

def main():
    if not Path(".git").exists():
        print("No .git directory found. Run this from the root of a git repo.")
        return

    print("Loading log...")
    repo = GitRepository(Path("."))
    store = repo.load(FilterOptions(max_commits=30))
    print(f"Loaded {len(store)} commits. HEAD is {repo.current_branch()}")

    controller = NavigationController(store, repo, unicode=True)
    for line in project(store, controller.state).text:
        print(line)

    # Walk the first-parent chain from the newest commit
    print("\nFirst-parent walk:")
    seen = set()
    while controller.selected and controller.selected.hash not in seen:
        commit = controller.selected
        seen.add(commit.hash)
        print(f"  {commit.short_hash} (lane {commit.lane}) {commit.subject}")
        controller.handle(Event.JUMP_TO_PARENT)

if __name__ == "__main__":
    main()
