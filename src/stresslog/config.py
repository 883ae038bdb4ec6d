"""
Where the stress journal lives, and whether it is allowed to live there.

Precedence: --data, then $STRESSLOG_DATA, then
~/.config/stresslog/<profile>.json (data.json without a profile).
A journal inside a git work tree is refused unless explicitly allowed.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

ENV_VAR = "STRESSLOG_DATA"
CONFIG_DIR = Path("~/.config/stresslog")


@dataclass(frozen=True)
class DataLocation:
    path: Path
    source: str  # "flag", "env", "profile" or "default"
    profile: str | None = None

    def describe(self) -> str:
        if self.source == "flag":
            return "because you passed --data"
        if self.source == "env":
            return f"because {ENV_VAR} is set"
        if self.source == "profile":
            return f"profile {self.profile!r} under {CONFIG_DIR}"
        return f"default journal under {CONFIG_DIR}"

    @property
    def repo_root(self) -> Path | None:
        parent = self.path.parent
        return next((p for p in (parent, *parent.parents) if (p / ".git").exists()), None)


def locate(data_arg: str | None, profile: str | None, environ=os.environ) -> DataLocation:
    if data_arg:
        return DataLocation(Path(data_arg).expanduser().resolve(), "flag")
    if environ.get(ENV_VAR):
        return DataLocation(Path(environ[ENV_VAR]).expanduser().resolve(), "env")
    name = f"{profile}.json" if profile else "data.json"
    path = (CONFIG_DIR / name).expanduser().resolve()
    return DataLocation(path, "profile" if profile else "default", profile)


def require_private(location: DataLocation, allow_repo: bool) -> None:
    """Exit with status 2 when the journal would sit inside a git repo."""
    root = location.repo_root
    if root is None or allow_repo:
        return
    print(f"🚫 Stress journal {location.path} is inside the git repo {root}.", file=sys.stderr)
    print(f"   Move it under {CONFIG_DIR}, point {ENV_VAR} elsewhere, or pass --allow-repo-data-path.",
          file=sys.stderr)
    raise SystemExit(2)
