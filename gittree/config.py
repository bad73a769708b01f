import logging
import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from gittree.render.projection import DEFAULT_DATE_FORMAT, Theme

logger = logging.getLogger(__name__)

CONFIG_ENV = "GITTREE_CONFIG"

class Colors(BaseModel):
    graph1: str = "blue"
    graph2: str = "magenta"
    head: str = "cyan"

class GitSettings(BaseModel):
    default_range: str = ""
    extra_args: List[str] = Field(default_factory=list)

class Settings(BaseModel):
    style: Literal["auto", "light", "dark"] = "auto"
    unicode: bool = False
    no_color: bool = False
    date_format: str = DEFAULT_DATE_FORMAT
    confirm_dangerous: bool = True
    paging: Literal["auto", "always", "never"] = "auto"
    colors: Colors = Field(default_factory=Colors)
    git: GitSettings = Field(default_factory=GitSettings)

    def theme(self) -> Theme:
        return Theme(
            graph1=self.colors.graph1,
            graph2=self.colors.graph2,
            head=self.colors.head,
            no_color=self.no_color,
        )

def config_path() -> Path:
    override = os.getenv(CONFIG_ENV)
    if override:
        return Path(override)
    return Path.home() / ".config" / "gittree" / "config.yml"

def load_settings(path: Optional[Path] = None) -> Settings:
    """Read settings from YAML; a missing or broken file yields the defaults."""
    path = path or config_path()
    if not path.exists():
        return Settings()

    try:
        data = yaml.safe_load(path.read_text()) or {}
        return Settings.model_validate(data)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        logger.warning("Ignoring config file %s: %s", path, e)
        return Settings()

def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(settings.model_dump(), sort_keys=False))
    return path
