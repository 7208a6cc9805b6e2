from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_DIR = Path.home() / ".config" / "sprintboard"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
[azure_devops]
organization = "my-organization"
project = "my-project"
team = "my-team"
# PAT can be set here or via the AZURE_DEVOPS_PAT environment variable.
pat = ""

[ui]
theme = "default"

# Filters used on first start (later runs restore the last selection).
[defaults]
# "current", "all", or an iteration path
sprint = "current"
# "all" or a state name such as "Active"
state = "all"
# "all" or "me"
assigned = "me"
# "all" or an area path
area = "all"
"""

ENV_OVERRIDES = {
    "organization": "AZURE_DEVOPS_ORG",
    "project": "AZURE_DEVOPS_PROJECT",
    "team": "AZURE_DEVOPS_TEAM",
    "pat": "AZURE_DEVOPS_PAT",
}


class ConfigError(Exception):
    """Raised when the configuration is missing required values or unreadable."""


@dataclass
class FilterDefaults:
    sprint: str = "current"
    state: str = "all"
    assigned: str = "me"
    area: str = "all"


@dataclass
class Config:
    organization: str
    project: str
    team: str
    pat: str
    theme: str = "default"
    defaults: FilterDefaults | None = None

    @property
    def organization_url(self) -> str:
        return f"https://dev.azure.com/{self.organization}"

    @property
    def web_url(self) -> str:
        return f"{self.organization_url}/{self.project}"

    def work_item_web_url(self, item_id: int) -> str:
        return f"{self.web_url}/_workitems/edit/{item_id}"

    @classmethod
    def from_dict(cls, data: dict[str, Any], env: dict[str, str] | None = None) -> Config:
        env = os.environ if env is None else env
        section = dict(data.get("azure_devops", {}))
        for key, var in ENV_OVERRIDES.items():
            if env.get(var):
                section[key] = env[var]

        for key, var in ENV_OVERRIDES.items():
            if not section.get(key):
                raise ConfigError(
                    f"{key} is required (set [azure_devops].{key} in "
                    f"{CONFIG_FILE} or {var})"
                )

        ui = data.get("ui", {})
        defaults = data.get("defaults", {})
        return cls(
            organization=section["organization"],
            project=section["project"],
            team=section["team"],
            pat=section["pat"],
            theme=ui.get("theme", "default"),
            defaults=FilterDefaults(
                sprint=defaults.get("sprint", "current"),
                state=defaults.get("state", "all"),
                assigned=defaults.get("assigned", "me"),
                area=defaults.get("area", "all"),
            ),
        )

    @classmethod
    def load(cls) -> Config:
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE, "rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Error reading {CONFIG_FILE}: {e}") from e
        else:
            data = {}
        return cls.from_dict(data)


def write_private(path: Path, text: str) -> None:
    """Write ``text`` to a file that is owner-only (0600) from the moment it exists."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    # os.open leaves the mode of an existing file alone
    os.fchmod(fd, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(text)


def get_config() -> Config:
    return Config.load()


def ensure_config() -> Path:
    """Create default config file if it doesn't exist. Returns config path."""
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        write_private(CONFIG_FILE, DEFAULT_CONFIG)
    return CONFIG_FILE
