from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from sprintboard.config import CONFIG_DIR, write_private

logger = logging.getLogger(__name__)

STATE_FILE = CONFIG_DIR / "state.json"


@dataclass(frozen=True)
class SavedFilters:
    """Last-used filter selections, restored at startup."""

    sprint: str = "current"
    state: str = "all"
    assigned: str = "me"
    area: str = "all"


def _state_file() -> Path:
    return STATE_FILE


def load_saved_filters(defaults: SavedFilters | None = None) -> SavedFilters:
    """Read saved selections, falling back to ``defaults`` per missing key.

    A missing or corrupt file yields ``defaults`` unchanged.
    """
    defaults = defaults or SavedFilters()
    path = _state_file()
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError:
        return defaults
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable filter state %s: %s", path, e)
        return defaults
    if not isinstance(data, dict):
        return defaults

    def pick(key: str) -> str:
        value = data.get(key)
        return value if isinstance(value, str) and value else getattr(defaults, key)

    return SavedFilters(
        sprint=pick("sprint"),
        state=pick("state"),
        assigned=pick("assigned"),
        area=pick("area"),
    )


def save_saved_filters(saved: SavedFilters) -> None:
    """Persist selections. Failures are logged, never raised."""
    path = _state_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_private(path, json.dumps(asdict(saved), indent=2))
    except OSError as e:
        logger.warning("Could not save filter state to %s: %s", path, e)
