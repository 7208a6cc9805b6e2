from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_config_dir(tmp_path, monkeypatch):
    """Keep config and saved filter state out of the real home directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr("sprintboard.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("sprintboard.config.CONFIG_FILE", config_dir / "config.toml")
    monkeypatch.setattr("sprintboard.prefs.STATE_FILE", config_dir / "state.json")
    for var in (
        "AZURE_DEVOPS_ORG",
        "AZURE_DEVOPS_PROJECT",
        "AZURE_DEVOPS_TEAM",
        "AZURE_DEVOPS_PAT",
        "SPRINTBOARD_LOG",
    ):
        monkeypatch.delenv(var, raising=False)
    yield config_dir
