from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from mbar_cli.core.constants import RATIO_META_KEY


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def sample_attachments() -> List[Dict[str, Any]]:
    return [
        {
            "id": 11,
            "title": "Harbor at dusk",
            "mime_type": "image/jpeg",
            "status": "inherit",
            "date": "2024-03-02T10:15:00",
            "metadata": {"width": 1920, "height": 1080},
        },
        {
            "id": 12,
            "title": "Broken upload",
            "mime_type": "image/png",
            "status": "inherit",
            "date": "2024-03-05T08:00:00",
            "metadata": {},
        },
        {
            "id": 13,
            "title": "Profile photo",
            "mime_type": "image/jpeg",
            "status": "inherit",
            "date": "2024-04-11T12:30:00",
            "metadata": {"width": 800, "height": 800},
            "meta": {RATIO_META_KEY: "1"},
        },
        {
            "id": 14,
            "title": "Podcast episode",
            "mime_type": "audio/mpeg",
            "status": "inherit",
            "date": "2024-03-09T09:00:00",
            "metadata": {},
        },
        {
            "id": 10,
            "title": "Old monitor screenshot",
            "mime_type": "image/gif",
            "status": "inherit",
            "date": "2023-12-24T18:00:00",
            "metadata": {"width": 1024, "height": 768},
        },
    ]


@pytest.fixture()
def library_file(tmp_path: Path, sample_attachments: List[Dict[str, Any]]) -> Path:
    path = tmp_path / "library.json"
    path.write_text(json.dumps({"attachments": sample_attachments}, indent=2) + "\n")
    return path


@pytest.fixture()
def write_temp_json(tmp_path: Path):
    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload, indent=2) + "\n")
        return path

    return _write


@pytest.fixture()
def write_temp_toml(tmp_path: Path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content.strip() + "\n")
        return path

    return _write
