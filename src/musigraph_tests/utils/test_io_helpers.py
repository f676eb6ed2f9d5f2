import json
from pathlib import Path

import pytest

from musigraph.utils.io_helpers import load_jsonl, save_models_to_jsonl, save_to_jsonl
from musigraph.utils.models import Album, Artist


def test_save_models_to_jsonl_writes_one_model_per_line(tmp_path: Path):
    """
    Tests that models are dumped in JSON mode, one per line, creating parent folders.
    """
    # 1. Setup
    output_file = tmp_path / "explorer" / "artists.jsonl"
    artists = [
        Artist(id="Q1299", name="The Beatles", genres=["Rock", "Pop"]),
        Artist(id="Q5", name="Sigur Rós"),
    ]

    # 2. Action
    written = save_models_to_jsonl(artists, output_file)

    # 3. Assertions
    assert written == 2
    lines = output_file.read_text(encoding="utf-8").strip().split("\n")
    assert len(lines) == 2
    assert json.loads(lines[0])["genres"] == ["Rock", "Pop"]
    # Non-ASCII is written as-is
    assert "Sigur Rós" in lines[1]


def test_save_to_jsonl_empty_list(tmp_path: Path):
    output_file = tmp_path / "empty.jsonl"

    assert save_to_jsonl([], output_file) == 0
    assert output_file.read_text(encoding="utf-8") == ""


def test_load_jsonl_round_trips_models(tmp_path: Path):
    output_file = tmp_path / "albums.jsonl"
    albums = [Album(id="a", title="Abbey Road", release_date="1969-09-26")]
    save_models_to_jsonl(albums, output_file)

    reloaded = [Album(**record) for record in load_jsonl(output_file)]

    assert reloaded == albums


def test_load_jsonl_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError, match="File not found"):
        load_jsonl(tmp_path / "missing.jsonl")
