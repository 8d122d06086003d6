"""Tests for LinkStore initialize/load/save."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from linkdeck.core.config import ServerConfig
from linkdeck.core.links import ParseError, SerializeError
from linkdeck.storage.store import (
    DirectoryCreateError,
    FileCreateError,
    LinkStore,
    ReadError,
    WriteError,
)


class TestInitialize:
    def test_creates_directory_and_empty_file(self, data_dir: Path) -> None:
        store = LinkStore(data_dir / "links.json")
        store.initialize()

        assert data_dir.is_dir()
        assert json.loads((data_dir / "links.json").read_text()) == []

    def test_keeps_existing_data(self, data_dir: Path) -> None:
        data_dir.mkdir()
        existing = '[{"id": "1", "name": "a", "url": "u"}]\n'
        (data_dir / "links.json").write_text(existing)

        LinkStore(data_dir / "links.json").initialize()
        assert (data_dir / "links.json").read_text() == existing

    def test_is_idempotent(self, store: LinkStore) -> None:
        store.initialize()
        store.initialize()
        assert store.load() == []

    def test_logs_creation(self, data_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("INFO", logger="linkdeck.storage.store"):
            LinkStore(data_dir / "links.json").initialize()
        assert "links.json not found, creating..." in caplog.text

    def test_directory_create_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        store = LinkStore(blocker / "data" / "links.json")

        with pytest.raises(DirectoryCreateError, match="Failed to create data directory"):
            store.initialize()

    def test_file_create_error(self, data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail(path: Path, content: str) -> bool:
            raise PermissionError("read-only filesystem")

        monkeypatch.setattr("linkdeck.storage.store.write_if_missing", fail)
        store = LinkStore(data_dir / "links.json")

        with pytest.raises(FileCreateError, match="Failed to create links.json"):
            store.initialize()

    def test_from_config(self, data_dir: Path) -> None:
        store = LinkStore.from_config(ServerConfig(data_dir=data_dir))
        assert store.data_file == data_dir / "links.json"


class TestLoad:
    def test_fresh_store_is_empty(self, store: LinkStore) -> None:
        assert store.load() == []

    def test_missing_file_returns_empty(self, tmp_path: Path) -> None:
        store = LinkStore(tmp_path / "never" / "links.json")
        assert store.load() == []

    def test_missing_file_after_deletion(self, store: LinkStore) -> None:
        store.data_file.unlink()
        assert store.load() == []

    def test_returns_persisted_order(self, store: LinkStore) -> None:
        store.data_file.write_text(
            json.dumps([{"id": i, "name": i, "url": i} for i in ("b", "a", "c")])
        )
        assert [link["id"] for link in store.load()] == ["b", "a", "c"]

    def test_corrupt_file_raises_parse_error(self, store: LinkStore) -> None:
        store.data_file.write_text("[{")
        with pytest.raises(ParseError, match="invalid JSON"):
            store.load()

    def test_wrong_shape_raises_parse_error(self, store: LinkStore) -> None:
        store.data_file.write_text('{"links": []}')
        with pytest.raises(ParseError):
            store.load()

    def test_unreadable_file_raises_read_error(self, data_dir: Path) -> None:
        # A directory where the data file should be cannot be read as a file.
        (data_dir / "links.json").mkdir(parents=True)
        store = LinkStore(data_dir / "links.json")
        with pytest.raises(ReadError):
            store.load()


class TestSave:
    def test_round_trip(self, store: LinkStore, sample_links: list[dict]) -> None:
        store.save(sample_links)
        assert store.load() == sample_links

    def test_replaces_whole_collection(self, store: LinkStore, sample_links: list[dict]) -> None:
        store.save(sample_links)
        replacement = [{"id": "9", "name": "Only", "url": "https://only"}]
        store.save(replacement)
        assert store.load() == replacement

    def test_save_empty_collection(self, store: LinkStore, sample_links: list[dict]) -> None:
        store.save(sample_links)
        store.save([])
        assert store.load() == []
        assert store.data_file.read_text() == "[]\n"

    def test_writes_indented_json(self, store: LinkStore) -> None:
        store.save([{"id": "1", "name": "Docs", "url": "https://x"}])
        text = store.data_file.read_text()
        assert text.startswith('[\n  {\n    "id": "1",')

    def test_is_idempotent(self, store: LinkStore, sample_links: list[dict]) -> None:
        store.save(sample_links)
        first = store.data_file.read_bytes()
        store.save(sample_links)
        assert store.data_file.read_bytes() == first

    def test_empty_optionals_omitted_on_disk(self, store: LinkStore) -> None:
        store.save([{"id": "1", "name": "a", "url": "u", "color": "", "emoji": ""}])
        assert json.loads(store.data_file.read_text()) == [{"id": "1", "name": "a", "url": "u"}]

    def test_missing_directory_raises_write_error(self, tmp_path: Path) -> None:
        store = LinkStore(tmp_path / "gone" / "links.json")
        with pytest.raises(WriteError, match="Parent directory does not exist"):
            store.save([])

    def test_unencodable_raises_serialize_error(self, store: LinkStore) -> None:
        with pytest.raises(SerializeError):
            store.save([{"id": object(), "name": "a", "url": "u"}])  # type: ignore[dict-item]
        assert store.load() == []


class TestLoneSurrogates:
    def test_save_raw_surrogate_raises_serialize_error(self, store: LinkStore) -> None:
        with pytest.raises(SerializeError):
            store.save([{"id": "1", "name": "\ud800", "url": "u"}])
        assert store.load() == []

    def test_load_escaped_surrogate_from_disk(self, store: LinkStore) -> None:
        store.data_file.write_text('[{"id": "1", "name": "\\ud800", "url": "u"}]\n')
        assert store.load() == [{"id": "1", "name": "\ufffd", "url": "u"}]
