"""Tests for the write-through cooldown store."""

import json
from unittest.mock import patch

import pytest

from fourbsc.cooldown import CooldownStore


class TestCooldownStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = CooldownStore(str(tmp_path / "wallet_db.json"))
        assert store.get("0xABC") == 0

    def test_set_is_flushed_immediately(self, tmp_path):
        path = tmp_path / "wallet_db.json"
        store = CooldownStore(str(path))
        store.set("0xAbCdEf", 1_700_000_000_000)

        on_disk = json.loads(path.read_text())
        assert on_disk == {"0xabcdef": 1_700_000_000_000}

    def test_keys_are_case_normalized(self, tmp_path):
        store = CooldownStore(str(tmp_path / "wallet_db.json"))
        store.set("0xAbCdEf", 5)
        assert store.get("0xABCDEF") == 5
        assert store.get("0xabcdef") == 5

    def test_reload_reads_previous_values(self, tmp_path):
        path = str(tmp_path / "wallet_db.json")
        CooldownStore(path).set("0xAAA", 42)
        assert CooldownStore(path).get("0xaaa") == 42

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "wallet_db.json"
        path.write_text("{not json")
        store = CooldownStore(str(path))
        assert store.get("0xaaa") == 0

        store.set("0xAAA", 7)
        assert json.loads(path.read_text()) == {"0xaaa": 7}

    def test_non_object_file_is_empty(self, tmp_path):
        path = tmp_path / "wallet_db.json"
        path.write_text("[1, 2, 3]")
        assert CooldownStore(str(path)).data == {}

    def test_interrupted_write_keeps_previous_entries(self, tmp_path):
        path = str(tmp_path / "wallet_db.json")
        store = CooldownStore(path)
        store.set("0xAAA", 111)
        store.set("0xBBB", 222)

        def partial_dump(data, f, **kwargs):
            f.write('{"0xaaa": 1')
            raise KeyboardInterrupt

        with patch("fourbsc.cooldown.json.dump", side_effect=partial_dump):
            with pytest.raises(KeyboardInterrupt):
                store.set("0xCCC", 333)

        reloaded = CooldownStore(path)
        assert reloaded.get("0xaaa") == 111
        assert reloaded.get("0xbbb") == 222
        assert [p.name for p in tmp_path.iterdir()] == ["wallet_db.json"]
