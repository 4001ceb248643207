import os
import time

from vexlookup.cache import CACHE_TIME, FileCache


def test_put_then_get_round_trip(tmp_path):
    cache = FileCache(tmp_path)
    assert cache.put("vex_CVE-2024-1234", '{"a": 1}') is True
    assert cache.get("vex_CVE-2024-1234") == '{"a": 1}'


def test_missing_entry_is_none(tmp_path):
    assert FileCache(tmp_path).get("nothing-here") is None


def test_path_replaces_hyphens(tmp_path):
    cache = FileCache(tmp_path)
    path = cache.path_for("vex_CVE-2024-1234")
    assert path.parent == tmp_path
    assert "-" not in path.name
    assert path.suffix == ".cache"


def test_entry_is_written_to_path_for(tmp_path):
    cache = FileCache(tmp_path)
    cache.put("key-1", "content")
    assert cache.path_for("key-1").read_text(encoding="utf-8") == "content"


def test_expired_entry_is_none(tmp_path):
    cache = FileCache(tmp_path)
    cache.put("old", "stale")
    past = time.time() - CACHE_TIME - 10
    os.utime(cache.path_for("old"), (past, past))
    assert cache.get("old") is None


def test_fresh_entry_within_max_age(tmp_path):
    cache = FileCache(tmp_path, max_age=CACHE_TIME)
    cache.put("new", "fresh")
    recent = time.time() - CACHE_TIME / 2
    os.utime(cache.path_for("new"), (recent, recent))
    assert cache.get("new") == "fresh"


def test_empty_content_counts_as_miss(tmp_path):
    cache = FileCache(tmp_path)
    cache.put("empty", "")
    assert cache.get("empty") is None


def test_put_into_missing_directory_fails(tmp_path):
    cache = FileCache(tmp_path / "absent")
    assert cache.put("key", "value") is False
    assert cache.get("key") is None