import json
import os

from archive_indexer.core.config import DEFAULT_CONFIG, MAX_BUCKET_SIZE, Config, get_config, set_config
from archive_indexer.core.paths import Paths


def test_defaults(tmp_path):
    config = Config(str(tmp_path / "missing.json"))
    assert config.load() is False
    assert config.category_bucket_size == 1000
    assert config.sniff_unknown_types is True
    assert config.debug_mode is False
    assert config.index_dir == Paths.get_index_dir()


def test_save_and_load_round_trip(tmp_path):
    path = str(tmp_path / "sub" / "config.json")
    config = Config(path)
    config.category_bucket_size = 250
    config.sniff_unknown_types = False
    assert config.is_modified
    assert config.save()
    assert not config.is_modified

    loaded = Config(path)
    assert loaded.load()
    assert loaded.category_bucket_size == 250
    assert loaded.sniff_unknown_types is False


def test_unknown_keys_ignored_and_missing_keys_defaulted(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"debug_mode": True, "bogus": 1}), encoding='utf-8')

    config = Config(str(path))
    assert config.load()
    assert config.debug_mode is True
    assert "bogus" not in config.data
    assert config.category_bucket_size == DEFAULT_CONFIG["category_bucket_size"]


def test_invalid_json_keeps_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding='utf-8')
    config = Config(str(path))
    assert config.load() is False
    assert config.data == DEFAULT_CONFIG


def test_bucket_size_is_clamped(tmp_path):
    config = Config(str(tmp_path / "config.json"))
    config.category_bucket_size = -5
    assert config.category_bucket_size == 0
    config.category_bucket_size = MAX_BUCKET_SIZE + 1
    assert config.category_bucket_size == MAX_BUCKET_SIZE


def test_index_dir_override(tmp_path):
    config = Config(str(tmp_path / "config.json"))
    config.index_dir = str(tmp_path / "idx")
    assert config.index_dir == os.path.abspath(str(tmp_path / "idx"))
    assert config["index_dir"] == str(tmp_path / "idx")


def test_global_config_is_shared(tmp_path):
    first = get_config()
    assert get_config() is first

    replacement = Config(str(tmp_path / "other.json"))
    set_config(replacement)
    assert get_config() is replacement


def test_default_location_is_user_data_dir(tmp_path):
    config = Config()
    assert config.config_path == os.path.join(Paths.get_user_data_dir(), "config.json")
