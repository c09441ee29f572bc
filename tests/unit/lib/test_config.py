import yaml

from oracle.lib import config


def test_packaged_defaults():
    assert config.get("database") == "oracle.db"
    assert config.get("directory_ttl_seconds") == 60
    assert config.get("inference")["url"] is None
    assert config.get("missing", "fallback") == "fallback"


def test_env_overrides_scalars(monkeypatch):
    monkeypatch.setenv("ORACLE_DIRECTORY_TTL_SECONDS", "5")
    monkeypatch.setenv("ORACLE_POLL_INTERVAL", "0.1")
    monkeypatch.setenv("ORACLE_LOGGING_LEVEL", "DEBUG")
    monkeypatch.setenv("ORACLE_FIND_LIMIT", "lots")
    config.clear_cache()

    assert config.get("directory_ttl_seconds") == 5
    assert config.get("poll_interval") == 0.1
    assert config.get("logging_level") == "DEBUG"
    assert config.get("find_limit") == 5


def test_env_ignores_unknown_and_nested_keys(monkeypatch):
    monkeypatch.setenv("ORACLE_INFERENCE", "http://nope")
    monkeypatch.setenv("ORACLE_SOMETHING_ELSE", "x")
    config.clear_cache()

    assert isinstance(config.get("inference"), dict)
    assert "something_else" not in config.load_config()


def test_user_file_overlays_defaults(oracle_home):
    oracle_home.mkdir(parents=True)
    (oracle_home / "config.yaml").write_text(
        yaml.safe_dump({"find_limit": 10, "inference": {"url": "http://localhost:9000/answer"}})
    )
    config.clear_cache()

    assert config.get("find_limit") == 10
    assert config.get("inference") == {"url": "http://localhost:9000/answer", "timeout": 20}
    assert config.get("connect_limit") == 3


def test_init_config_copies_defaults_once(oracle_home):
    target = config.init_config()

    assert target == oracle_home / "config.yaml"
    assert yaml.safe_load(target.read_text())["database"] == "oracle.db"

    target.write_text("find_limit: 2\n")
    assert config.init_config() == target
    assert target.read_text() == "find_limit: 2\n"
