import pytest
import yaml

from corsy.utils.config import Config, ConfigError, ScanConfig, validate_origin


@pytest.fixture
def temp_config_file(tmp_path):
    def _create_config(data, filename="corsy.yaml"):
        file_path = tmp_path / filename
        if data is not None:
            with open(file_path, "w", encoding="utf-8") as f:
                yaml.dump(data, f)
        else:
            file_path.touch()
        return file_path

    return _create_config


def test_valid_config(temp_config_file):
    data = {
        "targets": {"url": "http://localhost:8080", "input_file": "urls.txt"},
        "output": {"file": "results.json"},
        "probe": {"timeout": 5, "origin": "https://attacker.example", "concurrency": 4},
    }
    path = temp_config_file(data)
    config = Config(path)
    config.load()
    assert config.targets["url"] == "http://localhost:8080"
    assert config.output == {"file": "results.json"}
    assert config.probe["concurrency"] == 4


def test_empty_file_is_valid(temp_config_file):
    path = temp_config_file(None)
    config = Config(path)
    assert config.load() == {}
    assert config.targets == {}
    assert config.probe == {}


def test_env_var_expansion(temp_config_file, monkeypatch):
    data = {"targets": {"url": "${TARGET_URL}"}, "extra": ["${TARGET_URL}", {"nested": "${OTHER}"}]}
    path = temp_config_file(data)
    monkeypatch.setenv("TARGET_URL", "http://staging.example.com")
    monkeypatch.delenv("OTHER", raising=False)
    config = Config(path)
    loaded = config.load()
    assert config.targets["url"] == "http://staging.example.com"
    assert loaded["extra"][0] == "http://staging.example.com"
    assert loaded["extra"][1]["nested"] == ""


def test_non_dict_root_error(temp_config_file):
    path = temp_config_file(["this", "is", "a", "list"])
    config = Config(path)
    with pytest.raises(ConfigError, match=r"Configuration root must be a mapping/object"):
        config.load()


def test_invalid_yaml_error(tmp_path):
    path = tmp_path / "corsy.yaml"
    path.write_text("probe: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError, match=r"Error parsing YAML file"):
        Config(path).load()


@pytest.mark.parametrize("probe", [
    {"timeout": 0},
    {"timeout": "10"},
    {"timeout": True},
    {"concurrency": -2},
])
def test_invalid_probe_numbers(temp_config_file, probe):
    path = temp_config_file({"probe": probe})
    with pytest.raises(ConfigError, match=r"must be a positive integer"):
        Config(path).load()


def test_invalid_probe_origin(temp_config_file):
    path = temp_config_file({"probe": {"origin": "evil.com"}})
    with pytest.raises(ConfigError, match=r"probe\.origin"):
        Config(path).load()


def test_invalid_section_type(temp_config_file):
    path = temp_config_file({"probe": "fast"})
    with pytest.raises(ConfigError, match=r"'probe' must be a mapping"):
        Config(path).load()


def test_invalid_target_type(temp_config_file):
    path = temp_config_file({"targets": {"url": 42}})
    with pytest.raises(ConfigError, match=r"targets\.url must be a string"):
        Config(path).load()


def test_file_not_found_error(tmp_path):
    config = Config(tmp_path / "nonexistent.yaml")
    with pytest.raises(FileNotFoundError, match=r"Configuration file not found"):
        config.load()


def test_validate_origin():
    assert validate_origin("https://evil.com") == "https://evil.com"
    assert validate_origin("http://localhost:8000") == "http://localhost:8000"
    for bad in ("", "evil.com", "ftp://evil.com", None):
        with pytest.raises(ValueError):
            validate_origin(bad)


def test_scan_config_defaults():
    config = ScanConfig()
    assert config.timeout == 10
    assert config.origin == "https://evil.com"
    assert config.concurrency == 1
    assert config.output_file is None
    assert not config.has_targets


def test_scan_config_from_file(temp_config_file):
    path = temp_config_file({
        "targets": {"input_file": "urls.txt"},
        "output": {"file": "out.json", "log_file": ""},
        "probe": {"timeout": 3},
    })
    file_config = Config(path)
    file_config.load()

    config = ScanConfig.from_sources(file_config)

    assert config.input_file == "urls.txt"
    assert config.output_file == "out.json"
    assert config.log_file is None
    assert config.timeout == 3
    assert config.has_targets


def test_scan_config_cli_overrides_file(temp_config_file):
    path = temp_config_file({"targets": {"url": "http://file.test"}, "probe": {"timeout": 3}})
    file_config = Config(path)
    file_config.load()

    config = ScanConfig.from_sources(file_config, url="http://cli.test", timeout=None, concurrency=2)

    assert config.url == "http://cli.test"
    assert config.timeout == 3
    assert config.concurrency == 2


def test_scan_config_is_immutable():
    config = ScanConfig(url="http://a.test")
    with pytest.raises(AttributeError):
        config.url = "http://b.test"
