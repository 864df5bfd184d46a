import pytest

from managers import ConfigManager
from models.enums import LogLevel
from runtime.cli import CommandLineOptions


@pytest.fixture
def write_config(tmp_path):
    def _write(text: str):
        path = tmp_path / "traffic_manager.yaml"
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


def test_bundled_config_loads():
    config = ConfigManager().load()

    assert config.connection.port == 2000
    assert config.traffic.target_count == 0
    assert config.supervisor.poll_interval == 1.0
    assert config.pipeline.worker_count is None


def test_partial_file_keeps_defaults(write_config):
    path = write_config("traffic:\n  target_count: 30\n  seed: 4\n")

    config = ConfigManager(path).load()

    assert config.traffic.target_count == 30
    assert config.traffic.seed == 4
    assert config.connection.host == "localhost"


def test_missing_file_falls_back_to_factory_defaults(tmp_path, capsys):
    manager = ConfigManager(str(tmp_path / "missing.yaml"))

    config = manager.load()

    assert config.connection.port == 2000
    assert manager.data["simulation"]["spawn_points"] == 200
    assert "Falling back to factory defaults" in capsys.readouterr().out


def test_broken_yaml_falls_back(write_config):
    path = write_config("connection: [unclosed\n")

    config = ConfigManager(path).load()

    assert config.connection.port == 2000


def test_invalid_values_use_builtin_defaults(write_config, capsys):
    path = write_config("connection:\n  port: -5\n")

    config = ConfigManager(path).load()

    assert config.connection.port == 2000
    assert "Invalid configuration values" in capsys.readouterr().out


def test_overrides_take_precedence(write_config):
    manager = ConfigManager(write_config("connection:\n  host: sim-box\n"))
    manager.load()

    config = manager.apply_overrides(
        CommandLineOptions(target_count=12, seed=3, port=2010, log_level="DEBUG")
    )

    assert config.traffic.target_count == 12
    assert config.traffic.seed == 3
    assert config.connection.host == "sim-box"
    assert config.connection.port == 2010
    assert config.logging.level is LogLevel.DEBUG


def test_invalid_override_is_ignored(capsys):
    manager = ConfigManager()
    manager.load()

    config = manager.apply_overrides(CommandLineOptions(port=70000, target_count=4))

    assert config.connection.port == 2000
    assert config.traffic.target_count == 4
    assert "Ignoring invalid override connection.port" in capsys.readouterr().out
