"""Tests for configuration loading and service wiring."""

import json

import pytest

from taskflow_svc import _bootstrap as bs
from taskflow_svc.config import Config
from taskflow_svc.requests.store import FileRecordStore
from taskflow_svc.requests.types import Priority


SAMPLE_YAML = """\
server:
  port: 9000
store:
  path: data/requests.json
  seed_file: seed.json
escalation:
  threshold_days: 5
  target_priority: High
requests:
  default_due_days: 14
  authorized_agents: [AGT-101, AGT-102]
logging:
  level: DEBUG
"""


class TestConfig:
    """Tests for the Config container."""

    def test_defaults(self):
        config = Config()
        assert config.server.port == 8060
        assert config.store.path == "requests.json"
        assert config.store.seed_file is None
        assert config.escalation.threshold_days == 3
        assert config.escalation.target_priority == "Critical"
        assert config.requests.authorized_agents == []

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE_YAML)

        config = Config.from_yaml(str(path))

        assert config.server.port == 9000
        assert config.server.host == "0.0.0.0"
        assert config.store.seed_file == "seed.json"
        assert config.escalation.threshold_days == 5
        assert config.requests.default_due_days == 14
        assert config.requests.authorized_agents == ["AGT-101", "AGT-102"]
        assert config.logging.level == "DEBUG"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert Config.from_yaml(str(path)) == Config()

    def test_from_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"escalation": {"enabled": False}}))
        assert Config.from_json(str(path)).escalation.enabled is False

    def test_unknown_key_rejected(self):
        with pytest.raises(TypeError):
            Config.from_dict({"server": {"colour": "red"}})


class TestBootstrap:
    """Tests for config discovery and service wiring."""

    def test_defaults_without_config_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv(bs.CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)

        config, path = bs.load_config()

        assert config == Config()
        assert path is None

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text(SAMPLE_YAML)
        monkeypatch.setenv(bs.CONFIG_ENV_VAR, str(path))

        config, loaded_from = bs.load_config()

        assert config.server.port == 9000
        assert loaded_from == path

    def test_config_yaml_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.delenv(bs.CONFIG_ENV_VAR, raising=False)
        (tmp_path / "config.yaml").write_text("server:\n  port: 7000\n")
        monkeypatch.chdir(tmp_path)

        config, _ = bs.load_config()

        assert config.server.port == 7000

    def test_escalation_policy(self):
        config = Config.from_dict({"escalation": {"threshold_days": 1, "target_priority": "high"}})

        policy = bs.build_escalation_policy(config)

        assert policy.threshold_days == 1
        assert policy.target_priority == Priority.HIGH

    def test_service_paths_relative_to_config(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(SAMPLE_YAML)
        (tmp_path / "seed.json").write_text(json.dumps({
            "version": 1,
            "requests": [{
                "id": "TR-0042",
                "title": "Seeded",
                "description": "From seed",
                "createdDate": "2026-01-01T00:00:00.000Z",
                "dueDate": "2099-01-01T00:00:00.000Z",
            }],
        }))
        config = Config.from_yaml(str(config_path))

        service = bs.build_request_service(config, config_path)

        assert isinstance(service._store, FileRecordStore)
        assert service._store.path == tmp_path / "data" / "requests.json"
        assert service.authorized_agents == ["AGT-101", "AGT-102"]
        assert [r.id for r in service.list()] == ["TR-0042"]
        assert (tmp_path / "data" / "requests.json").exists()
