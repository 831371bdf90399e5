import json

import pytest
import yaml

from bdd_forge.core import ConfigManager, ConfigurationError


class TestConfigManager:
    """Test configuration loading and dotted access"""

    def test_defaults_when_file_missing(self, tmp_path):
        """Test a missing file yields the built-in defaults"""
        config = ConfigManager(tmp_path / "missing.yaml")

        assert config.get("general.log_level") == "INFO"
        assert config.get("generator.default_package") == "com.example.test"
        assert config.get("executor.grace_period") == 5.0

    def test_yaml_layered_over_defaults(self, tmp_path):
        """Test file values override defaults section by section"""
        path = tmp_path / "bdd-forge.yaml"
        path.write_text(yaml.dump({"generator": {"default_package": "com.acme"}}))

        config = ConfigManager(path)

        assert config.get("generator.default_package") == "com.acme"
        assert config.get("generator.custom_imports") == []
        assert config.get("executor.estimated_duration") == 60.0

    def test_json_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"executor": {"grace_period": 1.5}}))

        assert ConfigManager(path).get("executor.grace_period") == 1.5

    def test_environment_variable(self, tmp_path, monkeypatch):
        """Test BDD_FORGE_CONFIG points at the config file"""
        path = tmp_path / "custom.yml"
        path.write_text("general:\n  log_level: DEBUG\n")
        monkeypatch.setenv("BDD_FORGE_CONFIG", str(path))

        assert ConfigManager().get("general.log_level") == "DEBUG"

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[general]\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_get_default_and_set(self, tmp_path):
        """Test dotted get with a default and nested set"""
        config = ConfigManager(tmp_path / "missing.yaml")

        assert config.get("nope.missing", "fallback") == "fallback"
        config.set("custom.nested.value", 3)
        assert config.get("custom.nested.value") == 3

    def test_save_round_trip(self, tmp_path):
        """Test saved configuration loads back"""
        path = tmp_path / "saved" / "config.yaml"
        config = ConfigManager(path)
        config.set("generator.template", "web")
        config.save()

        assert ConfigManager(path).get("generator.template") == "web"

    def test_module_config_is_a_copy(self, tmp_path):
        """Test module sections can be modified by callers without side effects"""
        config = ConfigManager(tmp_path / "missing.yaml")
        section = config.get_module_config("executor")
        section["grace_period"] = 99

        assert config.get("executor.grace_period") == 5.0
        assert config.get_module_config("unknown") == {}
