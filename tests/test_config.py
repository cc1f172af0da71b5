"""Tests for config.py: runtime configuration precedence and validation."""

import pytest

from drupal_config_sync.config import (
    DEFAULT_MAX_PARALLEL_READS,
    DEFAULT_PROJECTS_DIR,
    Config,
    load_config,
    validate_config,
)

ENV_VARS = (
    "DRUPAL_CONFIG_DIR",
    "DRUPAL_PROJECTS_DIR",
    "DRUPAL_MAX_PARALLEL_READS",
    "DRUPAL_INCLUDE_BASE_FIELD_OVERRIDES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestValidateConfig:
    def test_defaults_valid(self):
        validate_config(Config())

    def test_paths_stripped(self):
        config = Config(config_directory="  /srv/config ", projects_dir=" /p ")
        validate_config(config)
        assert config.config_directory == "/srv/config"
        assert config.projects_dir == "/p"

    def test_blank_config_directory(self):
        with pytest.raises(ValueError, match="Configuration directory"):
            validate_config(Config(config_directory="   "))

    def test_blank_projects_dir(self):
        with pytest.raises(ValueError, match="Projects directory"):
            validate_config(Config(projects_dir=""))

    @pytest.mark.parametrize("value", [0, 65, -1])
    def test_max_parallel_reads_range(self, value):
        with pytest.raises(ValueError, match="max_parallel_reads"):
            validate_config(Config(max_parallel_reads=value))


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config.config_directory is None
        assert config.projects_dir == DEFAULT_PROJECTS_DIR
        assert config.max_parallel_reads == DEFAULT_MAX_PARALLEL_READS
        assert config.include_base_field_overrides is True
        assert config.log_level == "INFO"

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("DRUPAL_CONFIG_DIR", "/env/config")
        monkeypatch.setenv("DRUPAL_PROJECTS_DIR", "/env/projects")
        monkeypatch.setenv("DRUPAL_MAX_PARALLEL_READS", "3")
        monkeypatch.setenv("DRUPAL_INCLUDE_BASE_FIELD_OVERRIDES", "no")

        config = load_config()

        assert config.config_directory == "/env/config"
        assert config.projects_dir == "/env/projects"
        assert config.max_parallel_reads == 3
        assert config.include_base_field_overrides is False

    def test_cli_beats_env(self, monkeypatch):
        monkeypatch.setenv("DRUPAL_CONFIG_DIR", "/env/config")
        monkeypatch.setenv("DRUPAL_PROJECTS_DIR", "/env/projects")
        config = load_config(config_directory="/cli", projects_dir="/cli/p")
        assert config.config_directory == "/cli"
        assert config.projects_dir == "/cli/p"

    def test_env_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("DRUPAL_MAX_PARALLEL_READS", "2")
        config = load_config(
            yaml_fallbacks={
                "config_directory": "/yaml",
                "max_parallel_reads": 16,
            }
        )
        assert config.config_directory == "/yaml"
        assert config.max_parallel_reads == 2

    def test_yaml_fallbacks(self):
        config = load_config(
            yaml_fallbacks={
                "config_directory": "/yaml",
                "projects_dir": "/yaml/projects",
                "max_parallel_reads": 16,
                "include_base_field_overrides": False,
            },
            logging_fallbacks={"level": "DEBUG", "file": "/tmp/sync.log"},
        )
        assert config.projects_dir == "/yaml/projects"
        assert config.max_parallel_reads == 16
        assert config.include_base_field_overrides is False
        assert config.log_level == "DEBUG"
        assert config.log_file == "/tmp/sync.log"

    def test_yaml_none_values_fall_through(self):
        config = load_config(
            yaml_fallbacks={"config_directory": None, "projects_dir": None}
        )
        assert config.config_directory is None
        assert config.projects_dir == DEFAULT_PROJECTS_DIR

    def test_non_numeric_env(self, monkeypatch):
        monkeypatch.setenv("DRUPAL_MAX_PARALLEL_READS", "many")
        with pytest.raises(ValueError, match="DRUPAL_MAX_PARALLEL_READS"):
            load_config()

    def test_out_of_range_env(self, monkeypatch):
        monkeypatch.setenv("DRUPAL_MAX_PARALLEL_READS", "500")
        with pytest.raises(ValueError):
            load_config()
