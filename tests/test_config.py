"""
Tests for entity configuration.

This module tests:
- EntityConfig and TypeDefaults validation
- from_yaml() parsing
- load_config() precedence: overrides > environment > YAML file > defaults
"""

import pytest

from entity_schema import ConfigError, Entity, EntityConfig, TypeDefaults, load_config
from entity_schema.config import DEFAULT_MAX_DEPTH, ENV_CONFIG_PATH, ENV_MAX_DEPTH


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(ENV_CONFIG_PATH, raising=False)
    monkeypatch.delenv(ENV_MAX_DEPTH, raising=False)


class TestEntityConfigModel:
    """Pydantic models for configuration."""

    def test_defaults(self):
        """An empty config has no types, no renames and the default depth."""
        config = EntityConfig()

        assert config.types == {}
        assert config.renames == {}
        assert config.max_depth == DEFAULT_MAX_DEPTH == 64

    def test_type_options_only_explicit_keys(self):
        """type_options() returns only keys that were set."""
        config = EntityConfig(types={"string": {"default": ""}, "date": {"format": "iso"}})

        assert config.type_options("string") == {"default": ""}
        assert config.type_options("date") == {"format": "iso"}
        assert config.type_options("number") == {}
        assert config.type_default("string") == ""
        assert config.type_default("number") is None

    def test_type_defaults_model(self):
        """TypeDefaults accepts default and format."""
        entry = TypeDefaults(default=0)

        assert entry.as_options() == {"default": 0}
        assert entry.format is None

    def test_frozen(self):
        """Configs are immutable."""
        config = EntityConfig()

        with pytest.raises(Exception):
            config.max_depth = 3


class TestFromYaml:
    """EntityConfig.from_yaml()."""

    def test_full(self):
        """All sections are parsed."""
        config = EntityConfig.from_yaml(
            {
                "types": {"string": {"default": ""}, "date": {"format": "timestamp"}},
                "renames": {"_id": "id"},
                "max_depth": 8,
            }
        )

        assert config.type_options("date") == {"format": "timestamp"}
        assert config.renames == {"_id": "id"}
        assert config.max_depth == 8

    @pytest.mark.parametrize("settings", [None, {}])
    def test_empty(self, settings):
        """Empty input gives the default config."""
        assert EntityConfig.from_yaml(settings) == EntityConfig()

    @pytest.mark.parametrize(
        "settings",
        [
            {"types": {"text": {"default": ""}}},
            {"types": {"date": {"format": "unix"}}},
            {"types": {"string": {"example": "x"}}},
            {"renames": {"_id": 1}},
            {"max_depth": 0},
            {"unknown": True},
            ["types"],
        ],
    )
    def test_invalid(self, settings):
        """Invalid settings raise ConfigError."""
        with pytest.raises(ConfigError):
            EntityConfig.from_yaml(settings)


class TestLoadConfig:
    """load_config() sources and precedence."""

    def test_defaults_without_sources(self):
        """Without file, env or overrides the defaults apply."""
        assert load_config() == EntityConfig()

    def test_yaml_file(self, tmp_path):
        """Settings are read from a YAML file."""
        path = tmp_path / "entity.yaml"
        path.write_text(
            "types:\n"
            "  string:\n"
            "    default: ''\n"
            "renames:\n"
            "  _id: id\n"
            "max_depth: 10\n",
            encoding="utf-8",
        )

        config = load_config(str(path))

        assert config.type_options("string") == {"default": ""}
        assert config.renames == {"_id": "id"}
        assert config.max_depth == 10

    def test_path_from_environment(self, tmp_path, monkeypatch):
        """ENTITY_SCHEMA_CONFIG names the file when no path is given."""
        path = tmp_path / "entity.yaml"
        path.write_text("max_depth: 12\n", encoding="utf-8")
        monkeypatch.setenv(ENV_CONFIG_PATH, str(path))

        assert load_config().max_depth == 12

    def test_env_depth_beats_file(self, tmp_path, monkeypatch):
        """ENTITY_SCHEMA_MAX_DEPTH overrides the file."""
        path = tmp_path / "entity.yaml"
        path.write_text("max_depth: 12\n", encoding="utf-8")
        monkeypatch.setenv(ENV_MAX_DEPTH, "5")

        assert load_config(str(path)).max_depth == 5

    def test_overrides_beat_everything(self, tmp_path, monkeypatch):
        """Keyword overrides win; None overrides are ignored."""
        path = tmp_path / "entity.yaml"
        path.write_text("max_depth: 12\nrenames:\n  a: b\n", encoding="utf-8")
        monkeypatch.setenv(ENV_MAX_DEPTH, "5")

        config = load_config(str(path), max_depth=3, renames=None)

        assert config.max_depth == 3
        assert config.renames == {"a": "b"}

    def test_invalid_env_depth(self, monkeypatch):
        """A non-integer depth in the environment is a ConfigError."""
        monkeypatch.setenv(ENV_MAX_DEPTH, "deep")

        with pytest.raises(ConfigError, match=ENV_MAX_DEPTH):
            load_config()

    def test_missing_file(self, tmp_path):
        """An unreadable file is a ConfigError."""
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(str(tmp_path / "missing.yaml"))

    def test_malformed_yaml(self, tmp_path):
        """Broken YAML is a ConfigError."""
        path = tmp_path / "entity.yaml"
        path.write_text("types: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(str(path))

    def test_non_mapping_file(self, tmp_path):
        """A YAML list is not a config."""
        path = tmp_path / "entity.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(str(path))

    def test_loaded_config_drives_entities(self, tmp_path):
        """A loaded config applies when compiling entities."""
        path = tmp_path / "entity.yaml"
        path.write_text("renames:\n  _id: id\ntypes:\n  number:\n    default: 0\n", encoding="utf-8")

        entity = Entity({"_id": str, "count": int}, config=load_config(str(path)))

        assert entity.parse({"_id": "x"}) == {"id": "x", "count": 0}
