"""Unit tests for configuration helpers in the `kedit.utils` package."""

from kedit.utils import utils


def test_deep_merge() -> None:
    """Verify that `deep_merge` correctly merges nested dictionaries.

    This test ensures:
    - Existing values are preserved if not overridden.
    - Nested dictionaries are merged recursively.
    - Conflicting keys are overridden by values from the second dictionary.
    """
    base = {"a": 1, "b": {"x": 10, "y": 20}}
    override = {"b": {"y": 99, "z": 100}, "c": 3}
    result = utils.deep_merge(base, override)
    expected = {"a": 1, "b": {"x": 10, "y": 99, "z": 100}, "c": 3}
    assert result == expected
    assert base == {"a": 1, "b": {"x": 10, "y": 20}}


def test_deep_merge_replaces_non_dict_values() -> None:
    base = {"keybindings": {"quit": ["ctrl+q"]}}
    result = utils.deep_merge(base, {"keybindings": {"quit": "ctrl+x"}})
    assert result["keybindings"]["quit"] == "ctrl+x"


def test_load_config_merges_user_file(tmp_path) -> None:
    """User values win; everything else keeps its built-in default."""
    (tmp_path / "config.toml").write_text(
        '[editor]\ntab_stop = 4\n\n[colors]\nnumber = 91\n\n[keybindings]\nquit = "ctrl+x"\n',
        encoding="utf-8",
    )
    config = utils.load_config(tmp_path)
    assert config["editor"]["tab_stop"] == 4
    assert config["editor"]["message_timeout"] == 5
    assert config["colors"]["number"] == 91
    assert config["colors"]["string"] == 35
    assert config["keybindings"]["quit"] == "ctrl+x"
    assert config["keybindings"]["find"] == "ctrl+f"


def test_load_config_does_not_mutate_defaults(tmp_path) -> None:
    (tmp_path / "config.toml").write_text("[editor]\ntab_stop = 2\n", encoding="utf-8")
    utils.load_config(tmp_path)
    assert utils.DEFAULT_CONFIG["editor"]["tab_stop"] == 8


def test_load_config_invalid_toml_uses_defaults(tmp_path) -> None:
    (tmp_path / "config.toml").write_text("[editor\ntab_stop = = 4\n", encoding="utf-8")
    config = utils.load_config(tmp_path)
    assert config == utils.DEFAULT_CONFIG


def test_load_config_creates_user_files(tmp_path) -> None:
    config_dir = tmp_path / "fresh" / "kedit"
    config = utils.load_config(config_dir)
    assert (config_dir / ".env").read_text(encoding="utf-8") == utils.ENV_TEMPLATE
    # the template copied from the project root parses to the defaults
    assert (config_dir / "config.toml").is_file()
    assert config["editor"] == utils.DEFAULT_CONFIG["editor"]
    assert config["keybindings"]["quit"] == "ctrl+q"


def test_ensure_user_config_keeps_existing_files(tmp_path) -> None:
    (tmp_path / ".env").write_text("KEDIT_KEYTRACE=1\n", encoding="utf-8")
    utils.ensure_user_config_exists(tmp_path)
    assert (tmp_path / ".env").read_text(encoding="utf-8") == "KEDIT_KEYTRACE=1\n"
