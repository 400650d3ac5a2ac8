import pytest
from pydantic import ValidationError

from bandsplit import config as config_module
from bandsplit.config import (
    DEFAULT_BAND_RECIPES,
    AudioFormat,
    Config,
    FilterKind,
    FilterTopology,
    OutputConfig,
    WaveformSource,
    load_config,
)


def test_defaults():
    config = Config()

    assert config.waveform_buckets == 100
    assert config.max_workers is None
    assert config.filter_topology is FilterTopology.SINGLE_POLE
    assert config.waveform_source is WaveformSource.FILTERED
    assert config.mono_frequency_split is False
    assert config.output.format is AudioFormat.WAV
    assert [r.id for r in config.get_recipes()] == [
        "vocals",
        "instrumental",
        "drums",
        "bass",
        "other",
    ]


def test_default_recipe_filters():
    recipes = {recipe.id: recipe.filter for recipe in DEFAULT_BAND_RECIPES}

    assert (recipes["vocals"].kind, recipes["vocals"].cutoff_hz) == (FilterKind.BANDPASS, 1000)
    assert (recipes["instrumental"].kind, recipes["instrumental"].cutoff_hz) == (
        FilterKind.NOTCH,
        1000,
    )
    assert (recipes["drums"].kind, recipes["drums"].cutoff_hz) == (FilterKind.HIGHPASS, 200)
    assert recipes["drums"].resonance == pytest.approx(0.7)
    assert (recipes["bass"].kind, recipes["bass"].cutoff_hz) == (FilterKind.LOWPASS, 250)
    assert (recipes["other"].kind, recipes["other"].cutoff_hz) == (FilterKind.HIGHPASS, 3000)


def test_config_instances_do_not_share_recipes():
    first = Config()
    first.recipes["default"].pop()
    assert len(Config().get_recipes()) == 5


def test_load_yaml_with_env_substitution(tmp_path, monkeypatch):
    monkeypatch.setenv("BANDSPLIT_BUCKETS", "50")
    path = tmp_path / "bandsplit.yaml"
    path.write_text(
        "waveform_buckets: ${BANDSPLIT_BUCKETS}\n"
        "filter_topology: biquad\n"
        "output:\n"
        "  format: opus\n"
        "  bitrate: 128\n"
    )

    config = Config.load(path)

    assert config.waveform_buckets == 50
    assert config.filter_topology is FilterTopology.BIQUAD
    assert config.output.format is AudioFormat.OPUS
    assert config.output.bitrate == 128


def test_load_missing_env_var(tmp_path, monkeypatch):
    monkeypatch.delenv("BANDSPLIT_UNSET", raising=False)
    path = tmp_path / "bandsplit.yaml"
    path.write_text("recipe: ${BANDSPLIT_UNSET}\n")

    with pytest.raises(ValueError, match="BANDSPLIT_UNSET"):
        Config.load(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(tmp_path / "missing.yaml")


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "bandsplit.yaml"
    path.write_text("")
    assert Config.load(path) == Config()


def test_custom_recipes_are_merged_with_default(tmp_path):
    path = tmp_path / "bandsplit.yaml"
    path.write_text(
        "recipe: split\n"
        "recipes:\n"
        "  split:\n"
        "    - id: low\n"
        "      display_name: Low\n"
        "      filter: {kind: lowpass, cutoff_hz: 150}\n"
        "    - id: high\n"
        "      display_name: High\n"
        "      filter: {kind: highpass, cutoff_hz: 150}\n"
    )

    config = Config.load(path)

    assert set(config.recipes) == {"default", "split"}
    assert [r.id for r in config.get_recipes()] == ["low", "high"]
    assert len(config.get_recipes("default")) == 5


def test_unknown_recipe_set():
    with pytest.raises(ValidationError, match="Unknown recipe set"):
        Config(recipe="missing")

    with pytest.raises(ValueError):
        Config().get_recipes("missing")


def test_duplicate_recipe_ids():
    recipe = DEFAULT_BAND_RECIPES[0]
    with pytest.raises(ValidationError, match="duplicate"):
        Config(recipes={"default": [recipe, recipe]})


def test_empty_recipe_set():
    with pytest.raises(ValidationError, match="empty"):
        Config(recipes={"default": []})


@pytest.mark.parametrize("bitrate", [16, 320])
def test_bitrate_range(bitrate):
    with pytest.raises(ValidationError):
        OutputConfig(bitrate=bitrate)


def test_invalid_worker_count():
    with pytest.raises(ValidationError):
        Config(max_workers=0)


def test_load_config_from_env_var(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("waveform_buckets: 20\n")
    monkeypatch.setenv("BANDSPLIT_CONFIG", str(path))
    monkeypatch.setattr(config_module, "_config", None)

    assert load_config().waveform_buckets == 20
    assert config_module.get_config().waveform_buckets == 20


def test_load_config_without_file(tmp_path, monkeypatch):
    monkeypatch.delenv("BANDSPLIT_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_config", None)

    assert load_config() == Config()
