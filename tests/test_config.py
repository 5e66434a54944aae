# tests/test_config.py
import os

import pytest

from config import (CONFIG_DIR, find_config_dir, get_biome, get_default_config, get_params, get_seed,
                    get_settings, load_biomes, load_config, load_seeds)
from sim.state import Settings, SimParams


def test_default_config_has_run_sections():
    cfg = get_default_config()
    assert cfg['biome'] in load_biomes()
    assert cfg['plant_seed'] in load_seeds()
    assert cfg['runner']['ticks_per_step'] == 10
    assert set(cfg['settings']) == set(Settings().to_dict())


def test_tables_are_complete():
    biomes, seeds = load_biomes(), load_seeds()
    assert sorted(biomes) == ['desert', 'forest', 'mountain', 'plains', 'tropical', 'wetlands']
    assert len(seeds) == 15
    # every seed offered by a biome exists in the seed table
    for biome in biomes.values():
        assert set(biome.seeds) <= set(seeds)
        assert biome.temp_range[0] < biome.temp_range[1]


def test_unknown_ids_name_the_alternatives():
    with pytest.raises(KeyError, match="plains"):
        get_biome("atlantis")
    with pytest.raises(KeyError, match="oak"):
        get_seed("triffid")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_file_raises(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(str(p))


def test_settings_and_params_from_config(tmp_path):
    p = tmp_path / "custom.yaml"
    p.write_text(
        "settings:\n"
        "  weatherEvents: false\n"
        "  npk_nutrients: false\n"
        "params:\n"
        "  photo_scale: 2.0\n"
    )
    cfg = load_config(str(p))
    settings = get_settings(cfg)
    assert settings.weather_events is False
    assert settings.npk_nutrients is False
    assert settings.herbivory is True
    params = get_params(cfg)
    assert params.photo_scale == 2.0
    assert params.leaf_action_bonus == SimParams().leaf_action_bonus


def test_unknown_setting_is_rejected():
    with pytest.raises(ValueError):
        get_settings({'settings': {'telepathy': True}})
    with pytest.raises(ValueError):
        get_params({'params': {'photoScale': 1.0}})


def test_settings_must_be_booleans():
    with pytest.raises(ValueError, match="herbivory"):
        get_settings({'settings': {'herbivory': 'false'}})
    with pytest.raises(ValueError, match="weather_events"):
        Settings.from_dict({'weatherEvents': 0})


def test_config_dir_falls_back_to_install_prefix(tmp_path):
    checkout = tmp_path / "checkout"
    (checkout / "config").mkdir(parents=True)
    assert find_config_dir(base=str(checkout)) == str(checkout / "config")

    installed = tmp_path / "site-packages"
    installed.mkdir()
    found = find_config_dir(base=str(installed), prefix=str(tmp_path / "venv"))
    assert found == str(tmp_path / "venv" / "share" / "plant-growth-sim" / "config")
    assert os.path.isfile(os.path.join(CONFIG_DIR, "defaults.yaml"))
