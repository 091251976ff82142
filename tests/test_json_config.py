import pytest

from sophiread.json_config import ConfigError, JSONConfig

UNIFORM = """{
    "abs": {
        "radius": 6.0,
        "min_cluster_size": 2,
        "spider_time_range": 80
    },
    "tof_imaging": {
        "uniform_bins": {
            "num_bins": 1000,
            "end": 0.0167
        },
        "super_resolution": 2.0
    }
}"""

CUSTOM = """{
    "abs": {
        "radius": 7.0,
        "min_cluster_size": 3,
        "spider_time_range": 85
    },
    "tof_imaging": {
        "bin_edges": [0, 0.001, 0.002, 0.005, 0.01, 0.0167]
    }
}"""

DEFAULT = """{
    "abs": {}
}"""


@pytest.fixture
def write_config(tmp_path):
    def _write(name, text):
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


def test_parses_super_resolution(write_config):
    config = JSONConfig.from_file(write_config("u.json", UNIFORM))
    assert config.super_resolution == 2.0


def test_parses_uniform_config(write_config):
    config = JSONConfig.from_file(write_config("u.json", UNIFORM))
    assert config.abs_radius == 6.0
    assert config.abs_min_cluster_size == 2
    assert config.abs_spider_time_range == 80
    edges = config.tof_bin_edges()
    assert len(edges) == 1001
    assert edges[0] == 0
    assert edges[-1] == pytest.approx(0.0167, rel=1e-12)


def test_parses_custom_config(write_config):
    config = JSONConfig.from_file(str(write_config("c.json", CUSTOM)))
    assert config.abs_radius == 7.0
    assert config.abs_min_cluster_size == 3
    assert config.abs_spider_time_range == 85
    assert config.tof_bin_edges() == [0, 0.001, 0.002, 0.005, 0.01, 0.0167]


def test_uses_default_values(write_config):
    config = JSONConfig.from_file(write_config("d.json", DEFAULT))
    assert config.abs_radius == 5.0
    assert config.abs_min_cluster_size == 1
    assert config.abs_spider_time_range == 75
    edges = config.tof_bin_edges()
    assert len(edges) == 1501
    assert edges[0] == 0
    assert edges[-1] == pytest.approx(0.0167, rel=1e-12)
    assert config.super_resolution == 1.0


def test_raises_on_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Failed to open"):
        JSONConfig.from_file(tmp_path / "non_existent.json")


def test_config_error_is_runtime_error(tmp_path):
    with pytest.raises(RuntimeError):
        JSONConfig.from_file(tmp_path / "non_existent.json")


def test_raises_on_invalid_json(write_config):
    with pytest.raises(ConfigError, match="Error parsing JSON file"):
        JSONConfig.from_file(write_config("bad.json", "{ not json"))


def test_wrong_type_raises(write_config):
    config = JSONConfig.from_file(
        write_config("t.json", '{"abs": {"radius": "large"}}')
    )
    with pytest.raises(ConfigError):
        _ = config.abs_radius
    # Other values are unaffected by the bad entry and fall back to defaults.
    assert config.abs_min_cluster_size == 1
    assert config.abs_spider_time_range == 75


def test_str(write_config):
    result = str(JSONConfig.from_file(write_config("u.json", UNIFORM)))
    assert "radius=6" in result
    assert "min_cluster_size=2" in result
    assert "spider_time_range=80" in result
    assert "TOF bins=1000" in result
    assert "TOF max=16.7 ms" in result
    assert "Super Resolution=2" in result


def test_str_custom(write_config):
    result = str(JSONConfig.from_file(write_config("c.json", CUSTOM)))
    assert "Custom TOF binning with 5 bins" in result


def test_create_default():
    config = JSONConfig.create_default()
    assert config.abs_radius == 5.0
    assert config.abs_min_cluster_size == 1
    assert config.abs_spider_time_range == 75
    assert config.super_resolution == 1.0
    edges = config.tof_bin_edges()
    assert len(edges) == 1501
    assert edges[-1] == pytest.approx(16.7e-3, rel=1e-12)
    assert "TOF bins=1500, TOF max=16.7 ms" in str(config)