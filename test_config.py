"""
Test Engine Configuration
=========================

Defaults, dict/YAML loading and validation of EngineConfig.

Usage:
    pytest test_config.py -v
"""

import pytest

from beramap_geo.config import DEFAULT_CENTER, DEFAULT_STYLES, EngineConfig, RendererConfig


def test_defaults():
    config = EngineConfig()
    assert config.max_history_size == 100
    assert config.use_feature_ids is True
    assert config.fit_bounds_padding == (50, 50)
    assert config.center == DEFAULT_CENTER
    assert config.renderer.closed_line_threshold == 1e-5
    assert config.renderer.default_radius == 500.0
    assert config.styles == DEFAULT_STYLES
    assert config.styles is not DEFAULT_STYLES


def test_style_for_returns_copy():
    config = EngineConfig()
    style = config.style_for("Circle")
    style['color'] = '#000'
    assert config.style_for("Circle")['color'] == '#ff0000'
    assert config.style_for("Hexagon") == {}


def test_from_dict_merges_styles_over_presets():
    config = EngineConfig.from_dict({
        'max_history_size': 10,
        'fit_bounds_padding': [10, 20],
        'renderer': {'auto_detect_closed': False},
        'styles': {'Polygon': {'color': '#00aa00'}},
    })

    assert config.max_history_size == 10
    assert config.fit_bounds_padding == (10, 20)
    assert config.renderer.auto_detect_closed is False
    assert config.style_for("Polygon")['color'] == '#00aa00'
    assert config.style_for("Polygon")['fillOpacity'] == 0.2
    assert config.style_for("Point") == DEFAULT_STYLES['Point']


def test_from_dict_empty_is_default():
    assert EngineConfig.from_dict(None) == EngineConfig()
    assert EngineConfig.from_dict({}) == EngineConfig()


@pytest.mark.parametrize("data", [
    {'max_history_size': 0},
    {'max_history_size': 10_001},
    {'fit_bounds_padding': [-1, 0]},
    {'center': [95, 0]},
    {'styles': {'Hexagon': {'color': '#fff'}}},
    {'renderer': {'closed_line_threshold': 0}},
    {'renderer': {'default_radius': -1}},
    {'unknown_key': True},
    {'renderer': {'unknown_key': True}},
])
def test_invalid_values_rejected(data):
    with pytest.raises(ValueError):
        EngineConfig.from_dict(data)


def test_renderer_config_validation():
    with pytest.raises(ValueError):
        RendererConfig(closed_line_threshold=1.5)


def test_from_yaml(tmp_path):
    path = tmp_path / "engine.yaml"
    path.write_text(
        "max_history_size: 200\n"
        "debug: true\n"
        "center: [-8.76, -63.9]\n"
        "renderer:\n"
        "  default_radius: 250\n"
        "styles:\n"
        "  Circle:\n"
        "    color: '#0000ff'\n"
    )

    config = EngineConfig.from_yaml(path)
    assert config.max_history_size == 200
    assert config.debug is True
    assert config.center == (-8.76, -63.9)
    assert config.renderer.default_radius == 250
    assert config.style_for("Circle")['color'] == '#0000ff'


def test_from_yaml_empty_file_is_default(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert EngineConfig.from_yaml(path) == EngineConfig()


def test_from_yaml_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        EngineConfig.from_yaml(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("styles: [unclosed\n")
    with pytest.raises(ValueError):
        EngineConfig.from_yaml(broken)

    listing = tmp_path / "list.yaml"
    listing.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        EngineConfig.from_yaml(listing)
