"""
Tests for the YAML configuration layer.
"""

import argparse

import pytest

from sharpib.config import (
    SimulationConfig,
    ShapeConfig,
    apply_cli_overrides,
    from_dict,
    load_yaml,
    save_yaml,
)
from sharpib.errors import ConfigurationError


class TestConfig:
    
    def test_defaults(self):
        config = from_dict({})
        assert config.grid.nodes == [31, 31, 31]
        assert config.grid.halo == 2
        assert config.ibm.ibm_layer == 1
        assert config.ibm.max_search_radius is None
        assert config.shapes == []
    
    def test_nested_and_coerced(self):
        config = from_dict({
            'grid': {'nodes': [11, 11, 1], 'unknown_key': 3},
            'flow': {'pressure': "9.0e4"},
            'ibm': {'tiny_factor': "1.0e-4"},
            'shapes': [{'kind': 'Sphere', 'radius': 0.3, 'moving': True}],
        })
        assert config.grid.nodes == [11, 11, 1]
        assert config.flow.pressure == 9.0e4
        assert config.ibm.tiny_factor == 1.0e-4
        assert isinstance(config.shapes[0], ShapeConfig)
        assert config.shapes[0].kind == 'sphere'
        assert config.shapes[0].moving
    
    def test_unknown_shape_kind(self):
        with pytest.raises(ConfigurationError):
            from_dict({'shapes': [{'kind': 'torus'}]})
    
    def test_round_trip(self, tmp_path):
        config = from_dict({
            'grid': {'x': [0.0, 2.0], 'nodes': [21, 11, 11]},
            'shapes': [
                {'kind': 'box', 'lower': [0.5, 0.2, 0.2], 'upper': [1.0, 0.8, 0.8],
                 'wall_temperature': 350.0},
                {'kind': 'sphere', 'center': [1.5, 0.5, 0.5], 'radius': 0.2, 'friction': 0.0},
            ],
            'output': {'case_name': 'pair'},
        })
        path = tmp_path / "case.yaml"
        save_yaml(config, path)
        loaded = load_yaml(path)
        assert isinstance(loaded, SimulationConfig)
        assert loaded.to_dict() == config.to_dict()
    
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "missing.yaml")
    
    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml(path).to_dict() == SimulationConfig().to_dict()
    
    def test_cli_overrides(self):
        config = from_dict({'shapes': [{'kind': 'sphere'}]})
        args = argparse.Namespace(nodes=[41, 41, 41], halo=None, ghost_layers=3,
                                  ibm_layer=None, max_search_radius=6,
                                  output_dir="out", case_name=None, plot=None)
        updated = apply_cli_overrides(config, args)
        assert updated.grid.nodes == [41, 41, 41]
        assert updated.grid.ghost_layers == 3
        assert updated.grid.halo == 2
        assert updated.ibm.max_search_radius == 6
        assert updated.output.directory == "out"
        assert updated.output.case_name == config.output.case_name
        assert len(updated.shapes) == 1
