"""
Tests for building spaces from configurations.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from sharpib.config import from_dict
from sharpib.errors import ConfigurationError
from sharpib.geometry import Polyhedron, Sphere
from sharpib.physics import primitive_field
from sharpib.solvers import (
    apply_immersed_boundary_treatment,
    check_classification,
    compute_geometry_domain,
    create_space,
)
from sharpib.solvers.factory import build_model


@pytest.fixture
def config():
    return from_dict({
        'grid': {'x': [-1.0, 1.0], 'y': [-1.0, 1.0], 'z': [-0.5, 0.5],
                 'nodes': [21, 21, 11], 'halo': 2, 'ghost_layers': 2},
        'flow': {'density': 1.2, 'velocity': [10.0, 0.0, 0.0], 'pressure': 100000.0},
        'ibm': {'ibm_layer': 1, 'time_levels': 3},
        'shapes': [
            {'kind': 'sphere', 'center': [-0.5, 0.0, 0.0], 'radius': 0.3},
            {'kind': 'box', 'lower': [0.2, -0.3, -0.3], 'upper': [0.7, 0.3, 0.3],
             'wall_temperature': 320.0, 'friction': 0.0},
        ],
    })


class TestCreateSpace:
    
    def test_space(self, config):
        space, model = create_space(config)
        assert space.node.U.shape == (3, 15, 25, 25, 5)
        assert isinstance(space.geo[0], Sphere)
        assert isinstance(space.geo[1], Polyhedron)
        assert space.geo[1].wall_temperature == 320.0
        assert not space.geo[1].no_slip
        assert_allclose(space.geo[1].center, [0.45, 0.0, 0.0])
        assert model.ibm_layer == 1
    
    def test_initial_state(self, config):
        space, model = create_space(config)
        Uo = primitive_field(model.gamma, model.gas_r, space.node.U)
        assert_allclose(Uo[..., 0], 1.2)
        assert_allclose(Uo[..., 1], 10.0)
        assert_allclose(Uo[..., 4], 100000.0)
        assert_allclose(Uo[..., 5], 100000.0 / (1.2 * model.gas_r))
    
    def test_classify_and_treat(self, config):
        space, model = create_space(config)
        compute_geometry_domain(space, model)
        assert check_classification(space) == []
        assert set(np.unique(space.node.gid[space.part.interior]).tolist()) == {0, 1, 2}
        assert apply_immersed_boundary_treatment(1, space, model) == np.count_nonzero(space.node.gst)
    
    def test_negative_ibm_layer(self, config):
        config.ibm.ibm_layer = -1
        with pytest.raises(ConfigurationError):
            build_model(config)
