"""
Shared pytest fixtures for the test suite.

Spaces are kept small (21 nodes per axis, spacing 0.1 on [-1, 1]^3) so
that the Numba kernels dominate the runtime only through compilation.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sharpib.geometry import Geometry, Sphere, box_polyhedron
from sharpib.grid import Partition
from sharpib.solvers import ModelParams, Space, initialize_state, compute_geometry_domain


# Uniform initial state
PRESSURE = 101325.0
TEMPERATURE = 300.0
GAS_R = 287.058
GAMMA = 1.4


def build_space(shapes, nodes=(21, 21, 21), domain=((-1.0, 1.0),) * 3,
                ng=2, gl=2, velocity=(0.0, 0.0, 0.0),
                pressure=PRESSURE, temperature=TEMPERATURE, time_levels=1):
    """Unclassified space with a uniform state at every node."""
    part = Partition.create(domain, nodes, ng=ng, gl=gl)
    space = Space.create(part, Geometry(shapes), time_levels=time_levels)
    initialize_state(space, velocity, pressure, temperature, GAMMA, GAS_R)
    return space


# =============================================================================
# Model and state fixtures
# =============================================================================

@pytest.fixture
def model():
    """Air, method of image on the first ghost layer only."""
    return ModelParams(gamma=GAMMA, gas_r=GAS_R, ibm_layer=1)


@pytest.fixture
def uniform_primitive():
    """Primitive state [rho, u, v, w, p, T] of the quiescent initial state."""
    return np.array([PRESSURE / (TEMPERATURE * GAS_R), 0.0, 0.0, 0.0, PRESSURE, TEMPERATURE])


# =============================================================================
# Space fixtures
# =============================================================================

@pytest.fixture
def sphere_space(model):
    """Classified space with a stationary adiabatic no-slip sphere of radius 0.55."""
    space = build_space([Sphere(center=[0.0, 0.0, 0.0], radius=0.55)])
    compute_geometry_domain(space, model)
    return space


@pytest.fixture
def box_space(model):
    """Classified space with a stationary box [-0.35, 0.35]^3."""
    space = build_space([box_polyhedron([-0.35] * 3, [0.35] * 3)])
    compute_geometry_domain(space, model)
    return space


@pytest.fixture
def empty_space():
    """Unclassified space without bodies."""
    return build_space([])
