"""
Tests for node classification against immersed shapes.

Covers ownership exclusivity, the ghost => interfacial => owned chain,
boundary-inclusive sphere ownership, layer assignment along the search
path, stationary-shape stability across remeshes, moving-shape remeshes
with newly exposed nodes, and the degenerate no-donor case.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from conftest import GAMMA, GAS_R, build_space
from sharpib.constants import NONE
from sharpib.errors import DonorSearchError
from sharpib.geometry import Geometry, Sphere, box_polyhedron
from sharpib.grid import Partition, layer_of
from sharpib.physics import primitive_field
from sharpib.solvers import (
    Space,
    apply_immersed_boundary_treatment,
    check_classification,
    compute_geometry_domain,
    identify_geometry_node,
)


def _node_distances(space, center):
    """Distance of every node (halo included) to a point, shape (nz, ny, nx)."""
    x, y, z = space.part.coordinates()
    Z, Y, X = np.meshgrid(z - center[2], y - center[1], x - center[0], indexing='ij')
    return np.sqrt(X * X + Y * Y + Z * Z)


def _expected_ghost_layer(space, k, j, i):
    """Layer of the first fluid node along the search path (brute force)."""
    part, gid = space.part, space.node.gid
    for n, (dx, dy, dz) in enumerate(part.path):
        kk, jj, ii = k + dz, j + dy, i + dx
        if 0 <= kk < gid.shape[0] and 0 <= jj < gid.shape[1] and 0 <= ii < gid.shape[2]:
            if gid[kk, jj, ii] == 0:
                return layer_of(n, part.path_sep)
    return 0


class TestOwnership:
    
    def test_sphere_exactness(self, sphere_space):
        part, node = sphere_space.part, sphere_space.node
        dist = _node_distances(sphere_space, [0.0, 0.0, 0.0])[part.interior]
        gid = node.gid[part.interior]
        assert_array_equal(gid == 1, dist <= 0.55)
        assert_array_equal(gid[dist > 0.55], 0)
    
    def test_boundary_node_is_owned(self, model):
        # node (0.5, 0, 0) lies exactly on the surface
        space = build_space([Sphere(center=[0.0, 0.0, 0.0], radius=0.5)])
        compute_geometry_domain(space, model)
        assert space.node.gid[12, 12, 17] == 1
    
    def test_halo_stays_exterior(self, sphere_space):
        node = sphere_space.node
        assert np.all(node.gid[:2] == NONE)
        assert np.all(node.gid[:, :, -2:] == NONE)
        assert np.all(node.lid[:2] == 0)
    
    def test_overlapping_shapes_first_claim_wins(self, model):
        first = Sphere(center=[-0.2, 0.0, 0.0], radius=0.4)
        second = Sphere(center=[0.2, 0.0, 0.0], radius=0.4)
        space = build_space([first, second])
        compute_geometry_domain(space, model)
        part, gid = space.part, space.node.gid[space.part.interior]
        d1 = _node_distances(space, first.center)[part.interior]
        d2 = _node_distances(space, second.center)[part.interior]
        assert set(np.unique(gid).tolist()) == {0, 1, 2}
        assert_array_equal(gid[d1 <= 0.4], 1)
        assert_array_equal(gid[(d2 <= 0.4) & (d1 > 0.4)], 2)
    
    def test_box_polyhedron(self, box_space):
        part, node = box_space.part, box_space.node
        gid = node.gid[part.interior]
        # nodes -0.3 .. 0.3 on each axis
        assert np.count_nonzero(gid == 1) == 7 ** 3
        assert np.all(gid[7:14, 7:14, 7:14] == 1)
        fid = node.fid[part.interior][gid == 1]
        assert np.all((fid >= 0) & (fid < 12))
    
    def test_box_faces_on_nodes_are_owned(self, model):
        space = build_space([box_polyhedron([-0.3] * 3, [0.3] * 3)])
        compute_geometry_domain(space, model)
        assert np.count_nonzero(space.node.gid == 1) == 7 ** 3
    
    def test_shape_outside_domain(self, model):
        space = build_space([Sphere(center=[5.0, 0.0, 0.0], radius=0.5)])
        compute_geometry_domain(space, model)
        assert np.count_nonzero(space.node.gid > 0) == 0


class TestLayers:
    
    def test_consistency_chain(self, sphere_space):
        assert check_classification(sphere_space) == []
        node = sphere_space.node
        assert np.all(node.lid[node.gst != 0] != 0)
        assert np.all(node.gid[node.lid != 0] > 0)
    
    def test_ghost_layers_follow_search_path(self, sphere_space):
        node = sphere_space.node
        ks, js, is_ = np.nonzero(node.gid == 1)
        for k, j, i in zip(ks, js, is_):
            assert node.gst[k, j, i] == _expected_ghost_layer(sphere_space, k, j, i)
        # single body: the only heterogeneous neighbours are fluid nodes
        assert_array_equal(node.lid, node.gst)
    
    def test_ghost_layer_depth(self, sphere_space):
        """A layer-r ghost node lies within r * sqrt(2) * h of the surface."""
        part, node = sphere_space.part, sphere_space.node
        dist = _node_distances(sphere_space, [0.0, 0.0, 0.0])
        for r in (1, 2):
            depth = 0.55 - dist[node.gst == r]
            assert depth.size > 0
            assert np.all(depth >= 0.0)
            assert np.all(depth < r * np.sqrt(2.0) * 0.1 + 1e-12)
        # deep interior is not interfacial
        assert np.all(node.lid[dist < 0.55 - 2 * np.sqrt(2.0) * 0.1] == 0)
    
    def test_collapsed_axis(self, model):
        space = build_space([Sphere(center=[0.0, 0.0, 0.0], radius=0.5)],
                            nodes=(21, 21, 1), domain=((-1.0, 1.0), (-1.0, 1.0), (0.0, 0.0)))
        compute_geometry_domain(space, model)
        assert space.node.gid.shape == (1, 25, 25)
        assert check_classification(space) == []
        assert np.count_nonzero(space.node.gst == 1) > 0


class TestRemesh:
    
    def test_stationary_shape_is_stable(self, sphere_space, model):
        node = sphere_space.node
        before = {name: getattr(node, name).copy() for name in ('gid', 'fid', 'lid', 'gst', 'pending')}
        U_before = node.U.copy()
        compute_geometry_domain(sphere_space, model)
        for name, value in before.items():
            assert_array_equal(getattr(node, name), value, err_msg=name)
        assert_array_equal(node.U, U_before)
    
    def test_stationary_shape_claimed_once(self, sphere_space):
        assert sphere_space.claimed == {1}
        assert identify_geometry_node(sphere_space) == 0
    
    def test_geometry_shared_between_spaces(self, model):
        geo = Geometry([Sphere(center=[0.0, 0.0, 0.0], radius=0.53)])
        coarse = Space.create(Partition.create(((-1.0, 1.0),) * 3, (21, 21, 21)), geo)
        fine = Space.create(Partition.create(((-1.0, 1.0),) * 3, (41, 41, 41)), geo)
        compute_geometry_domain(coarse, model)
        compute_geometry_domain(fine, model)
        for space in (coarse, fine):
            interior = space.part.interior
            dist = _node_distances(space, geo[0].center)[interior]
            assert_array_equal(space.node.gid[interior] == 1, dist <= 0.53)
            assert space.claimed == {1}
            assert check_classification(space) == []
    
    def test_moving_sphere_exposes_nodes(self, model, uniform_primitive):
        sphere = Sphere(center=[0.0, 0.0, 0.0], radius=0.5,
                        velocity=[0.5, 0.0, 0.0], moving=True)
        space = build_space([sphere])
        node = space.node
        compute_geometry_domain(space, model)
        apply_immersed_boundary_treatment(0, space, model)
        gid_before = node.gid.copy()
        
        space.geo.advance(0.1)  # half a cell
        compute_geometry_domain(space, model)
        
        assert check_classification(space) == []
        dist = _node_distances(space, sphere.center)[space.part.interior]
        assert_array_equal(node.gid[space.part.interior] == 1, dist <= 0.5)
        
        exposed = (gid_before == 1) & (node.gid == 0)
        assert np.count_nonzero(exposed) > 0
        Uo = primitive_field(GAMMA, GAS_R, node.U[0][exposed])
        assert_allclose(Uo, np.broadcast_to(uniform_primitive, Uo.shape), rtol=1e-12, atol=1e-12)
    
    def test_touching_bodies_separating_raise(self, model):
        # two moving slabs share the x = 0 plane; fluid only remains near x = +-1
        left = box_polyhedron([-0.7, -1.5, -1.5], [0.0, 1.5, 1.5],
                              velocity=[-1.0, 0.0, 0.0], moving=True)
        right = box_polyhedron([0.0, -1.5, -1.5], [0.7, 1.5, 1.5],
                               velocity=[1.0, 0.0, 0.0], moving=True)
        space = build_space([left, right])
        compute_geometry_domain(space, model)
        assert check_classification(space) == []
        
        space.geo.advance(0.15)
        with pytest.raises(DonorSearchError) as excinfo:
            compute_geometry_domain(space, model)
        err = excinfo.value
        assert err.shape_id is None
        assert err.donor_owner == 0
        x = space.part.point(*err.node)[0]
        assert abs(x) < 0.15
