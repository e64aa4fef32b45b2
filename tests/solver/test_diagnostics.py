"""
Tests for classification summaries and the invariant checker.
"""

import numpy as np

from sharpib.solvers import classification_summary, check_classification


class TestClassificationSummary:
    
    def test_counts(self, sphere_space):
        node, part = sphere_space.node, sphere_space.part
        summary = classification_summary(sphere_space)
        total = int(np.prod(part.m))
        assert summary.fluid + summary.solid[1] == total
        assert summary.interfacial == np.count_nonzero(node.lid)
        assert sum(summary.ghost.values()) == np.count_nonzero(node.gst)
        assert set(summary.ghost) == {1, 2}
        assert summary.pending == 0
        assert "fluid" in str(summary)


class TestCheckClassification:
    
    def test_consistent(self, sphere_space, box_space):
        assert check_classification(sphere_space) == []
        assert check_classification(box_space) == []
    
    def test_ghost_without_interface(self, sphere_space):
        node = sphere_space.node
        k, j, i = [int(a[0]) for a in np.nonzero(node.gst == 1)]
        node.lid[k, j, i] = 0
        violations = check_classification(sphere_space)
        assert any("not interfacial" in v for v in violations)
    
    def test_interfacial_fluid(self, sphere_space):
        node = sphere_space.node
        k, j, i = [int(a[0]) for a in np.nonzero(node.gid == 0)]
        node.lid[k, j, i] = 1
        violations = check_classification(sphere_space)
        assert any("not owned" in v for v in violations)
    
    def test_invalid_owner_and_pending(self, sphere_space):
        node, part = sphere_space.node, sphere_space.part
        node.gid[part.ns_min[2], part.ns_min[1], part.ns_min[0]] = 5
        node.pending[part.ns_min[2], part.ns_min[1], part.ns_min[0]] = True
        violations = check_classification(sphere_space)
        assert any("invalid owner" in v for v in violations)
        assert any("pending" in v for v in violations)
