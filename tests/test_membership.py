# -*- coding: utf-8 -*-
"""
Unit tests for membership evaluation.

Covers:
  - membership boundary values and linear edges
  - triangular collapse
  - degenerate edges (a = b, c = d)
  - edge-saturation variant and MembershipEvaluator
  - vectorised evaluation agreeing with the scalar form
"""

import numpy as np
import pytest

from core.entities import Term
from partition.membership import (
    MembershipEvaluator,
    membership,
    membership_array,
    membership_with_edges,
    term_membership,
)


# ---------------------------------------------------------------------------
# TestMembership
# ---------------------------------------------------------------------------

class TestMembership:
    def test_boundary_values(self):
        a, b, c, d = 1.0, 3.0, 5.0, 7.0
        assert membership(a, a, b, c, d) == 0.0
        assert membership(d, a, b, c, d) == 0.0
        assert membership(b, a, b, c, d) == 1.0
        assert membership(c, a, b, c, d) == 1.0

    def test_edges_are_linear(self):
        assert abs(membership(2.0, 1, 3, 5, 7) - 0.5) < 1e-12
        assert abs(membership(6.5, 1, 3, 5, 7) - 0.25) < 1e-12

    def test_outside_support(self):
        assert membership(-10.0, 1, 3, 5, 7) == 0.0
        assert membership(10.0, 1, 3, 5, 7) == 0.0

    def test_triangle(self):
        assert abs(membership(1.5, 0, 3, 3, 6) - 0.5) < 1e-12
        assert abs(membership(4.5, 0, 3, 3, 6) - 0.5) < 1e-12
        assert membership(3.0, 0, 3, 3, 6) == 1.0

    def test_triangle_flag_ignores_c(self):
        assert abs(membership(4.5, 0, 3, 5, 6, is_triangle=True) - 0.5) < 1e-12
        assert membership(4.0, 0, 3, 5, 6, is_triangle=False) == 1.0

    def test_degenerate_rising_edge(self):
        assert membership(0.0, 0, 0, 2, 4) == 1.0
        assert membership(-0.1, 0, 0, 2, 4) == 0.0

    def test_degenerate_falling_edge(self):
        assert membership(4.0, 0, 2, 4, 4) == 1.0
        assert membership(4.1, 0, 2, 4, 4) == 0.0

    def test_result_in_unit_interval(self):
        for x in np.linspace(-2, 12, 141):
            mu = membership(float(x), -0.01, 0, 2, 4)
            assert 0.0 <= mu <= 1.0


# ---------------------------------------------------------------------------
# TestEdgeSaturation
# ---------------------------------------------------------------------------

class TestEdgeSaturation:
    def test_left_extension(self):
        assert membership_with_edges(-5.0, 0, 0.01, 2, 4, extend_left=True) == 1.0
        assert membership_with_edges(-5.0, 0, 0.01, 2, 4) == 0.0

    def test_right_extension(self):
        assert membership_with_edges(100.0, 6, 8, 10, 10.01, extend_right=True) == 1.0
        assert membership_with_edges(100.0, 6, 8, 10, 10.01) == 0.0

    def test_extension_keeps_opposite_edge(self):
        # a left-saturated term still falls on its right edge
        assert abs(membership_with_edges(3.0, 0, 0, 2, 4, extend_left=True) - 0.5) < 1e-12

    def test_evaluator_saturates_only_boundary_terms(self):
        term = Term(1, 1, 'Low', -0.01, 0, 2, 4)
        saturating = MembershipEvaluator(saturate_edges=True)
        plain = MembershipEvaluator()
        assert saturating.degree(term, -3.0, is_first=True) == 1.0
        assert saturating.degree(term, -3.0) == 0.0
        assert plain.degree(term, -3.0, is_first=True) == 0.0


# ---------------------------------------------------------------------------
# TestVectorised
# ---------------------------------------------------------------------------

class TestVectorised:
    @pytest.mark.parametrize('params', [
        (1, 3, 5, 7, False),
        (0, 3, 3, 6, False),
        (0, 3, 5, 6, True),
        (0, 0, 2, 4, False),
        (0, 2, 4, 4, False),
    ])
    def test_array_matches_scalar(self, params):
        xs = np.linspace(-1, 8, 901)
        vec = membership_array(xs, *params)
        scalar = np.array([membership(float(x), *params) for x in xs])
        assert np.max(np.abs(vec - scalar)) < 1e-12

    def test_term_membership_dispatch(self):
        term = Term(1, 1, 'Mid', 2, 4, 6, 8)
        assert term_membership(term, 3.0) == 0.5
        values = term_membership(term, np.array([3.0, 5.0, 9.0]))
        assert np.allclose(values, [0.5, 1.0, 0.0])
