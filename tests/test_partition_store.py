# -*- coding: utf-8 -*-
"""
Unit tests for PartitionStore structural edits.

Covers:
  - insert: first term, rightmost split, repeated inserts
  - remove: every position, down to an empty partition
  - update: neighbour snapping, triangle flag, rejected bounds, rollback,
    outer edges of every position followed by insert and remove
  - swap and rescale
  - atomicity when the storage backend fails mid-write
"""

import numpy as np
import pytest

from core.exceptions import (
    DataInconsistencyError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from partition.invariant import membership_sum
from storage import InMemoryStorage
from editor import ProblemEditor


def _assert_ruspini(partitions, variable):
    terms = partitions.get_terms(variable.id)
    xs = np.linspace(variable.start, variable.end, 1000)
    assert np.max(np.abs(membership_sum(terms, xs) - 1.0)) < 1e-3
    assert abs(terms[0].b - variable.start) < 1e-9
    assert terms[0].a <= variable.start
    assert abs(terms[-1].effective_c - variable.end) < 1e-9
    assert terms[-1].d >= variable.end


@pytest.fixture()
def partitions(editor):
    return editor.partitions


@pytest.fixture()
def variable(editor):
    problem = editor.create_problem('Partition')
    return editor.add_input_variable(problem.id, 'X', 0, 10)


# ---------------------------------------------------------------------------
# TestInsertTerm
# ---------------------------------------------------------------------------

class TestInsertTerm:
    def test_first_term_covers_universe(self, partitions, variable):
        term_id = partitions.insert_term(variable.id, 'All')
        (term,) = partitions.get_terms(variable.id)
        assert term.id == term_id
        assert term.geometry == pytest.approx((-0.01, 0, 10, 10.01))

    def test_second_term_splits_the_first(self, partitions, variable):
        first = partitions.insert_term(variable.id, 'Low')
        second = partitions.insert_term(variable.id, 'High')
        low, high = partitions.get_terms(variable.id)
        assert (low.id, high.id) == (first, second)
        assert low.geometry == pytest.approx((-0.01, 0, 2.5025, 7.5075))
        assert high.geometry == pytest.approx((2.5025, 7.5075, 10, 10.01))

    def test_third_term_splits_rightmost(self, partitions, variable):
        for label in ('A', 'B', 'C'):
            partitions.insert_term(variable.id, label)
        terms = partitions.get_terms(variable.id)
        assert [t.label for t in terms] == ['A', 'B', 'C']
        assert terms[1].geometry == pytest.approx((2.5025, 7.5075, 8.133125, 9.384375))
        assert terms[2].geometry == pytest.approx((8.133125, 9.384375, 10, 10.01))

    @pytest.mark.parametrize('n', [1, 2, 3, 4, 5])
    def test_inserts_keep_partition(self, partitions, variable, n):
        for i in range(n):
            partitions.insert_term(variable.id, f'T{i}')
            _assert_ruspini(partitions, variable)
        assert len(partitions.get_terms(variable.id)) == n
        assert partitions.validate(variable.id).ok

    def test_empty_label_rejected(self, partitions, variable):
        with pytest.raises(ValidationError):
            partitions.insert_term(variable.id, '   ')
        assert partitions.get_terms(variable.id) == []

    def test_unknown_variable(self, partitions):
        with pytest.raises(NotFoundError):
            partitions.insert_term(999, 'Low')


# ---------------------------------------------------------------------------
# TestRemoveTerm
# ---------------------------------------------------------------------------

class TestRemoveTerm:
    @pytest.mark.parametrize('position', [0, 1, 2, 3])
    def test_remove_each_position(self, partitions, variable, position):
        for i in range(4):
            partitions.insert_term(variable.id, f'T{i}')
        victim = partitions.get_terms(variable.id)[position]
        remaining = partitions.remove_term(victim.id)
        assert victim.id not in [t.id for t in remaining]
        assert len(partitions.get_terms(variable.id)) == 3
        _assert_ruspini(partitions, variable)

    def test_remove_until_empty(self, partitions, variable):
        for i in range(5):
            partitions.insert_term(variable.id, f'T{i}')
        while partitions.get_terms(variable.id):
            partitions.remove_term(partitions.get_terms(variable.id)[0].id)
            if partitions.get_terms(variable.id):
                _assert_ruspini(partitions, variable)
        assert partitions.get_terms(variable.id) == []

    def test_mixed_edit_sequence(self, partitions, variable):
        ids = [partitions.insert_term(variable.id, f'T{i}') for i in range(3)]
        partitions.remove_term(ids[1])
        _assert_ruspini(partitions, variable)
        partitions.insert_term(variable.id, 'T3')
        _assert_ruspini(partitions, variable)
        partitions.remove_term(ids[0])
        _assert_ruspini(partitions, variable)
        partitions.insert_term(variable.id, 'T4')
        _assert_ruspini(partitions, variable)
        assert len(partitions.get_terms(variable.id)) == 3

    def test_unknown_term(self, partitions):
        with pytest.raises(NotFoundError):
            partitions.remove_term(12345)


# ---------------------------------------------------------------------------
# TestUpdateTerm
# ---------------------------------------------------------------------------

class TestUpdateTerm:
    def test_neighbours_snap_to_edited_edges(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        low, medium, high = partitions.get_terms(variable.id)
        assert low.geometry == pytest.approx((-0.01, 0, 2, 4))
        assert medium.geometry == (2, 4, 6, 8)
        assert high.geometry == pytest.approx((6, 8, 10, 10.01))

        partitions.update_term(ids['Medium'], 3, 4.5, 5.5, 7)
        low, medium, high = partitions.get_terms(variable.id)
        assert (low.c, low.d) == (3, 4.5)
        assert (high.a, high.b) == (5.5, 7)
        _assert_ruspini(partitions, variable)

    def test_triangle_collapses_plateau(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        partitions.update_term(ids['Medium'], 2, 4, 6, 8, is_triangle=True)
        medium = partitions.storage.get_term(ids['Medium'])
        high = partitions.storage.get_term(ids['High'])
        assert medium.is_triangle
        assert medium.c == 4
        assert (high.a, high.b) == (4, 8)
        _assert_ruspini(partitions, variable)

    def test_relabel(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        partitions.update_term(ids['Low'], -0.01, 0, 2, 4, label='Small')
        assert partitions.storage.get_term(ids['Low']).label == 'Small'

    @pytest.mark.parametrize('bounds', [
        (5, 4, 6, 8),
        (2, 4, 3, 8),
        (2, 4, 8, 8),
        (2, 4, 6, float('nan')),
        (float('-inf'), 4, 6, 8),
    ])
    def test_invalid_bounds_rejected(self, partitions, variable, shaped_terms, bounds):
        ids = shaped_terms(variable.id)
        before = partitions.get_terms(variable.id)
        with pytest.raises(ValidationError):
            partitions.update_term(ids['Medium'], *bounds)
        assert partitions.get_terms(variable.id) == before

    def test_broken_partition_rolls_back(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        before = partitions.get_terms(variable.id)
        with pytest.raises(DataInconsistencyError) as excinfo:
            partitions.update_term(ids['Low'], -0.01, 1, 2, 4)
        assert excinfo.value.violations
        assert partitions.get_terms(variable.id) == before
        assert partitions.validate(variable.id).ok

    def test_data_inconsistency_is_engine_error(self, partitions, variable, shaped_terms):
        from core.exceptions import FuzzyEngineError
        ids = shaped_terms(variable.id)
        with pytest.raises(FuzzyEngineError):
            partitions.update_term(ids['Low'], -0.01, 1, 2, 4)

    def test_insert_after_widening_last_shoulder(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        partitions.update_term(ids['High'], 6, 8, 10, 12)
        assert partitions.validate(variable.id).ok

        new_id = partitions.insert_term(variable.id, 'VeryHigh')
        high = partitions.storage.get_term(ids['High'])
        very_high = partitions.storage.get_term(new_id)
        assert high.geometry == pytest.approx((6, 8, 8.5025, 9.5075))
        assert very_high.geometry == pytest.approx((8.5025, 9.5075, 10, 12))
        _assert_ruspini(partitions, variable)

    def test_insert_after_last_triangle_at_end(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        partitions.update_term(ids['High'], 6, 10, 10, 12, is_triangle=True)
        _assert_ruspini(partitions, variable)

        new_id = partitions.insert_term(variable.id, 'VeryHigh')
        medium = partitions.storage.get_term(ids['Medium'])
        high = partitions.storage.get_term(ids['High'])
        assert (medium.c, medium.d) == (6, 8)
        assert high.is_triangle and high.geometry == (6, 8, 8, 9)
        assert partitions.storage.get_term(new_id).geometry == (8, 9, 10, 12)
        _assert_ruspini(partitions, variable)

    @pytest.mark.parametrize('n', [1, 2, 3, 4, 5])
    def test_update_each_position_then_insert_and_remove(self, partitions, variable, n):
        for i in range(n):
            partitions.insert_term(variable.id, f'T{i}')

        for position in range(n):
            term = partitions.get_terms(variable.id)[position]
            a, b, c, d = term.geometry
            if position == 0:
                a = variable.start - 2
            if position == n - 1:
                d = variable.end + 2
            if 0 < position < n - 1:
                c = (c + d) / 2
            partitions.update_term(term.id, a, b, c, d)
            _assert_ruspini(partitions, variable)

        terms = partitions.get_terms(variable.id)
        assert terms[0].a == variable.start - 2
        assert terms[-1].d == variable.end + 2

        new_id = partitions.insert_term(variable.id, 'Extra')
        _assert_ruspini(partitions, variable)
        terms = partitions.get_terms(variable.id)
        assert terms[-1].id == new_id
        assert terms[-1].d == variable.end + 2

        partitions.remove_term(terms[(len(terms) - 1) // 2].id)
        _assert_ruspini(partitions, variable)
        partitions.remove_term(new_id)
        if partitions.get_terms(variable.id):
            _assert_ruspini(partitions, variable)
        assert len(partitions.get_terms(variable.id)) == n - 1


# ---------------------------------------------------------------------------
# TestSwapAndRescale
# ---------------------------------------------------------------------------

class TestSwapAndRescale:
    def test_swap_exchanges_geometry(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        low_before = partitions.storage.get_term(ids['Low'])
        high_before = partitions.storage.get_term(ids['High'])
        partitions.swap_terms(ids['Low'], ids['High'])
        low = partitions.storage.get_term(ids['Low'])
        high = partitions.storage.get_term(ids['High'])
        assert low.geometry == high_before.geometry
        assert high.geometry == low_before.geometry
        assert low.label == 'Low'
        assert [t.label for t in partitions.get_terms(variable.id)] == ['High', 'Medium', 'Low']
        _assert_ruspini(partitions, variable)

    def test_swap_with_itself_is_noop(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        before = partitions.get_terms(variable.id)
        assert partitions.swap_terms(ids['Low'], ids['Low']) == before

    def test_swap_across_variables_rejected(self, editor, partitions, variable, shaped_terms):
        other = editor.add_input_variable(variable.problem_id, 'Y', 0, 10, ['Only'])
        ids = shaped_terms(variable.id)
        (only,) = partitions.get_terms(other.id)
        with pytest.raises(ValidationError):
            partitions.swap_terms(ids['Low'], only.id)

    def test_rescale(self, partitions, variable, shaped_terms):
        ids = shaped_terms(variable.id)
        terms = partitions.rescale(variable.id, 100, 200)
        moved = partitions.storage.get_variable(variable.id)
        assert (moved.start, moved.end) == (100, 200)
        assert partitions.storage.get_term(ids['Medium']).geometry == pytest.approx(
            (120, 140, 160, 180))
        assert len(terms) == 3
        _assert_ruspini(partitions, moved)

    @pytest.mark.parametrize('start, end', [(5, 5), (10, 0), (0, float('inf'))])
    def test_rescale_rejects_bad_universe(self, partitions, variable, start, end):
        with pytest.raises(ValidationError):
            partitions.rescale(variable.id, start, end)


# ---------------------------------------------------------------------------
# TestStorageFailure
# ---------------------------------------------------------------------------

class FlakyStorage(InMemoryStorage):
    """Fails on the next ``add_term`` once armed."""

    def __init__(self):
        super().__init__()
        self.armed = False

    def add_term(self, term):
        if self.armed:
            self.armed = False
            raise RuntimeError('disk full')
        super().add_term(term)


class TestStorageFailure:
    def test_failed_insert_leaves_storage_untouched(self):
        storage = FlakyStorage()
        editor = ProblemEditor(storage)
        problem = editor.create_problem('Flaky')
        x = editor.add_input_variable(problem.id, 'X', 0, 10, ['Low', 'High'])
        out = editor.add_output_variable(problem.id, 'Out', 0, 1, ['No', 'Yes'])
        terms_before = editor.partitions.get_terms(x.id)
        rules_before = editor.rules.get_rules(out.id)

        storage.armed = True
        with pytest.raises(InternalError):
            editor.partitions.insert_term(x.id, 'Medium')

        assert editor.partitions.get_terms(x.id) == terms_before
        assert editor.rules.get_rules(out.id) == rules_before
        assert not storage.in_transaction
