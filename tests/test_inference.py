# -*- coding: utf-8 -*-
"""
Unit tests for the inference pipeline.

Covers:
  - rule evaluation (min) and aggregation (max)
  - defuzzification methods and their empty-output fallbacks
  - InferenceEngine end-to-end on a small worked problem
  - input validation, stale rule rows and parallel evaluation
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from config import DefuzzificationMethod, InferenceConfig
from core.entities import Rule, Term
from core.exceptions import NotFoundError, ValidationError
from core.keys import RuleKey
from inference import (
    InferenceEngine,
    aggregate,
    defuzzify,
    evaluate_rules,
    resolve_method,
)


@pytest.fixture()
def engine(storage):
    return InferenceEngine(storage, InferenceConfig())


@pytest.fixture()
def medium():
    return Term(7, 1, 'Medium', 2, 4, 6, 8)


# ---------------------------------------------------------------------------
# TestRuleEvaluation
# ---------------------------------------------------------------------------

class TestRuleEvaluation:
    def test_min_over_key(self):
        rules = [Rule(1, 9, RuleKey([1, 2]), output_term_id=50)]
        (fired,) = evaluate_rules(rules, {1: 0.7, 2: 0.4})
        assert fired.strength == 0.4
        assert fired.output_term_id == 50

    def test_zero_strength_does_not_fire(self):
        rules = [Rule(1, 9, RuleKey([1, 2]), output_term_id=50)]
        assert evaluate_rules(rules, {1: 0.7, 2: 0.0}) == []

    def test_unassigned_and_empty_rows_skipped(self):
        rules = [Rule(1, 9, RuleKey([1]), output_term_id=None),
                 Rule(2, 9, RuleKey(), output_term_id=50)]
        assert evaluate_rules(rules, {1: 1.0}) == []

    def test_stale_term_skipped(self):
        rules = [Rule(1, 9, RuleKey([1, 404]), output_term_id=50),
                 Rule(2, 9, RuleKey([1]), output_term_id=51)]
        fired = evaluate_rules(rules, {1: 0.8})
        assert [f.rule_id for f in fired] == [2]

    def test_aggregate_takes_maximum(self):
        rules = [Rule(1, 9, RuleKey([1]), output_term_id=50),
                 Rule(2, 9, RuleKey([2]), output_term_id=50),
                 Rule(3, 9, RuleKey([3]), output_term_id=51)]
        strengths = aggregate(evaluate_rules(rules, {1: 0.3, 2: 0.6, 3: 0.2}))
        assert strengths == {50: 0.6, 51: 0.2}


# ---------------------------------------------------------------------------
# TestDefuzzification
# ---------------------------------------------------------------------------

class TestDefuzzification:
    def test_symmetric_term(self, medium):
        strengths = {medium.id: 1.0}
        for method in ('centroid', 'bisector', 'mom'):
            value = defuzzify([medium], strengths, 0, 10, method, resolution=101)
            assert abs(value - 5.0) < 1e-9, method
        assert abs(defuzzify([medium], strengths, 0, 10, 'som', 101) - 4.0) < 1e-9
        assert abs(defuzzify([medium], strengths, 0, 10, 'lom', 101) - 6.0) < 1e-9

    def test_clipping_widens_plateau(self, medium):
        strengths = {medium.id: 0.5}
        assert abs(defuzzify([medium], strengths, 0, 10, 'som', 101) - 3.0) < 1e-9
        assert abs(defuzzify([medium], strengths, 0, 10, 'lom', 101) - 7.0) < 1e-9

    @pytest.mark.parametrize('method, expected', [
        ('centroid', 5.0), ('bisector', 5.0), ('mom', 5.0), ('som', 2.0), ('lom', 8.0),
    ])
    def test_empty_aggregation_fallback(self, medium, method, expected):
        assert defuzzify([medium], {}, 2, 8, method) == expected
        assert defuzzify([], {}, 2, 8, method) == expected

    def test_unknown_strength_ids_ignored(self, medium):
        assert defuzzify([medium], {999: 1.0}, 0, 10) == 5.0

    def test_resolution_lower_bound(self, medium):
        with pytest.raises(ValidationError):
            defuzzify([medium], {medium.id: 1.0}, 0, 10, resolution=1)
        value = defuzzify([medium], {medium.id: 1.0}, 0, 10, resolution=2)
        assert 0.0 <= value <= 10.0

    def test_resolve_method(self):
        assert resolve_method('LOM') is DefuzzificationMethod.LOM
        assert resolve_method(DefuzzificationMethod.MOM) is DefuzzificationMethod.MOM
        with pytest.raises(ValidationError):
            resolve_method('median')


# ---------------------------------------------------------------------------
# TestInferenceEngine
# ---------------------------------------------------------------------------

class TestInferenceEngine:
    def test_worked_example(self, engine, worked_problem):
        wp = worked_problem
        result = engine.evaluate(wp.problem.id, {wp.x.id: 3.0, wp.y.id: 3.0})
        out = result.output('Out')

        assert result.method is DefuzzificationMethod.CENTROID
        assert result.resolution == 100
        assert out.fired_rules == 2
        assert abs(out.strengths[wp.out_terms['OutLow']] - 0.5) < 1e-12
        assert abs(out.strengths[wp.out_terms['OutMedium']] - 0.5) < 1e-12
        assert wp.out_terms['OutHigh'] not in out.strengths
        # OutLow centroid ~1.56, OutMedium centroid 5
        assert 1.56 < out.crisp_value < 5.0
        assert abs(out.crisp_value - 3.7556) < 0.1

    def test_deterministic(self, engine, worked_problem):
        wp = worked_problem
        inputs = {wp.x.id: 3.0, wp.y.id: 3.0}
        first = engine.evaluate(wp.problem.id, inputs).crisp_values
        second = engine.evaluate(wp.problem.id, inputs).crisp_values
        assert first == second

    def test_membership_breakdown(self, engine, worked_problem):
        wp = worked_problem
        result = engine.evaluate(wp.problem.id, [(wp.x.id, 3.0), (wp.y.id, 9.0)])
        x_input = next(i for i in result.inputs if i.name == 'X')
        assert abs(x_input.degree_of('Low') - 0.5) < 1e-12
        assert abs(x_input.degree_of('Medium') - 0.5) < 1e-12
        assert x_input.degree_of('High') == 0.0
        frame = result.memberships_frame()
        assert len(frame) == 6
        assert list(result.outputs_frame()['variable']) == ['Out']

    @pytest.mark.parametrize('method, expected', [
        ('centroid', 5.0), ('bisector', 5.0), ('mom', 5.0), ('som', 0.0), ('lom', 10.0),
    ])
    def test_nothing_fires(self, engine, worked_problem, method, expected):
        wp = worked_problem
        result = engine.evaluate(wp.problem.id, {wp.x.id: 0.0, wp.y.id: 10.0}, method=method)
        out = result.output('Out')
        assert out.fired_rules == 0
        assert abs(out.crisp_value - expected) < 1e-12

    def test_all_methods_stay_in_universe(self, engine, worked_problem):
        wp = worked_problem
        for method in DefuzzificationMethod:
            value = engine.evaluate(wp.problem.id, {wp.x.id: 6.5, wp.y.id: 7.0},
                                    method=method).crisp_values[wp.out.id]
            assert 0.0 <= value <= 10.0

    def test_missing_input(self, engine, worked_problem):
        wp = worked_problem
        with pytest.raises(ValidationError, match="Missing input value for parameter 'Y'"):
            engine.evaluate(wp.problem.id, {wp.x.id: 3.0})

    @pytest.mark.parametrize('bad', ['unknown', 'duplicate', 'nan', 'text'])
    def test_invalid_inputs(self, engine, worked_problem, bad):
        wp = worked_problem
        inputs = {
            'unknown': [(wp.x.id, 1.0), (wp.y.id, 1.0), (wp.out.id, 1.0)],
            'duplicate': [(wp.x.id, 1.0), (wp.x.id, 2.0), (wp.y.id, 1.0)],
            'nan': [(wp.x.id, float('nan')), (wp.y.id, 1.0)],
            'text': [(wp.x.id, 'abc'), (wp.y.id, 1.0)],
        }[bad]
        with pytest.raises(ValidationError):
            engine.evaluate(wp.problem.id, inputs)

    @pytest.mark.parametrize('resolution', [1, 0, True, 2.5])
    def test_invalid_resolution(self, engine, worked_problem, resolution):
        wp = worked_problem
        with pytest.raises(ValidationError):
            engine.evaluate(wp.problem.id, {wp.x.id: 1.0, wp.y.id: 1.0},
                            resolution=resolution)

    def test_numpy_integer_resolution(self, engine, worked_problem):
        wp = worked_problem
        result = engine.evaluate(wp.problem.id, {wp.x.id: 1.0, wp.y.id: 1.0},
                                 resolution=np.int64(50))
        assert result.resolution == 50

    def test_unknown_method(self, engine, worked_problem):
        wp = worked_problem
        with pytest.raises(ValidationError):
            engine.evaluate(wp.problem.id, {wp.x.id: 1.0, wp.y.id: 1.0}, method='median')

    def test_unknown_problem(self, engine):
        with pytest.raises(NotFoundError):
            engine.evaluate(4242, {})

    def test_stale_row_is_skipped(self, storage, engine, worked_problem):
        wp = worked_problem
        inputs = {wp.x.id: 3.0, wp.y.id: 3.0}
        before = engine.evaluate(wp.problem.id, inputs).output('Out')
        storage.add_rule(Rule(storage.allocate_id('rule'), wp.out.id,
                              RuleKey([wp.x_terms['Low'], 9999]),
                              output_term_id=wp.out_terms['OutHigh']))
        after = engine.evaluate(wp.problem.id, inputs).output('Out')
        assert after.fired_rules == before.fired_rules
        assert after.crisp_value == before.crisp_value

    def test_edge_saturation(self, storage, worked_problem):
        wp = worked_problem
        inputs = {wp.x.id: -5.0, wp.y.id: -5.0}
        plain = InferenceEngine(storage, InferenceConfig()).evaluate(wp.problem.id, inputs)
        saturated = InferenceEngine(storage, InferenceConfig(saturate_edges=True)).evaluate(
            wp.problem.id, inputs)
        assert plain.output('Out').fired_rules == 0
        assert saturated.output('Out').fired_rules == 1
        assert saturated.output('Out').crisp_value < 5.0

    def test_parallel_evaluations_agree(self, engine, worked_problem):
        wp = worked_problem
        inputs = {wp.x.id: 4.2, wp.y.id: 5.1}
        expected = engine.evaluate(wp.problem.id, inputs).crisp_values
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: engine.evaluate(wp.problem.id, inputs),
                                    range(8)))
        assert all(r.crisp_values == expected for r in results)
