# -*- coding: utf-8 -*-
"""
Inference Module
================

Four-stage Mamdani inference: fuzzification, rule evaluation (min),
aggregation (max) and sampled defuzzification.

Example
-------
>>> from inference import InferenceEngine
>>> engine = InferenceEngine(storage)
>>> result = engine.evaluate(problem_id, {service_id: 7.5}, method='centroid')
>>> result.crisp_values
"""

from .results import FuzzifiedInput, FiredRule, OutputResult, EvaluationResult
from .fuzzification import fuzzify, fuzzify_inputs
from .evaluation import evaluate_rules, aggregate
from .defuzzification import (
    resolve_method,
    sample_points,
    aggregated_curve,
    reduce_curve,
    defuzzify,
)
from .engine import InferenceEngine, collect_inputs

__all__ = [
    'FuzzifiedInput',
    'FiredRule',
    'OutputResult',
    'EvaluationResult',
    'fuzzify',
    'fuzzify_inputs',
    'evaluate_rules',
    'aggregate',
    'resolve_method',
    'sample_points',
    'aggregated_curve',
    'reduce_curve',
    'defuzzify',
    'InferenceEngine',
    'collect_inputs',
]
