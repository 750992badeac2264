# -*- coding: utf-8 -*-
"""
Inference Engine
================

Stateless Mamdani pipeline over a consistent snapshot of one problem:

1. Fuzzification   crisp inputs -> term membership degrees
2. Rule evaluation min T-norm over each rule's key
3. Aggregation     max S-norm per output term
4. Defuzzification sampled centroid / bisector / MOM / SOM / LOM

Evaluations only read storage, so several may run in parallel threads.
"""

import math
import numbers
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from config import DefuzzificationMethod, InferenceConfig, get_config
from core.entities import Variable
from core.exceptions import ValidationError
from loggers import log_context, get_module_logger
from partition.membership import MembershipEvaluator
from storage.base import Storage
from .defuzzification import defuzzify, resolve_method
from .evaluation import aggregate, evaluate_rules
from .fuzzification import fuzzify_inputs
from .results import EvaluationResult, OutputResult

logger = get_module_logger(__name__)

Inputs = Union[Mapping[int, float], Iterable[Tuple[int, float]]]


def collect_inputs(variables: Sequence[Variable], inputs: Inputs) -> Dict[int, float]:
    """
    Check supplied ``(input_variable_id, crisp_value)`` pairs.

    Raises
    ------
    ValidationError
        On a missing input, an unknown or duplicated variable id, or a value
        that is not a finite number.
    """
    pairs = list(inputs.items()) if isinstance(inputs, Mapping) else list(inputs)
    known = {v.id: v for v in variables}
    values: Dict[int, float] = {}
    for var_id, value in pairs:
        if var_id not in known:
            raise ValidationError(f"variable {var_id} is not an input variable of this problem")
        if var_id in values:
            raise ValidationError(f"input value for {known[var_id].name!r} supplied twice")
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ValidationError(
                f"input value for {known[var_id].name!r} is not a number: {value!r}") from None
        if not math.isfinite(value):
            raise ValidationError(f"input value for {known[var_id].name!r} must be finite")
        values[var_id] = value
    for var in variables:
        if var.id not in values:
            raise ValidationError(f"Missing input value for parameter '{var.name}'")
    return values


class InferenceEngine:
    """
    Evaluate problems read through a storage backend.

    Parameters
    ----------
    storage : Storage
    config : InferenceConfig, optional
        Default method, resolution and edge saturation.
    """

    def __init__(self, storage: Storage, config: Optional[InferenceConfig] = None):
        self.storage = storage
        self.config = config or get_config().inference
        self.evaluator = MembershipEvaluator(saturate_edges=self.config.saturate_edges)

    def evaluate(self, problem_id: int, inputs: Inputs,
                 method: Union[str, DefuzzificationMethod, None] = None,
                 resolution: Optional[int] = None) -> EvaluationResult:
        """
        Turn crisp inputs into one crisp value per output variable.

        Parameters
        ----------
        problem_id : int
        inputs : mapping or iterable of pairs
            ``input_variable_id -> crisp value``; every input variable of the
            problem needs exactly one value.
        method : str or DefuzzificationMethod, optional
            ``'centroid'``, ``'bisector'``, ``'mom'``, ``'som'`` or ``'lom'``.
        resolution : int, optional
            Number of sample points used for defuzzification.

        Returns
        -------
        EvaluationResult
        """
        method = resolve_method(method or self.config.default_method)
        resolution = self.config.default_resolution if resolution is None else resolution
        if (isinstance(resolution, bool) or not isinstance(resolution, numbers.Integral)
                or resolution < 2):
            raise ValidationError(f"resolution must be an integer >= 2, got {resolution!r}")
        resolution = int(resolution)

        snap = self.storage.snapshot(problem_id)
        values = collect_inputs(snap.inputs, inputs)

        with log_context(problem=problem_id):
            memberships, breakdown = fuzzify_inputs(snap.inputs, snap.terms, values,
                                                    self.evaluator)
            result = EvaluationResult(problem_id=problem_id,
                                      problem_name=snap.problem.name,
                                      method=method, resolution=resolution,
                                      inputs=breakdown)
            for output in snap.outputs:
                fired = evaluate_rules(snap.rules_of(output.id), memberships)
                strengths = aggregate(fired)
                crisp = defuzzify(snap.terms_of(output.id), strengths,
                                  output.start, output.end, method, resolution,
                                  self.config.plateau_tolerance)
                result.outputs.append(OutputResult(
                    variable_id=output.id, name=output.name, crisp_value=crisp,
                    fired_rules=len(fired), strengths=strengths,
                ))
                logger.debug("Output %r: %d rule(s) fired, %s = %.6g",
                             output.name, len(fired), method.value, crisp)
        return result


__all__ = ['collect_inputs', 'InferenceEngine']
