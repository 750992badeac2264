# -*- coding: utf-8 -*-
"""Shared fixtures: in-memory storage, editor and a small worked problem."""

from types import SimpleNamespace

import pytest

from editor import ProblemEditor
from storage import InMemoryStorage


@pytest.fixture()
def storage():
    return InMemoryStorage()


@pytest.fixture()
def editor(storage):
    return ProblemEditor(storage)


@pytest.fixture()
def shaped_terms(editor):
    """
    Factory inserting three terms into a ``[0, 10]`` variable and shaping
    them into ``(-0.01, 0, 2, 4)``, ``(2, 4, 6, 8)``, ``(6, 8, 10, 10.01)``.

    Returns ``{label: term_id}``.
    """
    def _make(variable_id, labels=('Low', 'Medium', 'High')):
        ids = [editor.partitions.insert_term(variable_id, label) for label in labels]
        editor.partitions.update_term(ids[1], 2, 4, 6, 8)
        return dict(zip(labels, ids))
    return _make


@pytest.fixture()
def worked_problem(editor, shaped_terms):
    """Two inputs X, Y and one output Out, all over [0, 10], three rules assigned."""
    problem = editor.create_problem('Worked')
    x = editor.add_input_variable(problem.id, 'X', 0, 10)
    y = editor.add_input_variable(problem.id, 'Y', 0, 10)
    x_terms = shaped_terms(x.id)
    y_terms = shaped_terms(y.id)
    out = editor.add_output_variable(problem.id, 'Out', 0, 10)
    out_terms = shaped_terms(out.id, ('OutLow', 'OutMedium', 'OutHigh'))
    for label in ('Low', 'Medium', 'High'):
        editor.rules.assign_by_labels(out.id, {x.id: label, y.id: label}, 'Out' + label)
    return SimpleNamespace(problem=problem, x=x, y=y, out=out, x_terms=x_terms,
                           y_terms=y_terms, out_terms=out_terms)
