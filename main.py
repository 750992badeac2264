#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Fuzzy Decision Engine: Demo Entry Point
========================================

Usage
-----
    python main.py [method]

Phases
------
1. Build problem      – two inputs, one output, default partitions
2. Edit partitions    – insert / update / remove terms with rule repair
3. Assign rules       – fill the rule matrix by labels
4. Audit              – partition and rule-matrix consistency
5. Evaluate           – every defuzzification method
6. Figures            – partition and output plots
"""

import logging
import sys

from config import DefuzzificationMethod, get_config
from editor import ProblemEditor
from inference import InferenceEngine
from analysis import audit_problem
from loggers import log_exceptions, setup_logging, timed_operation
from storage import InMemoryStorage
from visualization import PartitionPlotter

logger = logging.getLogger('fuzzy_engine')

LEVELS = ['Low', 'Medium', 'High']
RULES = {
    ('Low', 'Low'): 'Low',
    ('Low', 'Medium'): 'Low',
    ('Medium', 'Low'): 'Low',
    ('Medium', 'Medium'): 'Medium',
    ('High', 'Medium'): 'High',
    ('Medium', 'High'): 'High',
    ('High', 'High'): 'High',
}


@log_exceptions(logger)
def run(methods) -> None:
    """Build the demo problem, evaluate it and write figures."""
    config = get_config()
    config.paths.ensure_directories()
    console, debug = setup_logging(config.output_dir)
    console.banner('Fuzzy Decision Engine', 'Ruspini partitions, rule matrix, inference')

    storage = InMemoryStorage()
    editor = ProblemEditor(storage)
    partitions = editor.partitions

    with console.phase('Build problem') as p:
        problem = editor.create_problem('Tipping', 'Tip from service and food quality')
        service = editor.add_input_variable(problem.id, 'Service', 0, 10, LEVELS)
        food = editor.add_input_variable(problem.id, 'Food', 0, 10, LEVELS)
        tip = editor.add_output_variable(problem.id, 'Tip', 0, 30, LEVELS)
        p.metric('Rule rows', len(editor.rules.get_rows(tip.id)))

    with console.phase('Edit partitions') as p:
        extra = partitions.insert_term(food.id, 'Excellent')
        p.detail(f'inserted term {extra}, rows now {len(editor.rules.get_rows(tip.id))}')
        partitions.remove_term(extra)
        p.detail(f'removed term {extra}, rows now {len(editor.rules.get_rows(tip.id))}')
        for var in (service, food, tip):
            console.show_partition(var, partitions.get_terms(var.id))

    with console.phase('Assign rules') as p:
        for (s_label, f_label), out_label in RULES.items():
            editor.rules.assign_by_labels(tip.id, {service.id: s_label, food.id: f_label},
                                          out_label)
        p.metric('Assigned', len(RULES))

    with console.phase('Audit') as p:
        report = audit_problem(storage, problem.id)
        p.metric('Status', 'PASSED' if report.ok else 'FAILED')
        debug.log_data('audit', report.to_frame())

    engine = InferenceEngine(storage)
    results = {}
    with console.phase('Evaluate'):
        with timed_operation(logger, 'evaluation of all methods'):
            for method in methods:
                results[method] = engine.evaluate(
                    problem.id, {service.id: 3.0, food.id: 7.5}, method=method)
        for result in results.values():
            console.show_evaluation(result)

    with console.phase('Figures') as p:
        plotter = PartitionPlotter(str(config.paths.figures_dir), config.visualization.dpi,
                                   config.visualization.figsize,
                                   config.visualization.curve_points)
        for var in (service, food, tip):
            plotter.plot_partition(var, partitions.get_terms(var.id))
        first = next(iter(results.values()))
        out = first.output('Tip')
        plotter.plot_output(tip, partitions.get_terms(tip.id), out.strengths,
                            out.crisp_value, first.method.value)
        p.metric('Figures', len(plotter.get_generated_figures()))

    console.success(f'debug log written to {debug.close()}')


def main() -> None:
    """Parse the optional method argument and run the demo."""
    if len(sys.argv) > 1:
        methods = [DefuzzificationMethod(sys.argv[1].lower())]
    else:
        methods = list(DefuzzificationMethod)
    try:
        run(methods)
    except Exception as e:
        print(f"\n  ERROR: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
