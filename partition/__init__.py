# -*- coding: utf-8 -*-
"""
Partition Module
================

Ruspini partitions of linguistic variables.

Components
----------
membership
    Trapezoidal / triangular membership, scalar and vectorised.
invariant
    ``validate_partition`` with explicit boundary tags.
geometry
    Split, merge, snap, swap and rescale calculations.
store
    ``PartitionStore``: atomic structural edits with rule repair.
"""

from .membership import (
    membership,
    membership_with_edges,
    membership_array,
    term_membership,
    MembershipEvaluator,
)
from .invariant import (
    Boundary,
    boundary_positions,
    PartitionReport,
    PartitionInvariant,
    membership_sum,
    sort_terms,
    validate_partition,
)
from .geometry import default_partition, guard_epsilon
from .store import PartitionStore

__all__ = [
    'membership',
    'membership_with_edges',
    'membership_array',
    'term_membership',
    'MembershipEvaluator',
    'Boundary',
    'boundary_positions',
    'PartitionReport',
    'PartitionInvariant',
    'membership_sum',
    'sort_terms',
    'validate_partition',
    'default_partition',
    'guard_epsilon',
    'PartitionStore',
]
