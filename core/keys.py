# -*- coding: utf-8 -*-
"""
Rule Keys
=========

A rule key is the set of input-term ids a rule row refers to, one id per
input variable.  It is kept as a sorted tuple of integers and compared by
value, never by substring matching.

Canonical text form wraps every id in ``|`` delimiters, ids ascending::

    RuleKey((3, 1, 2)).encode()   ->  '|1||2||3|'
    RuleKey.decode('|1||2||3|')   ->  RuleKey(ids=(1, 2, 3))
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

_TOKEN = re.compile(r'\|(\d+)\|')


@dataclass(frozen=True)
class RuleKey:
    """Immutable, sorted set of input-term ids."""
    ids: Tuple[int, ...] = ()

    def __init__(self, ids: Iterable[int] = ()):
        object.__setattr__(self, 'ids', tuple(sorted(set(int(i) for i in ids))))

    # ------------------------------------------------------------------
    # Set-like helpers
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[int]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, term_id: object) -> bool:
        return term_id in self.ids

    def with_term(self, term_id: int) -> 'RuleKey':
        return RuleKey(self.ids + (term_id,))

    def without_term(self, term_id: int) -> 'RuleKey':
        return RuleKey(i for i in self.ids if i != term_id)

    def replace_term(self, old_id: int, new_id: int) -> 'RuleKey':
        """Swap ``old_id`` for ``new_id``; unchanged if ``old_id`` is absent."""
        if old_id not in self.ids:
            return self
        return RuleKey([new_id if i == old_id else i for i in self.ids])

    # ------------------------------------------------------------------
    # Text form
    # ------------------------------------------------------------------

    def encode(self) -> str:
        return ''.join(f'|{i}|' for i in self.ids)

    @classmethod
    def decode(cls, text: str) -> 'RuleKey':
        """Parse the canonical text form.

        Raises
        ------
        ValueError
            If *text* is not a sequence of ``|<int>|`` tokens.
        """
        text = (text or '').strip()
        tokens = _TOKEN.findall(text)
        if ''.join(f'|{t}|' for t in tokens) != text:
            raise ValueError(f"Malformed rule key: {text!r}")
        return cls(int(t) for t in tokens)

    def __str__(self) -> str:
        return self.encode()


__all__ = ['RuleKey']
