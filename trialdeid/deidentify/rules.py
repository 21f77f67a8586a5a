"""
trialdeid/deidentify/rules.py

===============================================================================

    Copyright (C) 2015, University of Cambridge, Department of Psychiatry.
    Created by Rudolf Cardinal (rnc1001@cam.ac.uk).

    This file is part of TRIALDEID.

    TRIALDEID is free software: you can redistribute it and/or modify
    it under the terms of the GNU General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    TRIALDEID is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
    GNU General Public License for more details.

    You should have received a copy of the GNU General Public License
    along with TRIALDEID. If not, see <https://www.gnu.org/licenses/>.

===============================================================================

**Heuristic rules for spotting sensitive variables.**

Each rule is a pure predicate over a variable's metadata (name, label,
display format), tagged with the category it detects and whether it looks at
the name, the label or the format. All comparisons are case-insensitive.

"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, List

import regex

from trialdeid.deidentify.constants import (
    AGE_LABEL_WORD,
    AGE_NAME_PREFIX,
    DATE_LABEL_WORD,
    DATE_NAME_SUFFIX,
    DATETIME_NAME_SUFFIX,
    IDENTIFIER_LABEL_WORD,
    IDENTIFIER_NAME_SUFFIX,
    MatchBasis,
    VariableCategory,
)
from trialdeid.deidentify.library import VariableMeta

RulePredicate = Callable[[VariableMeta], bool]


# =============================================================================
# Predicates
# =============================================================================


@lru_cache(maxsize=None)
def _whole_word_regex(word: str) -> "regex.Pattern":
    return regex.compile(rf"\b{regex.escape(word)}\b", regex.IGNORECASE)


def label_has_word(word: str) -> RulePredicate:
    """
    Does the label contain ``word`` as a whole word?
    """
    r = _whole_word_regex(word)

    def predicate(meta: VariableMeta) -> bool:
        return bool(meta.label) and r.search(meta.label) is not None

    return predicate


def name_ends_with(suffix: str) -> RulePredicate:
    suffix = suffix.upper()

    def predicate(meta: VariableMeta) -> bool:
        return meta.name.upper().endswith(suffix)

    return predicate


def name_starts_with(prefix: str) -> RulePredicate:
    prefix = prefix.upper()

    def predicate(meta: VariableMeta) -> bool:
        return meta.name.upper().startswith(prefix)

    return predicate


def name_is(*names: str) -> RulePredicate:
    wanted = frozenset(n.upper() for n in names if n)

    def predicate(meta: VariableMeta) -> bool:
        return meta.name.upper() in wanted

    return predicate


def has_fixed_date_format(meta: VariableMeta) -> bool:
    return meta.is_date_like


def all_of(*predicates: RulePredicate) -> RulePredicate:
    def predicate(meta: VariableMeta) -> bool:
        return all(p(meta) for p in predicates)

    return predicate


def any_of(*predicates: RulePredicate) -> RulePredicate:
    def predicate(meta: VariableMeta) -> bool:
        return any(p(meta) for p in predicates)

    return predicate


def none_of(*predicates: RulePredicate) -> RulePredicate:
    def predicate(meta: VariableMeta) -> bool:
        return not any(p(meta) for p in predicates)

    return predicate


# =============================================================================
# Rules
# =============================================================================


@dataclass(frozen=True)
class Rule:
    """
    A heuristic that assigns matching variables to a category.
    """

    category: VariableCategory
    basis: MatchBasis
    predicate: RulePredicate
    description: str = ""

    def matches(self, meta: VariableMeta) -> bool:
        return self.predicate(meta)


def make_rules(birth_date_field: str, reference_date_field: str) -> List[Rule]:
    """
    The standard rule set.

    Args:
        birth_date_field:
            name of the birth date variable; it is always sensitive, but
            never treated as a date to be converted to a study day
        reference_date_field:
            name of the reference date variable, which anchors study days
            and is therefore not itself a date candidate

    Returns:
        a list of :class:`Rule` objects
    """
    is_datetime = name_ends_with(DATETIME_NAME_SUFFIX)
    date_candidate = none_of(
        name_is(birth_date_field, reference_date_field),
        is_datetime,
    )
    return [
        Rule(
            VariableCategory.IDENTIFIER,
            MatchBasis.LABEL,
            label_has_word(IDENTIFIER_LABEL_WORD),
            f"label contains the word {IDENTIFIER_LABEL_WORD!r}",
        ),
        Rule(
            VariableCategory.IDENTIFIER,
            MatchBasis.NAME,
            name_ends_with(IDENTIFIER_NAME_SUFFIX),
            f"name ends in {IDENTIFIER_NAME_SUFFIX!r}",
        ),
        Rule(
            VariableCategory.AGE,
            MatchBasis.LABEL,
            label_has_word(AGE_LABEL_WORD),
            f"label contains the word {AGE_LABEL_WORD!r}",
        ),
        Rule(
            VariableCategory.AGE,
            MatchBasis.NAME,
            name_starts_with(AGE_NAME_PREFIX),
            f"name starts with {AGE_NAME_PREFIX!r}",
        ),
        Rule(
            VariableCategory.DATE,
            MatchBasis.LABEL,
            all_of(label_has_word(DATE_LABEL_WORD), date_candidate),
            f"label contains the word {DATE_LABEL_WORD!r}",
        ),
        Rule(
            VariableCategory.DATE,
            MatchBasis.NAME,
            all_of(name_ends_with(DATE_NAME_SUFFIX), date_candidate),
            f"name ends in {DATE_NAME_SUFFIX!r}",
        ),
        Rule(
            VariableCategory.DATE,
            MatchBasis.FORMAT,
            all_of(has_fixed_date_format, date_candidate),
            "fixed date display format",
        ),
        Rule(
            VariableCategory.OTHER_SENSITIVE,
            MatchBasis.NAME,
            any_of(name_is(birth_date_field), is_datetime),
            f"birth date, or name ends in {DATETIME_NAME_SUFFIX!r}",
        ),
    ]
