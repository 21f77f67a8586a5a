"""
trialdeid/deidentify/classify.py

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

**Classification of a dataset's variables into sensitive categories.**

"""

from dataclasses import dataclass, field
import logging
from typing import Dict, Iterable, List, Optional, Set

from trialdeid.deidentify.constants import (
    MatchBasis,
    STUDYID,
    VariableCategory,
)
from trialdeid.deidentify.library import VariableMeta
from trialdeid.deidentify.rules import make_rules, Rule

log = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================


@dataclass
class CategoryMatches:
    """
    The variables detected for one category, by how they were detected.
    """

    by_name: Set[str] = field(default_factory=set)
    by_label: Set[str] = field(default_factory=set)
    by_format: Set[str] = field(default_factory=set)

    def add(self, name: str, basis: MatchBasis) -> None:
        if basis == MatchBasis.NAME:
            self.by_name.add(name)
        elif basis == MatchBasis.LABEL:
            self.by_label.add(name)
        else:
            self.by_format.add(name)

    @property
    def names(self) -> Set[str]:
        """
        All variables in the category, however detected.
        """
        return self.by_name | self.by_label | self.by_format

    @property
    def name_only(self) -> Set[str]:
        """
        Variables matched by name but not by label.
        """
        return self.by_name - self.by_label

    def basis(self, name: str) -> Optional[MatchBasis]:
        """
        How was this variable detected? ``None`` if it wasn't.
        """
        in_name = name in self.by_name
        in_label = name in self.by_label
        if in_name and in_label:
            return MatchBasis.BOTH
        if in_name:
            return MatchBasis.NAME
        if in_label:
            return MatchBasis.LABEL
        if name in self.by_format:
            return MatchBasis.FORMAT
        return None


@dataclass
class ClassificationResult:
    """
    The sensitive variables of one dataset, by category.

    Date variables also carry their original labels (from which study-day
    labels are derived), and those with a fixed date display format are
    flagged as protected.
    """

    dataset: str
    identifiers: CategoryMatches = field(default_factory=CategoryMatches)
    ages: CategoryMatches = field(default_factory=CategoryMatches)
    dates: CategoryMatches = field(default_factory=CategoryMatches)
    other_sensitive: CategoryMatches = field(default_factory=CategoryMatches)
    date_labels: Dict[str, str] = field(default_factory=dict)

    def category(self, category: VariableCategory) -> CategoryMatches:
        return {
            VariableCategory.IDENTIFIER: self.identifiers,
            VariableCategory.AGE: self.ages,
            VariableCategory.DATE: self.dates,
            VariableCategory.OTHER_SENSITIVE: self.other_sensitive,
        }[category]

    @property
    def protected_dates(self) -> Set[str]:
        """
        Date variables with a fixed date display format.
        """
        return set(self.dates.by_format)

    def is_protected_date(self, name: str) -> bool:
        return name in self.dates.by_format

    def all_names(self) -> Set[str]:
        return (
            self.identifiers.names
            | self.ages.names
            | self.dates.names
            | self.other_sensitive.names
        )

    def describe(self) -> List[str]:
        """
        Human-readable lines describing the classification.
        """
        lines = []  # type: List[str]
        for cat in VariableCategory:
            matches = self.category(cat)
            for name in sorted(matches.names):
                extra = ""
                if cat == VariableCategory.DATE and self.is_protected_date(
                    name
                ):
                    extra = " [fixed date format]"
                lines.append(
                    f"{self.dataset}.{name}: {cat} "
                    f"(by {matches.basis(name)}){extra}"
                )
        return lines


# =============================================================================
# Classification
# =============================================================================


def classify(
    dataset: str,
    variables: Iterable[VariableMeta],
    random_id_field: str,
    age_group_field: str,
    reference_date_field: str,
    subject_key_field: str,
    birth_date_field: str,
    rules: List[Rule] = None,
) -> ClassificationResult:
    """
    Applies the heuristic rules to each variable of a dataset.

    Args:
        dataset: dataset name, for reporting
        variables: the dataset's variable metadata
        random_id_field: reference field supplying the substitute subject ID
        age_group_field: reference field supplying the substitute age group
        reference_date_field: reference field anchoring study days
        subject_key_field: the subject key
        birth_date_field: the birth date variable
        rules: rules to use instead of the standard set

    Returns:
        a :class:`ClassificationResult`

    The random ID, age group, subject key and ``STUDYID`` variables are never
    candidates.
    """
    if rules is None:
        rules = make_rules(
            birth_date_field=birth_date_field,
            reference_date_field=reference_date_field,
        )
    never_candidates = {
        n.upper()
        for n in (random_id_field, age_group_field, subject_key_field, STUDYID)
        if n
    }
    result = ClassificationResult(dataset=dataset)
    for meta in variables:
        if meta.name.upper() in never_candidates:
            continue
        for rule in rules:
            if not rule.matches(meta):
                continue
            log.debug(
                f"{dataset}.{meta.name}: {rule.category} "
                f"({rule.description})"
            )
            result.category(rule.category).add(meta.name, rule.basis)
            if rule.category == VariableCategory.DATE:
                result.date_labels[meta.name] = meta.label
    return result
