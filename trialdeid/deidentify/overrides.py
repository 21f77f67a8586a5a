"""
trialdeid/deidentify/overrides.py

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

**User overrides to the automatic classification, and the final list of
variables to drop from each dataset.**

"""

from dataclasses import dataclass, field
import logging
from typing import Dict, Iterable, List, Set

from trialdeid.deidentify.classify import ClassificationResult
from trialdeid.deidentify.errors import OverrideConflictError

log = logging.getLogger(__name__)


# =============================================================================
# OverrideSet
# =============================================================================


@dataclass(frozen=True)
class OverrideSet:
    """
    Variables the user wants kept despite the heuristics, and variables the
    user wants dropped in addition to them. Names are held in upper case.
    """

    keep: frozenset = frozenset()
    drop: frozenset = frozenset()

    @classmethod
    def from_lists(
        cls, keep: Iterable[str] = None, drop: Iterable[str] = None
    ) -> "OverrideSet":
        return cls(
            keep=frozenset(k.strip().upper() for k in keep or [] if k.strip()),
            drop=frozenset(d.strip().upper() for d in drop or [] if d.strip()),
        )

    def strip_protected(self, *protected: str) -> "OverrideSet":
        """
        Returns a copy with the protected variables (subject key, birth date)
        removed from the keep list, warning about each one. These can never
        be retained.
        """
        protected_upper = {p.upper() for p in protected if p}
        for name in sorted(self.keep & protected_upper):
            log.warning(
                f"Variable {name} cannot be force-kept and has been removed "
                f"from the keep list"
            )
        return OverrideSet(keep=self.keep - protected_upper, drop=self.drop)

    def check_no_overlap(self) -> None:
        """
        Raises:
            :exc:`OverrideConflictError` if a variable is in both lists
        """
        overlap = self.keep & self.drop
        if overlap:
            raise OverrideConflictError(overlap)


# =============================================================================
# FinalDropList
# =============================================================================


@dataclass
class FinalDropList:
    """
    What the transform removes from one dataset.

    Attributes:
        dataset: dataset name
        variables: variables to drop (stored names)
        date_variables: surviving date variables, in dataset order, mapped
            to their original labels; each becomes a study-day variable
    """

    dataset: str
    variables: Set[str] = field(default_factory=set)
    date_variables: Dict[str, str] = field(default_factory=dict)

    def __contains__(self, name: str) -> bool:
        return name.upper() in {v.upper() for v in self.variables}

    def sorted_variables(self) -> List[str]:
        return sorted(self.variables)


def _without(names: Iterable[str], excluded_upper: Set[str]) -> Set[str]:
    return {n for n in names if n.upper() not in excluded_upper}


def reconcile(
    result: ClassificationResult,
    overrides: OverrideSet,
    actual_variables: Iterable[str],
    subject_key_field: str,
    birth_date_field: str,
) -> FinalDropList:
    """
    Merges the user's overrides into a dataset's classification.

    Args:
        result: the classification of the dataset
        overrides: the user's keep/drop lists
        actual_variables: names of the variables the dataset actually has
        subject_key_field: the subject key (protected)
        birth_date_field: the birth date variable (protected)

    Returns:
        a :class:`FinalDropList`

    Raises:
        :exc:`OverrideConflictError` if the keep and drop lists overlap

    Protected variables never appear in the drop list: the transform removes
    them unconditionally.
    """
    ds = result.dataset
    protected = {p.upper() for p in (subject_key_field, birth_date_field) if p}

    # 1. Protected variables can't be kept.
    overrides = overrides.strip_protected(subject_key_field, birth_date_field)

    # 2. Keep and drop must be disjoint.
    overrides.check_no_overlap()
    keep = overrides.keep

    # 3. Kept date variables come off the date list (with their labels),
    #    unless they have a fixed date format.
    date_variables = {}  # type: Dict[str, str]
    dates = result.dates.names
    ordered_dates = [n for n in result.date_labels if n in dates]
    ordered_dates += sorted(dates - set(ordered_dates))
    for name in ordered_dates:
        if name.upper() in keep:
            if result.is_protected_date(name):
                log.warning(
                    f"{ds}.{name} cannot be removed from the date variables "
                    f"because it has a fixed date display format; it will "
                    f"still be replaced by a study day"
                )
            else:
                log.info(f"{ds}.{name}: date variable kept by override")
                continue
        date_variables[name] = result.date_labels.get(name, "")

    # 4. Kept variables come off the other lists.
    identifiers = _without(result.identifiers.names, keep)
    ages = _without(result.ages.names, keep)
    other_sensitive = _without(result.other_sensitive.names, keep)

    # 5. Only drop what the dataset has.
    actual = list(actual_variables)
    drop = {name for name in actual if name.upper() in overrides.drop}
    absent = overrides.drop - {name.upper() for name in actual}
    if absent:
        log.debug(
            f"{ds}: force-drop variables not present: "
            f"{', '.join(sorted(absent))}"
        )
    for name in sorted(drop):
        if result.is_protected_date(name):
            log.warning(
                f"{ds}.{name} is force-dropped but has a fixed date display "
                f"format; it will still be replaced by a study day"
            )

    # 6. Everything else goes.
    variables = _without(
        drop | identifiers | ages | set(date_variables) | other_sensitive,
        protected,
    )
    final = FinalDropList(
        dataset=ds, variables=variables, date_variables=date_variables
    )
    log.debug(f"{ds}: dropping {', '.join(final.sorted_variables())}")
    return final
