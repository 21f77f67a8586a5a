"""
trialdeid/deidentify/review.py

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

**Review notes: places where the name-based and label-based heuristics
disagree.**

A variable picked up only because of its name (e.g. ``VISITID``) may be
harmless; the user is told, so they can force-keep it if appropriate. These
notes are advisory and never change the classification.

"""

from dataclasses import dataclass
import logging
from typing import List

from trialdeid.deidentify.classify import ClassificationResult
from trialdeid.deidentify.constants import VariableCategory

log = logging.getLogger(__name__)

REVIEWED_CATEGORIES = (
    VariableCategory.IDENTIFIER,
    VariableCategory.AGE,
    VariableCategory.DATE,
)


@dataclass(frozen=True)
class ReviewNote:
    dataset: str
    category: VariableCategory
    variable: str

    def __str__(self) -> str:
        return (
            f"{self.dataset}.{self.variable} was classified as {self.category} "
            f"by its name but not by its label; add it to the force-keep "
            f"list if it should be retained"
        )


def report_inconsistencies(result: ClassificationResult) -> List[ReviewNote]:
    """
    Lists (and logs) variables matched by a name rule but not by the
    corresponding label rule.
    """
    notes = []  # type: List[ReviewNote]
    for category in REVIEWED_CATEGORIES:
        for name in sorted(result.category(category).name_only):
            note = ReviewNote(
                dataset=result.dataset, category=category, variable=name
            )
            log.info(f"NOTE: {note}")
            notes.append(note)
    return notes
