"""
trialdeid/deidentify/errors.py

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

**Exceptions raised by the deidentification engine.**

Fatal conditions derive from :exc:`DeidentificationError` and abort the whole
run. :exc:`DatasetSkip` is caught per dataset; the run carries on with the
next dataset.

"""

from typing import Any, Dict, Iterable, List


class DeidentificationError(Exception):
    """
    Base class for conditions that abort the whole run.
    """

    pass


class ParameterError(DeidentificationError, ValueError):
    """
    Invalid or inconsistent run parameters.
    """

    pass


class ReferenceDatasetError(DeidentificationError):
    """
    The reference dataset is missing, ambiguous or malformed.
    """

    pass


class DuplicateKeyError(ReferenceDatasetError):
    """
    The reference dataset has more than one record for a subject key.
    """

    def __init__(self, subject_key: str, rows: List[Dict[str, Any]]) -> None:
        """
        Args:
            subject_key: name of the subject key variable
            rows: all offending reference records
        """
        self.subject_key = subject_key
        self.rows = rows
        keys = sorted(set(str(r.get(subject_key)) for r in rows))
        super().__init__(
            f"Reference dataset has duplicate values of {subject_key}: "
            f"{', '.join(keys)} ({len(rows)} records)"
        )


class OverrideConflictError(DeidentificationError):
    """
    A variable is listed both as force-keep and force-drop.
    """

    def __init__(self, variables: Iterable[str]) -> None:
        self.variables = sorted(variables)
        super().__init__(
            f"Variables cannot be both kept and dropped: "
            f"{', '.join(self.variables)}"
        )


OverlapError = OverrideConflictError


class DatasetSkip(Exception):
    """
    A dataset cannot be processed; it is skipped with a warning.
    """

    pass
