"""
trialdeid/deidentify/reference.py

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

**The subject-level reference dataset, supplying each subject's random ID,
age group and reference date.**

"""

from collections import defaultdict
from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional, Sequence

import regex

from trialdeid.deidentify.errors import (
    DuplicateKeyError,
    ReferenceDatasetError,
)
from trialdeid.deidentify.library import DataLibrary, DatasetRef, VariableMeta

log = logging.getLogger(__name__)


# =============================================================================
# Finding the reference dataset
# =============================================================================


def find_reference_dataset(
    candidates: Sequence[DatasetRef], name_regex: str
) -> DatasetRef:
    """
    Picks the reference dataset from the datasets being processed, by its
    name.

    Args:
        candidates: datasets to search
        name_regex: regular expression that the name of a subject-level
            dataset matches (case-insensitive)

    Raises:
        :exc:`ReferenceDatasetError` unless exactly one dataset matches
    """
    r = regex.compile(name_regex, regex.IGNORECASE)
    matches = [c for c in candidates if r.search(c.name)]
    if not matches:
        raise ReferenceDatasetError(
            f"No reference dataset specified, and none of the datasets "
            f"matches {name_regex!r}"
        )
    if len(matches) > 1:
        raise ReferenceDatasetError(
            f"No reference dataset specified, and more than one dataset "
            f"matches {name_regex!r}: {', '.join(str(m) for m in matches)}"
        )
    log.info(f"Using reference dataset {matches[0]}")
    return matches[0]


def is_subject_level_dataset(name: str, name_regex: str) -> bool:
    return regex.search(name_regex, name, regex.IGNORECASE) is not None


# =============================================================================
# Reference data
# =============================================================================


@dataclass(frozen=True)
class ReferenceRecord:
    subject_key: Any
    random_id: Any
    age_group: Any
    reference_date: Any


class ReferenceData:
    """
    Reference records, one per subject, keyed by subject key.
    """

    def __init__(
        self,
        dataset: str,
        records: Dict[Any, ReferenceRecord],
        random_id_meta: VariableMeta,
        age_group_meta: VariableMeta,
    ) -> None:
        """
        Args:
            dataset: name of the reference dataset, for reporting
            records: reference records by subject key
            random_id_meta: metadata of the random ID variable
            age_group_meta: metadata of the age group variable
        """
        self.dataset = dataset
        self.records = records
        self.random_id_meta = random_id_meta
        self.age_group_meta = age_group_meta

    def __len__(self) -> int:
        return len(self.records)

    def get(self, subject_key: Any) -> Optional[ReferenceRecord]:
        return self.records.get(subject_key)


def _find_variable(
    variables: List[VariableMeta], name: str
) -> Optional[VariableMeta]:
    for v in variables:
        if v.name.upper() == name.upper():
            return v
    return None


def validate_reference(
    library: DataLibrary,
    dataset: str,
    subject_key_field: str,
    required_fields: Sequence[str],
) -> List[Dict[str, Any]]:
    """
    Checks the reference dataset: it must exist, contain the required
    fields, and have exactly one record per subject key.

    Args:
        library: library holding the reference dataset
        dataset: name of the reference dataset
        subject_key_field: the subject key
        required_fields: other fields that must be present

    Returns:
        the reference records

    Raises:
        :exc:`ReferenceDatasetError`, or its subclass
        :exc:`DuplicateKeyError`
    """
    stored_name = library.find_dataset(dataset)
    if stored_name is None:
        raise ReferenceDatasetError(
            f"Reference dataset {library.name}.{dataset} does not exist"
        )
    variables = library.describe(stored_name)
    missing = [
        f
        for f in [subject_key_field] + list(required_fields)
        if _find_variable(variables, f) is None
    ]
    if missing:
        raise ReferenceDatasetError(
            f"Reference dataset {library.name}.{stored_name} lacks required "
            f"variable(s): {', '.join(missing)}"
        )
    key = _find_variable(variables, subject_key_field).name

    records = list(library.gen_records(stored_name))
    by_key = defaultdict(list)  # type: Dict[Any, List[Dict[str, Any]]]
    for record in records:
        if record.get(key) is None:
            raise ReferenceDatasetError(
                f"Reference dataset {library.name}.{stored_name} has a "
                f"record with no {key}: {record!r}"
            )
        by_key[record[key]].append(record)
    duplicates = [
        r for rows in by_key.values() if len(rows) > 1 for r in rows
    ]
    if duplicates:
        log.error(
            f"Reference dataset {library.name}.{stored_name}: "
            f"{len(duplicates)} records share a {key} value with another"
        )
        for r in duplicates:
            log.error(f"... {r!r}")
        raise DuplicateKeyError(key, duplicates)
    log.info(
        f"Reference dataset {library.name}.{stored_name}: "
        f"{len(records)} subjects"
    )
    return records


def load_reference(
    library: DataLibrary,
    dataset: str,
    subject_key_field: str,
    random_id_field: str,
    age_group_field: str,
    reference_date_field: str,
) -> ReferenceData:
    """
    Validates (see :func:`validate_reference`) and loads the reference
    dataset.
    """
    records = validate_reference(
        library,
        dataset,
        subject_key_field=subject_key_field,
        required_fields=[
            random_id_field,
            age_group_field,
            reference_date_field,
        ],
    )
    stored_name = library.find_dataset(dataset)
    variables = library.describe(stored_name)
    key = _find_variable(variables, subject_key_field).name
    rid_meta = _find_variable(variables, random_id_field)
    agegrp_meta = _find_variable(variables, age_group_field)
    refdate = _find_variable(variables, reference_date_field).name
    return ReferenceData(
        dataset=stored_name,
        records={
            r[key]: ReferenceRecord(
                subject_key=r[key],
                random_id=r[rid_meta.name],
                age_group=r[agegrp_meta.name],
                reference_date=r[refdate],
            )
            for r in records
        },
        random_id_meta=rid_meta,
        age_group_meta=agegrp_meta,
    )
