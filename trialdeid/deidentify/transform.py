"""
trialdeid/deidentify/transform.py

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

**The deidentifying transform: merge a dataset with the reference dataset by
subject key, replace identifying values, and turn dates into study days.**

"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, List, Optional

from cardinal_pythonlib.datetimefunc import coerce_to_pendulum_date
from pendulum import Date
from pendulum.parsing.exceptions import ParserError
import regex
from sqlalchemy.sql.sqltypes import Integer

from trialdeid.deidentify.constants import (
    DATE_LABEL_WORD,
    DATE_NAME_SUFFIX,
    DAY_LABEL_WORD,
    DAY_NAME_SUFFIX,
)
from trialdeid.deidentify.errors import DatasetSkip
from trialdeid.deidentify.library import VariableMeta
from trialdeid.deidentify.overrides import FinalDropList
from trialdeid.deidentify.reference import ReferenceData

log = logging.getLogger(__name__)

DATE_WORD_REGEX = regex.compile(
    rf"\b{DATE_LABEL_WORD}\b", regex.IGNORECASE
)


# =============================================================================
# Study days
# =============================================================================


def _coerce_date(value: Any, description: str) -> Optional[Date]:
    """
    Converts a value to a date, or ``None`` if it is missing or can't be
    read as a date (e.g. imputation flags, partial dates, or SAS date
    integers in a variable labelled as a date); the latter is warned about.
    """
    if isinstance(value, str) and not value.strip():
        return None
    try:
        return coerce_to_pendulum_date(value)
    except (ParserError, ValueError, TypeError):
        log.warning(f"{description}: not a date: {value!r}; day left missing")
        return None


def study_day(
    date_value: Any, reference_date: Any, description: str = "date"
) -> Optional[int]:
    """
    The study day of a date, relative to a reference date.

    The reference date is day 1; the day before it is day -1. There is no
    day 0.

    Args:
        date_value: a date, date/time or ISO-8601 string
        reference_date: likewise
        description: what the date is (e.g. ``study.AE.AESTDT``), for
            warnings about values that aren't dates

    Returns:
        the study day, or ``None`` if either date is missing or unreadable
    """
    d = _coerce_date(date_value, description)
    r = _coerce_date(reference_date, f"{description} (reference date)")
    if d is None or r is None:
        return None
    day = d.toordinal() - r.toordinal() + 1
    if day < 1:
        day -= 1
    return day


def day_variable_name(date_variable: str) -> str:
    """
    ``AESTDT`` becomes ``AESTDY``; a name not ending in ``DT`` just gains
    ``DY``.
    """
    if date_variable.upper().endswith(DATE_NAME_SUFFIX):
        date_variable = date_variable[: -len(DATE_NAME_SUFFIX)]
    return date_variable + DAY_NAME_SUFFIX


def day_variable_label(date_label: str) -> str:
    """
    ``"Start Date"`` becomes ``"Start Day"``.
    """

    def replace(m: "regex.Match") -> str:
        word = m.group(0)
        if word.isupper():
            return DAY_LABEL_WORD.upper()
        if word.islower():
            return DAY_LABEL_WORD.lower()
        return DAY_LABEL_WORD

    return DATE_WORD_REGEX.sub(replace, date_label or "")


# =============================================================================
# Output structure
# =============================================================================


def find_variable_name(
    variables: Iterable[VariableMeta], name: str
) -> Optional[str]:
    """
    The stored name of a variable, matched case-insensitively.
    """
    for v in variables:
        if v.name.upper() == name.upper():
            return v.name
    return None


def day_variable_sources(drop_list: FinalDropList) -> Dict[str, str]:
    """
    Maps each study-day variable name to the date variable it comes from.
    If two date variables would give the same day variable, the first (in
    dataset order) wins and the other is dropped with no day variable.
    """
    sources = {}  # type: Dict[str, str]
    for name in drop_list.date_variables:
        day_name = day_variable_name(name)
        clash = next(
            (s for d, s in sources.items() if d.upper() == day_name.upper()),
            None,
        )
        if clash is not None:
            log.warning(
                f"{drop_list.dataset}: date variables {clash} and {name} "
                f"would both become {day_name}; keeping the day for {clash} "
                f"only"
            )
            continue
        sources[day_name] = name
    return sources


def output_variables(
    source_variables: List[VariableMeta],
    drop_list: FinalDropList,
    reference: ReferenceData,
    reference_date_field: str,
    subject_key_field: str,
    birth_date_field: str,
    day_sources: Dict[str, str] = None,
) -> List[VariableMeta]:
    """
    The variables of the deidentified dataset: the random ID and age group
    from the reference dataset, then the surviving source variables (in
    order), then one study-day variable per surviving date variable.

    ``day_sources`` is as from :func:`day_variable_sources`, which is called
    if it isn't given.
    """
    if day_sources is None:
        day_sources = day_variable_sources(drop_list)
    day_variables = [
        VariableMeta(
            name=name,
            label=day_variable_label(drop_list.date_variables[source]),
            sqla_type=Integer(),
        )
        for name, source in day_sources.items()
    ]
    substitutes = [reference.random_id_meta, reference.age_group_meta]
    removed = {v.upper() for v in drop_list.variables}
    removed.update(
        n.upper()
        for n in (reference_date_field, subject_key_field, birth_date_field)
        if n
    )
    removed.update(v.name.upper() for v in substitutes + day_variables)
    kept = [v for v in source_variables if v.name.upper() not in removed]
    return substitutes + kept + day_variables


# =============================================================================
# Transform
# =============================================================================


@dataclass
class TransformResult:
    """
    Attributes:
        variables: variables of the deidentified dataset
        records: deidentified records
        unmatched: source records, unchanged, whose subject has no
            reference record
    """

    variables: List[VariableMeta]
    records: List[Dict[str, Any]] = field(default_factory=list)
    unmatched: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def n_matched(self) -> int:
        return len(self.records)

    @property
    def n_unmatched(self) -> int:
        return len(self.unmatched)


def transform(
    records: Iterable[Dict[str, Any]],
    source_variables: List[VariableMeta],
    reference: ReferenceData,
    drop_list: FinalDropList,
    reference_date_field: str,
    subject_key_field: str,
    birth_date_field: str,
) -> TransformResult:
    """
    Deidentifies the records of one dataset.

    Each record is matched to the reference dataset by subject key. Matched
    records lose their dropped variables, gain the subject's random ID and
    age group, and have each surviving date variable converted to a study
    day. Unmatched records go, unchanged, to the result's ``unmatched``
    list. Reference subjects with no records here are ignored.

    Args:
        records: source records
        source_variables: source variable metadata
        reference: the reference data
        drop_list: the dataset's :class:`FinalDropList`
        reference_date_field: reference date variable (never output)
        subject_key_field: the subject key (replaced by the random ID)
        birth_date_field: the birth date variable (never output)

    Returns:
        a :class:`TransformResult`

    Raises:
        :exc:`DatasetSkip` if the dataset has no subject key variable
    """
    key = find_variable_name(source_variables, subject_key_field)
    if key is None:
        raise DatasetSkip(
            f"{drop_list.dataset} has no subject key variable "
            f"{subject_key_field}"
        )
    day_sources = day_variable_sources(drop_list)
    variables = output_variables(
        source_variables,
        drop_list,
        reference,
        reference_date_field=reference_date_field,
        subject_key_field=subject_key_field,
        birth_date_field=birth_date_field,
        day_sources=day_sources,
    )
    random_id_name = reference.random_id_meta.name
    age_group_name = reference.age_group_meta.name

    result = TransformResult(variables=variables)
    for record in records:
        ref = reference.get(record.get(key))
        if ref is None:
            result.unmatched.append(record)
            continue
        out = {}  # type: Dict[str, Any]
        for v in variables:
            if v.name in day_sources:
                source = day_sources[v.name]
                out[v.name] = study_day(
                    record.get(source),
                    ref.reference_date,
                    description=f"{drop_list.dataset}.{source}",
                )
            elif v.name == random_id_name:
                out[v.name] = ref.random_id
            elif v.name == age_group_name:
                out[v.name] = ref.age_group
            else:
                out[v.name] = record.get(v.name)
        result.records.append(out)
    return result
