"""
trialdeid/deidentify/deidentify.py

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

**Deidentify a set of clinical study datasets.**

For each dataset: classify its variables, report questionable
classifications, merge in the user's overrides, then write a deidentified
copy (and, if some records have no subject in the reference dataset, a
side dataset holding those records unchanged).

"""

from dataclasses import dataclass, field
from enum import unique
import logging
from typing import List, Optional, Tuple

from cardinal_pythonlib.enumlike import StrEnum

from trialdeid.common.formatting import print_record_counts
from trialdeid.deidentify.classify import classify, ClassificationResult
from trialdeid.deidentify.config import Config
from trialdeid.deidentify.constants import (
    BIGSEP,
    GENERAL_LABEL_PREFIX,
    SEP,
    SUBJECT_LEVEL_LABEL,
)
from trialdeid.deidentify.errors import DatasetSkip
from trialdeid.deidentify.library import DataLibrary, DatasetRef, VariableMeta
from trialdeid.deidentify.overrides import FinalDropList, OverrideSet, reconcile
from trialdeid.deidentify.reference import (
    is_subject_level_dataset,
    load_reference,
    ReferenceData,
)
from trialdeid.deidentify.review import report_inconsistencies, ReviewNote
from trialdeid.deidentify.transform import find_variable_name, transform

log = logging.getLogger(__name__)


# =============================================================================
# Outcomes
# =============================================================================


@unique
class OutcomeStatus(StrEnum):
    WRITTEN = "written"
    DRY_RUN = "dry_run"
    SKIPPED = "skipped"


@dataclass
class DatasetOutcome:
    """
    What happened to one source dataset.
    """

    dataset: DatasetRef
    status: OutcomeStatus
    output_name: Optional[str] = None
    nomatch_name: Optional[str] = None
    n_matched: int = 0
    n_unmatched: int = 0
    drop_list: Optional[FinalDropList] = None
    notes: List[ReviewNote] = field(default_factory=list)
    skip_reason: str = ""


def output_label(dataset: str, source_label: str, name_regex: str) -> str:
    """
    The label for a deidentified dataset.

    Args:
        dataset: dataset name
        source_label: label of the source dataset (may be blank)
        name_regex: regular expression matching subject-level dataset names
    """
    if is_subject_level_dataset(dataset, name_regex):
        return SUBJECT_LEVEL_LABEL
    return GENERAL_LABEL_PREFIX + (source_label or dataset)


# =============================================================================
# Per-dataset processing
# =============================================================================


@dataclass
class DatasetContext:
    """
    State for one dataset while it is being processed. A new one is created
    for each dataset, so nothing carries over from one dataset to the next.
    """

    dataset: DatasetRef
    source: DataLibrary
    stored_name: str
    variables: List[VariableMeta]
    n_records: int
    classification: Optional[ClassificationResult] = None
    notes: List[ReviewNote] = field(default_factory=list)
    drop_list: Optional[FinalDropList] = None


def open_dataset(config: Config, dataset: DatasetRef) -> DatasetContext:
    """
    Checks that a dataset can be deidentified and describes it.

    Raises:
        :exc:`DatasetSkip` if it can't
    """
    source = config.library(dataset.library)
    output = config.output_library
    if output.same_location(source):
        raise DatasetSkip(
            f"output library {output.name} is the same location as source "
            f"library {source.name}"
        )
    stored_name = source.find_dataset(dataset.name)
    if stored_name is None:
        raise DatasetSkip("dataset does not exist")
    variables = source.describe(stored_name)
    if find_variable_name(variables, config.subject_key_field) is None:
        raise DatasetSkip(
            f"no subject key variable {config.subject_key_field}"
        )
    n_records = source.row_count(stored_name)
    if n_records == 0:
        raise DatasetSkip("dataset has no records")
    log.info(f"{dataset}: {len(variables)} variables, {n_records} records")
    return DatasetContext(
        dataset=dataset,
        source=source,
        stored_name=stored_name,
        variables=variables,
        n_records=n_records,
    )


def decide_drops(
    config: Config, ctx: DatasetContext, overrides: OverrideSet
) -> None:
    """
    Classifies the dataset's variables, reports questionable classifications,
    and merges in the overrides. Fills in the classification, notes and drop
    list of ``ctx``.
    """
    ctx.classification = classify(
        dataset=ctx.stored_name,
        variables=ctx.variables,
        random_id_field=config.random_id_field,
        age_group_field=config.age_group_field,
        reference_date_field=config.reference_date_field,
        subject_key_field=config.subject_key_field,
        birth_date_field=config.birth_date_field,
    )
    for line in ctx.classification.describe():
        log.debug(line)
    ctx.notes = report_inconsistencies(ctx.classification)
    ctx.drop_list = reconcile(
        ctx.classification,
        overrides,
        actual_variables=[v.name for v in ctx.variables],
        subject_key_field=config.subject_key_field,
        birth_date_field=config.birth_date_field,
    )
    log.info(
        f"{ctx.dataset}: dropping "
        f"{', '.join(ctx.drop_list.sorted_variables()) or '-'}"
    )
    log.info(
        f"{ctx.dataset}: converting to study days: "
        f"{', '.join(ctx.drop_list.date_variables) or '-'}"
    )


def write_deidentified(
    config: Config, ctx: DatasetContext, reference: ReferenceData
) -> DatasetOutcome:
    """
    Transforms the dataset and writes it (and any unmatched records) to the
    output library.
    """
    output = config.output_library
    transformed = transform(
        ctx.source.gen_records(ctx.stored_name),
        ctx.variables,
        reference,
        ctx.drop_list,
        reference_date_field=config.reference_date_field,
        subject_key_field=config.subject_key_field,
        birth_date_field=config.birth_date_field,
    )
    source_label = ctx.source.dataset_label(ctx.stored_name)
    output.write_dataset(
        ctx.stored_name,
        transformed.variables,
        transformed.records,
        label=output_label(
            ctx.stored_name, source_label, config.reference_name_regex
        ),
    )
    outcome = DatasetOutcome(
        dataset=ctx.dataset,
        status=OutcomeStatus.WRITTEN,
        output_name=ctx.stored_name,
        n_matched=transformed.n_matched,
        n_unmatched=transformed.n_unmatched,
        drop_list=ctx.drop_list,
        notes=ctx.notes,
    )
    nomatch_name = ctx.stored_name + config.nomatch_suffix
    if transformed.unmatched:
        outcome.nomatch_name = nomatch_name
        log.warning(
            f"{ctx.dataset}: {outcome.n_unmatched} record(s) have no subject "
            f"in reference dataset {reference.dataset}; written unchanged to "
            f"{output.name}.{outcome.nomatch_name}"
        )
        output.write_dataset(
            outcome.nomatch_name,
            ctx.variables,
            transformed.unmatched,
            label=source_label,
        )
    else:
        stale = output.find_dataset(nomatch_name)
        if stale is not None:
            log.info(
                f"{ctx.dataset}: all records matched; removing "
                f"{output.name}.{stale} from a previous run"
            )
            output.drop_dataset(stale)
    return outcome


def process_dataset(
    config: Config,
    dataset: DatasetRef,
    reference: ReferenceData,
    overrides: OverrideSet,
    dry_run: bool = False,
) -> DatasetOutcome:
    """
    Deidentifies one dataset.

    Args:
        config: the :class:`trialdeid.deidentify.config.Config`
        dataset: the dataset to process
        reference: the loaded reference data
        overrides: the user's (validated) overrides
        dry_run: classify and report, but write nothing?

    Returns:
        a :class:`DatasetOutcome`

    Raises:
        :exc:`DatasetSkip` if the dataset can't be processed
    """
    ctx = open_dataset(config, dataset)
    decide_drops(config, ctx, overrides)
    if dry_run:
        return DatasetOutcome(
            dataset=dataset,
            status=OutcomeStatus.DRY_RUN,
            drop_list=ctx.drop_list,
            notes=ctx.notes,
        )
    return write_deidentified(config, ctx, reference)


# =============================================================================
# Main
# =============================================================================


def deidentify(config: Config, dry_run: bool = False) -> List[DatasetOutcome]:
    """
    Main entry point: deidentifies every source dataset.

    Args:
        config: the :class:`trialdeid.deidentify.config.Config`
        dry_run: classify and report, but write nothing?

    Returns:
        one :class:`DatasetOutcome` per source dataset

    Raises:
        :exc:`trialdeid.deidentify.errors.DeidentificationError` for fatal
        problems (bad parameters, bad reference dataset, conflicting
        overrides), before any dataset is written
    """
    log.info(BIGSEP + "Starting")
    datasets = config.source_datasets()

    overrides = config.overrides().strip_protected(*config.protected_fields())
    overrides.check_no_overlap()

    refds = config.reference_dataset(candidates=datasets)
    reference = load_reference(
        config.library(refds.library),
        refds.name,
        subject_key_field=config.subject_key_field,
        random_id_field=config.random_id_field,
        age_group_field=config.age_group_field,
        reference_date_field=config.reference_date_field,
    )

    outcomes = []  # type: List[DatasetOutcome]
    for dataset in datasets:
        log.info(SEP + f"Dataset {dataset}")
        try:
            outcome = process_dataset(
                config, dataset, reference, overrides, dry_run=dry_run
            )
        except DatasetSkip as exc:
            log.warning(f"{dataset}: skipped: {exc}")
            outcome = DatasetOutcome(
                dataset=dataset,
                status=OutcomeStatus.SKIPPED,
                skip_reason=str(exc),
            )
        outcomes.append(outcome)

    if not dry_run:
        show_output_counts(config, outcomes)
    log.info(BIGSEP + "Finished")
    return outcomes


def show_source_counts(config: Config) -> None:
    """
    Show (print to stdout) the number of records in all source datasets.
    """
    print("SOURCE DATASET RECORD COUNTS:")
    counts = []  # type: List[Tuple[str, int]]
    for dataset in config.source_datasets():
        library = config.library(dataset.library)
        stored_name = library.find_dataset(dataset.name)
        if stored_name is None:
            log.warning(f"{dataset}: does not exist")
            continue
        counts.append((str(dataset), library.row_count(stored_name)))
    print_record_counts(counts)


def show_output_counts(config: Config, outcomes: List[DatasetOutcome]) -> None:
    """
    Show (print to stdout) the number of records written to each output
    dataset.
    """
    print("DEIDENTIFIED DATASET RECORD COUNTS:")
    libname = config.output_library_name
    counts = []  # type: List[Tuple[str, int]]
    for o in outcomes:
        if o.status != OutcomeStatus.WRITTEN:
            continue
        counts.append((f"{libname}.{o.output_name}", o.n_matched))
        if o.nomatch_name:
            counts.append((f"{libname}.{o.nomatch_name}", o.n_unmatched))
    print_record_counts(counts)
