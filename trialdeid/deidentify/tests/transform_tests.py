"""
trialdeid/deidentify/tests/transform_tests.py

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

Transform tests: study days, output structure, and the keyed merge.

"""

import datetime
from unittest import TestCase

from trialdeid.deidentify.classify import classify
from trialdeid.deidentify.errors import DatasetSkip
from trialdeid.deidentify.overrides import FinalDropList, OverrideSet, reconcile
from trialdeid.deidentify.reference import load_reference
from trialdeid.deidentify.transform import (
    day_variable_label,
    day_variable_name,
    day_variable_sources,
    output_variables,
    study_day,
    transform,
)
from trialdeid.testing.library import date_var, InMemoryLibrary, var

SUBJECT_KEY = "USUBJID"
BIRTH_DATE = "BRTHDT"
REFERENCE_DATE = "RFSDT"
REF_DATE = datetime.date(2020, 1, 10)


def make_reference():
    library = InMemoryLibrary("study")
    library.add_dataset(
        "ADSL",
        [
            var(SUBJECT_KEY, "Unique Subject Identifier"),
            var("RANDID", "Randomization Number"),
            var("AGEGRP", "Age Group"),
            date_var(REFERENCE_DATE, "Reference Start Date"),
        ],
        [
            {
                SUBJECT_KEY: "001",
                "RANDID": "R1",
                "AGEGRP": "18-64",
                REFERENCE_DATE: REF_DATE,
            },
        ],
    )
    return load_reference(
        library,
        "ADSL",
        subject_key_field=SUBJECT_KEY,
        random_id_field="RANDID",
        age_group_field="AGEGRP",
        reference_date_field=REFERENCE_DATE,
    )


def drop_list_for(dataset, variables, keep=(), drop=()) -> FinalDropList:
    result = classify(
        dataset,
        variables,
        random_id_field="RANDID",
        age_group_field="AGEGRP",
        reference_date_field=REFERENCE_DATE,
        subject_key_field=SUBJECT_KEY,
        birth_date_field=BIRTH_DATE,
    )
    return reconcile(
        result,
        OverrideSet.from_lists(keep=keep, drop=drop),
        actual_variables=[v.name for v in variables],
        subject_key_field=SUBJECT_KEY,
        birth_date_field=BIRTH_DATE,
    )


def run_transform(variables, records, **kwargs):
    return transform(
        records,
        variables,
        make_reference(),
        drop_list_for("AE", variables, **kwargs),
        reference_date_field=REFERENCE_DATE,
        subject_key_field=SUBJECT_KEY,
        birth_date_field=BIRTH_DATE,
    )


AE_VARIABLES = [var(SUBJECT_KEY), var("AESTDT", "Start Date")]


class StudyDayTests(TestCase):
    def test_day_law(self) -> None:
        for offset in range(-400, 400):
            d = REF_DATE + datetime.timedelta(days=offset)
            day = study_day(d, REF_DATE)
            self.assertNotEqual(day, 0)
            if offset >= 0:
                self.assertEqual(day, offset + 1)
            else:
                self.assertEqual(day, offset)

    def test_reference_date_is_day_one(self) -> None:
        self.assertEqual(study_day(REF_DATE, REF_DATE), 1)
        self.assertEqual(
            study_day(REF_DATE - datetime.timedelta(days=1), REF_DATE), -1
        )

    def test_accepts_datetimes_and_strings(self) -> None:
        self.assertEqual(
            study_day(datetime.datetime(2020, 1, 15, 23, 59), "2020-01-10"), 6
        )

    def test_missing_dates(self) -> None:
        self.assertIsNone(study_day(None, REF_DATE))
        self.assertIsNone(study_day(REF_DATE, None))
        self.assertIsNone(study_day("", REF_DATE))

    def test_values_that_are_not_dates(self) -> None:
        for value in ["D", "2020-UN-UN", 20200115]:
            with self.assertLogs(level="WARNING") as logging_cm:
                day = study_day(value, REF_DATE, description="study.AE.X")
            self.assertIsNone(day)
            self.assertIn("study.AE.X: not a date", logging_cm.output[0])
            self.assertIn(repr(value), logging_cm.output[0])

    def test_unreadable_reference_date(self) -> None:
        with self.assertLogs(level="WARNING") as logging_cm:
            self.assertIsNone(study_day(REF_DATE, "UNK"))
        self.assertIn("(reference date)", logging_cm.output[0])


class DayVariableTests(TestCase):
    def test_name(self) -> None:
        self.assertEqual(day_variable_name("AESTDT"), "AESTDY")
        self.assertEqual(day_variable_name("visitdt"), "visitDY")
        self.assertEqual(day_variable_name("VISIT"), "VISITDY")

    def test_label(self) -> None:
        self.assertEqual(day_variable_label("Start Date"), "Start Day")
        self.assertEqual(day_variable_label("date of visit"), "day of visit")
        self.assertEqual(day_variable_label("VISIT DATE"), "VISIT DAY")
        self.assertEqual(day_variable_label("Update Dates"), "Update Dates")
        self.assertEqual(day_variable_label(""), "")


class OutputVariablesTests(TestCase):
    def test_output_set_law(self) -> None:
        cases = [
            [var(SUBJECT_KEY), var("AETERM", "Term")],
            [var(SUBJECT_KEY), var("AESTDT", "Start Date")],
            [
                var(SUBJECT_KEY),
                var("AESTDT", "Start Date"),
                date_var("AEENDT", "End Date"),
                date_var(REFERENCE_DATE, "Reference Date"),
                var("SITEID", "Site Identifier"),
                var("AETERM", "Term"),
            ],
        ]
        reference = make_reference()
        for variables in cases:
            drop_list = drop_list_for("AE", variables)
            names = [
                v.name
                for v in output_variables(
                    variables,
                    drop_list,
                    reference,
                    reference_date_field=REFERENCE_DATE,
                    subject_key_field=SUBJECT_KEY,
                    birth_date_field=BIRTH_DATE,
                )
            ]
            expected = (
                {v.name for v in variables}
                - drop_list.variables
                - {REFERENCE_DATE, SUBJECT_KEY}
            ) | {day_variable_name(d) for d in drop_list.date_variables}
            self.assertEqual(set(names) - {"RANDID", "AGEGRP"}, expected)
            self.assertEqual(names[:2], ["RANDID", "AGEGRP"])
            self.assertEqual(len(names), len(set(names)))

    def test_day_variable_name_clash_keeps_first(self) -> None:
        variables = [
            var(SUBJECT_KEY),
            date_var("AESTDT", "Analysis Start Date"),
            var("AEST", "Start Date"),
        ]
        drop_list = drop_list_for("AE", variables)
        self.assertEqual(list(drop_list.date_variables), ["AESTDT", "AEST"])
        with self.assertLogs(level="WARNING") as logging_cm:
            sources = day_variable_sources(drop_list)
        self.assertEqual(sources, {"AESTDY": "AESTDT"})
        self.assertIn("AESTDT and AEST", logging_cm.output[0])
        with self.assertLogs(level="WARNING"):
            names = [
                v.name
                for v in output_variables(
                    variables,
                    drop_list,
                    make_reference(),
                    reference_date_field=REFERENCE_DATE,
                    subject_key_field=SUBJECT_KEY,
                    birth_date_field=BIRTH_DATE,
                )
            ]
        self.assertEqual(names, ["RANDID", "AGEGRP", "AESTDY"])


class TransformTests(TestCase):
    def test_matched_record_after_reference_date(self) -> None:
        result = run_transform(
            AE_VARIABLES,
            [{SUBJECT_KEY: "001", "AESTDT": datetime.date(2020, 1, 15)}],
        )
        self.assertEqual(
            result.records,
            [{"RANDID": "R1", "AGEGRP": "18-64", "AESTDY": 6}],
        )
        self.assertEqual(result.unmatched, [])
        day = result.variables[-1]
        self.assertEqual(day.name, "AESTDY")
        self.assertEqual(day.label, "Start Day")

    def test_matched_record_before_reference_date(self) -> None:
        result = run_transform(
            AE_VARIABLES,
            [{SUBJECT_KEY: "001", "AESTDT": datetime.date(2020, 1, 5)}],
        )
        self.assertEqual(result.records[0]["AESTDY"], -5)

    def test_unmatched_record_goes_to_side_output_only(self) -> None:
        matched = {SUBJECT_KEY: "001", "AESTDT": datetime.date(2020, 1, 15)}
        unmatched = {SUBJECT_KEY: "002", "AESTDT": datetime.date(2020, 2, 1)}
        result = run_transform(AE_VARIABLES, [matched, unmatched])
        self.assertEqual(result.unmatched, [unmatched])
        self.assertEqual(len(result.records), 1)
        self.assertEqual(result.records[0]["RANDID"], "R1")

    def test_force_kept_subject_key_is_still_replaced(self) -> None:
        result = run_transform(
            AE_VARIABLES,
            [{SUBJECT_KEY: "001", "AESTDT": datetime.date(2020, 1, 15)}],
            keep=[SUBJECT_KEY],
        )
        self.assertNotIn(SUBJECT_KEY, result.records[0])
        self.assertNotIn(SUBJECT_KEY, [v.name for v in result.variables])

    def test_reference_only_subjects_are_ignored(self) -> None:
        result = run_transform(AE_VARIABLES, [])
        self.assertEqual(result.records, [])
        self.assertEqual(result.unmatched, [])

    def test_source_substitute_columns_are_overwritten(self) -> None:
        variables = [var(SUBJECT_KEY), var("AGEGRP", "Age Group")]
        result = run_transform(
            variables, [{SUBJECT_KEY: "001", "AGEGRP": "unknown"}]
        )
        self.assertEqual(
            result.records, [{"RANDID": "R1", "AGEGRP": "18-64"}]
        )

    def test_missing_date_gives_missing_day(self) -> None:
        result = run_transform(
            AE_VARIABLES, [{SUBJECT_KEY: "001", "AESTDT": None}]
        )
        self.assertIsNone(result.records[0]["AESTDY"])

    def test_no_subject_key(self) -> None:
        variables = [var("AETERM", "Term")]
        with self.assertRaises(DatasetSkip):
            run_transform(variables, [{"AETERM": "RASH"}])

    def test_imputation_flag_labelled_as_date(self) -> None:
        variables = [
            var(SUBJECT_KEY),
            date_var("AESTDT", "Analysis Start Date"),
            var("AESTDTF", "Analysis Start Date Imputation Flag"),
        ]
        with self.assertLogs(level="WARNING") as logging_cm:
            result = run_transform(
                variables,
                [{SUBJECT_KEY: "001", "AESTDT": REF_DATE, "AESTDTF": "D"}],
            )
        self.assertEqual(result.records[0]["AESTDY"], 1)
        self.assertIsNone(result.records[0]["AESTDTFDY"])
        self.assertIn(
            "AE.AESTDTF: not a date: 'D'", "\n".join(logging_cm.output)
        )
