"""
trialdeid/deidentify/config.py

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

**Config class for the TRIALDEID deidentifier.**

"""

import logging
import os
from typing import Dict, List, Optional, TextIO

from trialdeid.common.extendedconfigparser import ConfigSection
from trialdeid.deidentify.constants import (
    DEID_CONFIG_ENV_VAR,
    DeidConfigDefaults as DD,
    DeidConfigKeys as DK,
)
from trialdeid.deidentify.errors import ParameterError
from trialdeid.deidentify.library import DataLibrary, DatasetRef
from trialdeid.deidentify.overrides import OverrideSet
from trialdeid.deidentify.reference import find_reference_dataset

log = logging.getLogger(__name__)


# =============================================================================
# Config
# =============================================================================


class Config:
    """
    Class representing the deidentifier configuration.
    """

    def __init__(
        self,
        filename: str = None,
        fileobj: TextIO = None,
        libraries: Dict[str, DataLibrary] = None,
    ) -> None:
        """
        Reads the config from ``fileobj``, or ``filename``, or the file
        named by the ``TRIALDEID_CONFIG`` environment variable.

        Args:
            filename: config filename
            fileobj: file-like object to read the config from
            libraries: pre-built libraries, by name; libraries not given
                here are built from their config sections when first needed

        Raises:
            :exc:`ParameterError` if the parameters are inconsistent;
            :exc:`ValueError` if required parameters are missing
        """
        if fileobj is None and not filename:
            filename = os.environ.get(DEID_CONFIG_ENV_VAR)
            if not filename:
                raise ParameterError(
                    f"You must set the {DEID_CONFIG_ENV_VAR} environment "
                    f"variable to point to a TRIALDEID config file, or "
                    f"specify it on the command line."
                )
        self.config_filename = filename

        cfg = ConfigSection(
            section=DK.SECTION_MAIN,
            filename=None if fileobj is not None else filename,
            fileobj=fileobj,
        )
        self._parser = cfg.parser
        self._libraries = dict(libraries or {})  # type: Dict[str, DataLibrary]

        # ---------------------------------------------------------------------
        # What to process
        # ---------------------------------------------------------------------

        self.source_dataset_texts = cfg.opt_multiline(DK.SOURCE_DATASETS)
        self.source_library_names = cfg.opt_multiline(DK.SOURCE_LIBRARY)
        self.output_library_name = cfg.opt_str(DK.OUTPUT_LIBRARY)
        self.reference_dataset_text = cfg.opt_str(DK.REFERENCE_DATASET)
        self.reference_name_regex = (
            cfg.opt_str(DK.REFERENCE_NAME_REGEX) or DD.REFERENCE_NAME_REGEX
        )

        # ---------------------------------------------------------------------
        # Key variables
        # ---------------------------------------------------------------------

        self.subject_key_field = (
            cfg.opt_str(DK.SUBJECT_KEY_FIELD) or DD.SUBJECT_KEY_FIELD
        )
        self.birth_date_field = (
            cfg.opt_str(DK.BIRTH_DATE_FIELD) or DD.BIRTH_DATE_FIELD
        )
        self.random_id_field = cfg.opt_str(DK.RANDOM_ID_FIELD, required=True)
        self.age_group_field = cfg.opt_str(DK.AGE_GROUP_FIELD, required=True)
        self.reference_date_field = (
            cfg.opt_str(DK.REFERENCE_DATE_FIELD) or DD.REFERENCE_DATE_FIELD
        )

        # ---------------------------------------------------------------------
        # Overrides
        # ---------------------------------------------------------------------

        self.force_keep = cfg.opt_multiline(DK.FORCE_KEEP, upper=True)
        self.force_drop = cfg.opt_multiline(DK.FORCE_DROP, upper=True)

        # ---------------------------------------------------------------------
        # Output
        # ---------------------------------------------------------------------

        self.nomatch_suffix = (
            cfg.opt_str(DK.NOMATCH_SUFFIX) or DD.NOMATCH_SUFFIX
        )
        self.chunksize = cfg.opt_int_positive(DK.CHUNKSIZE, DD.CHUNKSIZE)

        self.check_valid()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def check_valid(self) -> None:
        """
        Raise :exc:`ParameterError` if the config is invalid.
        """
        if bool(self.source_dataset_texts) == bool(self.source_library_names):
            raise ParameterError(
                f"Specify exactly one of {DK.SOURCE_DATASETS} and "
                f"{DK.SOURCE_LIBRARY}"
            )
        if len(self.source_library_names) > 1:
            raise ParameterError(
                f"{DK.SOURCE_LIBRARY} must name a single library, not "
                f"{' '.join(self.source_library_names)}"
            )
        if not self.output_library_name:
            raise ParameterError(f"No {DK.OUTPUT_LIBRARY} specified")
        for name in [self.output_library_name] + self.source_library_names:
            self._require_library_defined(name)

        key_fields = [
            self.subject_key_field,
            self.birth_date_field,
            self.random_id_field,
            self.age_group_field,
            self.reference_date_field,
        ]
        if len(set(f.upper() for f in key_fields)) != len(key_fields):
            raise ParameterError(
                f"{DK.SUBJECT_KEY_FIELD}, {DK.BIRTH_DATE_FIELD}, "
                f"{DK.RANDOM_ID_FIELD}, {DK.AGE_GROUP_FIELD} and "
                f"{DK.REFERENCE_DATE_FIELD} must all be different"
            )

    def _require_library_defined(self, name: str) -> None:
        if name not in self._libraries and not self._parser.has_section(name):
            raise ParameterError(f"Library {name!r} is not defined")

    # -------------------------------------------------------------------------
    # Libraries and datasets
    # -------------------------------------------------------------------------

    def library(self, name: str) -> DataLibrary:
        """
        Returns the named library, opening it if necessary.

        Raises:
            :exc:`ParameterError` if it isn't defined
        """
        if name not in self._libraries:
            self._require_library_defined(name)
            library = self._parser.get_library(name)
            library.chunksize = self.chunksize
            self._libraries[name] = library
        return self._libraries[name]

    @property
    def output_library(self) -> DataLibrary:
        return self.library(self.output_library_name)

    def source_datasets(self) -> List[DatasetRef]:
        """
        The datasets to deidentify, either as listed or as every dataset in
        the source library.

        Raises:
            :exc:`ParameterError` for malformed dataset names or undefined
            libraries
        """
        if self.source_library_names:
            libname = self.source_library_names[0]
            return [
                DatasetRef(library=libname, name=name)
                for name in sorted(self.library(libname).dataset_names())
            ]
        refs = []  # type: List[DatasetRef]
        for text in self.source_dataset_texts:
            try:
                ref = DatasetRef.from_text(text)
            except ValueError as exc:
                raise ParameterError(str(exc)) from exc
            self._require_library_defined(ref.library)
            refs.append(ref)
        return refs

    def reference_dataset(
        self, candidates: Optional[List[DatasetRef]] = None
    ) -> DatasetRef:
        """
        The reference dataset: as configured, or else the one source dataset
        whose name marks it as subject-level.

        Raises:
            :exc:`ParameterError` for a malformed name;
            :exc:`trialdeid.deidentify.errors.ReferenceDatasetError` if it
            can't be inferred
        """
        if self.reference_dataset_text:
            try:
                ref = DatasetRef.from_text(self.reference_dataset_text)
            except ValueError as exc:
                raise ParameterError(str(exc)) from exc
            self._require_library_defined(ref.library)
            return ref
        if candidates is None:
            candidates = self.source_datasets()
        return find_reference_dataset(candidates, self.reference_name_regex)

    def overrides(self) -> OverrideSet:
        return OverrideSet.from_lists(
            keep=self.force_keep, drop=self.force_drop
        )

    def protected_fields(self) -> List[str]:
        return [self.subject_key_field, self.birth_date_field]
