"""
trialdeid/deidentify/constants.py

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

**Shared constants for the TRIALDEID deidentification engine.**

"""

from enum import unique

from cardinal_pythonlib.enumlike import StrEnum

from trialdeid.common.constants import EnvVar
from trialdeid.version import TRIALDEID_VERSION, TRIALDEID_VERSION_DATE


# =============================================================================
# Cosmetic
# =============================================================================

BIGSEP = "=" * 20 + " "
SEP = "-" * 20 + " "


# =============================================================================
# Environment
# =============================================================================

DEID_CONFIG_ENV_VAR = EnvVar.DEID_CONFIG


# =============================================================================
# Variable naming conventions
# =============================================================================

STUDYID = "STUDYID"

# Suffixes/prefixes used by the name-based heuristics.
IDENTIFIER_NAME_SUFFIX = "ID"
AGE_NAME_PREFIX = "AGE"
DATE_NAME_SUFFIX = "DT"
DATETIME_NAME_SUFFIX = "DTM"
DAY_NAME_SUFFIX = "DY"

# Whole words used by the label-based heuristics.
IDENTIFIER_LABEL_WORD = "Identifier"
AGE_LABEL_WORD = "Age"
DATE_LABEL_WORD = "Date"
DAY_LABEL_WORD = "Day"

# Display formats, as derived from column types.
FORMAT_DATE = "DATE"
FORMAT_DATETIME = "DATETIME"
FORMAT_TIME = "TIME"
FIXED_DATE_FORMATS = frozenset([FORMAT_DATE])

SUBJECT_LEVEL_LABEL = "De-identified subject-level analysis dataset"
GENERAL_LABEL_PREFIX = "De-identified "


# =============================================================================
# Classification
# =============================================================================


@unique
class VariableCategory(StrEnum):
    IDENTIFIER = "identifier"
    AGE = "age"
    DATE = "date"
    OTHER_SENSITIVE = "other_sensitive"


@unique
class MatchBasis(StrEnum):
    NAME = "name"
    LABEL = "label"
    BOTH = "both"
    FORMAT = "format"


# =============================================================================
# Config keys
# =============================================================================


class DeidConfigKeys:
    # Sections
    SECTION_MAIN = "main"

    # What to process
    SOURCE_DATASETS = "source_datasets"
    SOURCE_LIBRARY = "source_library"
    OUTPUT_LIBRARY = "output_library"
    REFERENCE_DATASET = "reference_dataset"
    REFERENCE_NAME_REGEX = "reference_name_regex"

    # Key fields
    SUBJECT_KEY_FIELD = "subject_key_field"
    BIRTH_DATE_FIELD = "birth_date_field"
    RANDOM_ID_FIELD = "random_id_field"
    AGE_GROUP_FIELD = "age_group_field"
    REFERENCE_DATE_FIELD = "reference_date_field"

    # Overrides
    FORCE_KEEP = "force_keep"
    FORCE_DROP = "force_drop"

    # Output
    NOMATCH_SUFFIX = "nomatch_suffix"
    CHUNKSIZE = "chunksize"


class DeidConfigDefaults:
    REFERENCE_NAME_REGEX = r"^ADSL$"
    SUBJECT_KEY_FIELD = "USUBJID"
    BIRTH_DATE_FIELD = "BRTHDT"
    REFERENCE_DATE_FIELD = "RFSTDT"
    NOMATCH_SUFFIX = "_nomatch"
    CHUNKSIZE = 10000


class LibraryConfigKeys:
    URL = "url"
    ECHO = "echo"


# =============================================================================
# Demo config
# =============================================================================

_DK = DeidConfigKeys
_DD = DeidConfigDefaults
_LK = LibraryConfigKeys

DEMO_CONFIG = rf"""# Configuration file for TRIALDEID (trialdeid_deidentify).
# Version {TRIALDEID_VERSION} ({TRIALDEID_VERSION_DATE}).

# =============================================================================
# Main settings
# =============================================================================

[{_DK.SECTION_MAIN}]

# -----------------------------------------------------------------------------
# What to deidentify. Specify EXACTLY ONE of:
# - {_DK.SOURCE_DATASETS}: library-qualified dataset names, e.g. "study.AE";
# - {_DK.SOURCE_LIBRARY}: a single library, all of whose datasets are used.
# -----------------------------------------------------------------------------

{_DK.SOURCE_DATASETS} =
{_DK.SOURCE_LIBRARY} = study

# Where deidentified datasets go. Must not be the same database as the source.
{_DK.OUTPUT_LIBRARY} = shared

# The subject-level reference dataset (e.g. "study.ADSL"). If blank, it is
# looked for amongst the source datasets, by name.
{_DK.REFERENCE_DATASET} =
{_DK.REFERENCE_NAME_REGEX} = {_DD.REFERENCE_NAME_REGEX}

# -----------------------------------------------------------------------------
# Key variables
# -----------------------------------------------------------------------------

{_DK.SUBJECT_KEY_FIELD} = {_DD.SUBJECT_KEY_FIELD}
{_DK.BIRTH_DATE_FIELD} = {_DD.BIRTH_DATE_FIELD}

# Reference dataset fields supplying the substitute values.
{_DK.RANDOM_ID_FIELD} = RANDID
{_DK.AGE_GROUP_FIELD} = AGEGR1
{_DK.REFERENCE_DATE_FIELD} = {_DD.REFERENCE_DATE_FIELD}

# -----------------------------------------------------------------------------
# Overrides to the automatic classification (whitespace-separated names)
# -----------------------------------------------------------------------------

{_DK.FORCE_KEEP} =
{_DK.FORCE_DROP} =

# -----------------------------------------------------------------------------
# Output
# -----------------------------------------------------------------------------

{_DK.NOMATCH_SUFFIX} = {_DD.NOMATCH_SUFFIX}
{_DK.CHUNKSIZE} = {_DD.CHUNKSIZE}

# =============================================================================
# Libraries (databases)
# =============================================================================

[study]

{_LK.URL} = sqlite:///study.sqlite
{_LK.ECHO} = False

[shared]

{_LK.URL} = sqlite:///shared.sqlite
"""
