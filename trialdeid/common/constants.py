"""
trialdeid/common/constants.py

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

**Constants used throughout TRIALDEID.**

"""


# =============================================================================
# Plain constants
# =============================================================================

EXIT_FAILURE = 1
EXIT_SUCCESS = 0


# =============================================================================
# Environment variables
# =============================================================================


class EnvVar:
    """
    Environment variable names.
    """

    DEID_CONFIG = "TRIALDEID_CONFIG"


# =============================================================================
# TRIALDEID top-level commands
# =============================================================================


class TrialdeidCommand:
    """
    Top-level commands within TRIALDEID, recorded here to ensure consistency.
    """

    DEIDENTIFY = "trialdeid_deidentify"
