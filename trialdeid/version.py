"""
trialdeid/version.py

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

**Version constants for TRIALDEID.**

"""

import sys


# =============================================================================
# Constants
# =============================================================================

TRIALDEID_VERSION = "0.3.1"
TRIALDEID_VERSION_DATE = "2026-10-17"

MINIMUM_PYTHON_VERSION = (3, 9)


# =============================================================================
# Derived constants
# =============================================================================

TRIALDEID_VERSION_PRETTY = (
    f"TRIALDEID version {TRIALDEID_VERSION}, {TRIALDEID_VERSION_DATE}."
)
MINIMUM_PYTHON_VERSION_AS_DECIMAL = ".".join(
    str(_) for _ in MINIMUM_PYTHON_VERSION
)


# =============================================================================
# Functions
# =============================================================================


def require_minimum_python_version():
    """
    Checks that we are running the required minimum Python version.
    """
    assert (
        sys.version_info >= MINIMUM_PYTHON_VERSION
    ), f"Need Python {MINIMUM_PYTHON_VERSION_AS_DECIMAL}+"
