"""
setup.py

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

TRIALDEID setup file

To use:

    python setup.py sdist

    twine upload dist/*

To install in development mode:

    pip install -e .[test]

"""

from setuptools import find_packages, setup
from codecs import open
import os

from trialdeid.common.constants import TrialdeidCommand
from trialdeid.version import TRIALDEID_VERSION, require_minimum_python_version

require_minimum_python_version()


# =============================================================================
# Constants
# =============================================================================

THIS_DIR = os.path.abspath(os.path.dirname(__file__))  # .../trialdeid

with open(os.path.join(THIS_DIR, "README.rst"), encoding="utf-8") as f:
    LONG_DESCRIPTION = f.read()

INSTALL_REQUIRES = [
    "cardinal_pythonlib>=2.1.0",  # RNC libraries
    "colorlog>=4.1.0",  # colour in logs (via cardinal_pythonlib.logs)
    "pendulum>=2.1.2",  # dates/times
    "regex>=2024.11.6",  # better regexes (cf. re)
    "rich-argparse>=0.5.0",  # colourful help
    "SQLAlchemy>=2.0.36",  # database access
    # ---------------------------------------------------------------------
    # For database connections (see README): install manually
    # ---------------------------------------------------------------------
    # MySQL: one of:
    #   "PyMySQL",
    #   "mysqlclient",
    # PostgreSQL:
    #   "psycopg2",  # has prerequisites (e.g. pg_config executable)
]

TEST_REQUIRES = [
    "factory_boy>=3.3.0",  # easier test data creation
    "faker>=13.3.1",  # test data creation
    "pytest>=8.3.4",  # automatic testing
]


# =============================================================================
# setup args
# =============================================================================

setup(
    name="trialdeid",
    version=TRIALDEID_VERSION,
    description="TRIALDEID: deidentification of clinical study datasets",
    long_description=LONG_DESCRIPTION,
    # Author details
    author="Rudolf Cardinal",
    author_email="rudolf@pobox.com",
    # Choose your license
    license="GNU General Public License v3 or later (GPLv3+)",
    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        # How mature is this project? Common values are
        #   3 - Alpha
        #   4 - Beta
        #   5 - Production/Stable
        "Development Status :: 4 - Beta",
        # Indicate who your project is intended for
        "Intended Audience :: Science/Research",
        # Pick your license as you wish (should match "license" above)
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",  # noqa: E501
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
    ],
    keywords="deidentification clinical trials",
    packages=find_packages(include=["trialdeid", "trialdeid.*"]),
    # finds all the .py files in subdirectories, as long as there are
    # __init__.py files
    include_package_data=True,
    install_requires=INSTALL_REQUIRES,
    extras_require={
        "test": TEST_REQUIRES,
    },
    entry_points={
        "console_scripts": [
            # Format is "script=module:function".
            f"{TrialdeidCommand.DEIDENTIFY}=trialdeid.deidentify.deidentify_cli:main",  # noqa: E501
        ],
    },
)
