"""
trialdeid/deidentify/deidentify_cli.py

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

**Command-line entry point for the deidentifier. Handles command-line input;
uses a delayed import when starting deidentification.**

"""

# Uses a delayed import (see below), so we can set up logging before
# using the config object.
import argparse
import logging

from cardinal_pythonlib.logs import configure_logger_for_colour
from rich_argparse import ArgumentDefaultsRichHelpFormatter

from trialdeid.common.exceptions import call_main_with_exception_reporting
from trialdeid.deidentify.constants import DEID_CONFIG_ENV_VAR, DEMO_CONFIG
from trialdeid.version import TRIALDEID_VERSION_PRETTY

log = logging.getLogger(__name__)


# =============================================================================
# Main
# =============================================================================


def inner_main() -> None:
    """
    Indirect command-line entry point. See command-line help.

    Calls :func:`trialdeid.deidentify.deidentify.deidentify`.
    """
    description = (
        f"Deidentify clinical study datasets for data sharing. "
        f"{TRIALDEID_VERSION_PRETTY}"
    )

    # noinspection PyTypeChecker
    parser = argparse.ArgumentParser(
        description=description,
        formatter_class=ArgumentDefaultsRichHelpFormatter,
    )

    parser.add_argument(
        "--config",
        help=f"Config file (overriding environment variable "
        f"{DEID_CONFIG_ENV_VAR})",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Be verbose"
    )

    simple_group_1 = parser.add_argument_group(
        "Simple commands not requiring a config"
    )
    simple_group_1.add_argument(
        "--version", action="version", version=TRIALDEID_VERSION_PRETTY
    )
    simple_group_1.add_argument(
        "--democonfig", action="store_true", help="Print a demo config file"
    )

    simple_group_2 = parser.add_argument_group(
        "Simple commands requiring a config"
    )
    simple_group_2.add_argument(
        "--counts",
        action="store_true",
        help="Count records in the source datasets, then stop",
    )

    mode_options = parser.add_argument_group("Mode options")
    mode_options.add_argument(
        "--dryrun",
        action="store_true",
        help="Classify variables and report what would be dropped, but "
        "write nothing",
    )

    args = parser.parse_args()

    # -------------------------------------------------------------------------
    # Verbosity, logging
    # -------------------------------------------------------------------------

    loglevel = logging.DEBUG if args.verbose else logging.INFO
    rootlogger = logging.getLogger()
    configure_logger_for_colour(rootlogger, loglevel)

    # -------------------------------------------------------------------------
    # Simple commands
    # -------------------------------------------------------------------------

    if args.democonfig:
        print(DEMO_CONFIG.strip())
        return

    # -------------------------------------------------------------------------
    # Onwards
    # -------------------------------------------------------------------------

    # Delayed import; pass everything else on
    from trialdeid.deidentify.config import Config  # delayed import
    from trialdeid.deidentify.deidentify import (  # delayed import
        deidentify,
        show_source_counts,
    )

    config = Config(filename=args.config)
    if args.counts:
        show_source_counts(config)
        return
    deidentify(config, dry_run=args.dryrun)


def main() -> None:
    """
    Command-line entry point.
    """
    call_main_with_exception_reporting(inner_main)


if __name__ == "__main__":
    main()
