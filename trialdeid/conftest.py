"""
trialdeid/conftest.py

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

pytest configuration

"""

from os.path import join
import tempfile
from typing import Generator, TYPE_CHECKING

from cardinal_pythonlib.sqlalchemy.session import make_sqlite_url
import pytest
from sqlalchemy.engine import create_engine
from sqlalchemy.engine.base import Engine
from sqlalchemy.orm.session import Session

from trialdeid.testing import SourceTestBase

if TYPE_CHECKING:
    # Should not need to import from _pytest in later versions of pytest
    # https://github.com/pytest-dev/pytest/issues/7469
    from _pytest.config.argparsing import Parser
    from _pytest.fixtures import FixtureRequest

SOURCE_DATABASE_FILENAME = "trialdeid_test_source.sqlite"
OUTPUT_DATABASE_FILENAME = "trialdeid_test_output.sqlite"


def pytest_addoption(parser: "Parser") -> None:
    parser.addoption(
        "--echo",
        action="store_true",
        dest="echo",
        default=False,
        help="Log all SQL statments to the default log handler",
    )


@pytest.fixture(scope="session")
def echo(request: "FixtureRequest") -> bool:
    return request.config.getvalue("echo")


@pytest.fixture
def tmpdir_obj() -> Generator[tempfile.TemporaryDirectory, None, None]:
    tmpdir_obj = tempfile.TemporaryDirectory()

    yield tmpdir_obj

    tmpdir_obj.cleanup()


def make_file_sqlite_engine(filename: str, echo: bool = False) -> Engine:
    """
    Create an SQLAlchemy :class:`Engine` for an on-disk SQLite database.
    """
    return create_engine(make_sqlite_url(filename), echo=echo, future=True)


# The databases are on disk, and fresh for each test, because the
# deidentifier opens them itself, by URL.
@pytest.fixture
def source_engine(
    tmpdir_obj: tempfile.TemporaryDirectory, echo: bool
) -> Generator[Engine, None, None]:
    engine = make_file_sqlite_engine(
        join(tmpdir_obj.name, SOURCE_DATABASE_FILENAME), echo=echo
    )
    SourceTestBase.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def source_dbsession(
    source_engine: Engine,
) -> Generator[Session, None, None]:
    session = Session(bind=source_engine, future=True)

    yield session

    session.close()


@pytest.fixture
def setup(
    request: "FixtureRequest",
    source_engine: Engine,
    source_dbsession: Session,
    tmpdir_obj: tempfile.TemporaryDirectory,
) -> None:
    # Pytest prefers function-based tests over unittest.TestCase subclasses and
    # methods, but it still supports the latter perfectly well.
    # We use this fixture in testing/classes.py to store these values into
    # DatabaseTestCase and its descendants.
    request.cls.source_engine = source_engine
    request.cls.source_dbsession = source_dbsession
    request.cls.tmpdir_obj = tmpdir_obj
    request.cls.source_db_url = make_sqlite_url(
        join(tmpdir_obj.name, SOURCE_DATABASE_FILENAME)
    )
    request.cls.output_db_url = make_sqlite_url(
        join(tmpdir_obj.name, OUTPUT_DATABASE_FILENAME)
    )
