"""
trialdeid/deidentify/library.py

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

**Data libraries: collections of datasets, and the metadata describing
them.**

A library is a database reached via an SQLAlchemy URL; each dataset is a
table. The deidentification engine sees only the :class:`DataLibrary`
interface, so it can be exercised against in-memory libraries too.

"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, List, Optional

from cardinal_pythonlib.lists import chunks
from cardinal_pythonlib.sqlalchemy.core_query import count_star
from cardinal_pythonlib.sqlalchemy.session import get_safe_url_from_engine
from sqlalchemy import Column, create_engine, inspect, MetaData, select, Table
from sqlalchemy.engine.base import Engine
from sqlalchemy.sql.sqltypes import Date, DateTime, String, Time
from sqlalchemy.sql.type_api import TypeEngine

from trialdeid.deidentify.constants import (
    DeidConfigDefaults,
    FIXED_DATE_FORMATS,
    FORMAT_DATE,
    FORMAT_DATETIME,
    FORMAT_TIME,
)

log = logging.getLogger(__name__)


# =============================================================================
# Variable metadata
# =============================================================================


def display_format_for_type(coltype: Optional[TypeEngine]) -> Optional[str]:
    """
    The display format implied by a column type: a calendar date, a
    date/time, a time, or nothing in particular.
    """
    if coltype is None:
        return None
    # DateTime is not a subclass of Date, so the order is unimportant.
    if isinstance(coltype, DateTime):
        return FORMAT_DATETIME
    if isinstance(coltype, Date):
        return FORMAT_DATE
    if isinstance(coltype, Time):
        return FORMAT_TIME
    return None


@dataclass(frozen=True)
class VariableMeta:
    """
    Read-only description of one variable (column) of a dataset.
    """

    name: str
    label: str = ""
    display_format: Optional[str] = None
    sqla_type: Optional[TypeEngine] = field(
        default=None, compare=False, repr=False
    )

    @property
    def is_date_like(self) -> bool:
        """
        Does the variable display with a fixed calendar-date format?
        """
        return self.display_format in FIXED_DATE_FORMATS

    @classmethod
    def from_type(
        cls, name: str, coltype: Optional[TypeEngine], label: str = None
    ) -> "VariableMeta":
        return cls(
            name=name,
            label=label or "",
            display_format=display_format_for_type(coltype),
            sqla_type=coltype,
        )


@dataclass(frozen=True)
class DatasetRef:
    """
    A library-qualified dataset name, such as ``study.AE``.
    """

    library: str
    name: str

    def __str__(self) -> str:
        return f"{self.library}.{self.name}"

    @classmethod
    def from_text(cls, text: str) -> "DatasetRef":
        """
        Parses ``library.dataset``.

        Raises:
            :exc:`ValueError` if the text isn't of that form
        """
        parts = text.strip().split(".")
        if len(parts) != 2 or not all(parts):
            raise ValueError(
                f"Dataset {text!r} must be given as 'library.dataset'"
            )
        return cls(library=parts[0], name=parts[1])


# =============================================================================
# Library interface
# =============================================================================


class DataLibrary(ABC):
    """
    A named collection of datasets.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return self.name

    @abstractmethod
    def dataset_names(self) -> List[str]:
        """
        Names of all datasets in the library.
        """
        raise NotImplementedError

    def find_dataset(self, name: str) -> Optional[str]:
        """
        Returns the stored name of a dataset, matched case-insensitively, or
        ``None`` if there is no such dataset.
        """
        wanted = name.upper()
        for candidate in self.dataset_names():
            if candidate.upper() == wanted:
                return candidate
        return None

    def has_dataset(self, name: str) -> bool:
        return self.find_dataset(name) is not None

    @abstractmethod
    def describe(self, dataset: str) -> List[VariableMeta]:
        """
        Metadata for the variables of a dataset, in storage order.
        """
        raise NotImplementedError

    @abstractmethod
    def row_count(self, dataset: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def dataset_label(self, dataset: str) -> str:
        """
        The descriptive label of the dataset, or ``""``.
        """
        raise NotImplementedError

    @abstractmethod
    def gen_records(self, dataset: str) -> Iterable[Dict[str, Any]]:
        """
        Generates the records of a dataset as ``{variable: value}``
        dictionaries.
        """
        raise NotImplementedError

    @abstractmethod
    def write_dataset(
        self,
        dataset: str,
        variables: List[VariableMeta],
        records: List[Dict[str, Any]],
        label: str = "",
    ) -> None:
        """
        Creates a dataset, replacing any existing dataset of the same name.
        """
        raise NotImplementedError

    @abstractmethod
    def drop_dataset(self, dataset: str) -> None:
        """
        Deletes a dataset, if it exists.
        """
        raise NotImplementedError

    @abstractmethod
    def same_location(self, other: "DataLibrary") -> bool:
        """
        Would writing to this library overwrite datasets in ``other``?
        """
        raise NotImplementedError


# =============================================================================
# Database-backed library
# =============================================================================


class SqlaLibrary(DataLibrary):
    """
    A library whose datasets are tables in a database.

    Variable labels are column comments and dataset labels are table
    comments, where the database supports them.
    """

    def __init__(
        self,
        name: str,
        url: str,
        echo: bool = False,
        chunksize: int = DeidConfigDefaults.CHUNKSIZE,
    ) -> None:
        """
        Args:
            name: internal library name
            url: SQLAlchemy URL
            echo: echo SQL?
            chunksize: number of records inserted per statement
        """
        super().__init__(name)
        self.engine = create_engine(url, echo=echo, future=True)  # type: Engine  # noqa
        self.chunksize = chunksize
        log.debug(f"Library {name}: {get_safe_url_from_engine(self.engine)}")

    def _table(self, dataset: str) -> Table:
        return Table(dataset, MetaData(), autoload_with=self.engine)

    def dataset_names(self) -> List[str]:
        return inspect(self.engine).get_table_names()

    def describe(self, dataset: str) -> List[VariableMeta]:
        return [
            VariableMeta.from_type(
                name=col["name"],
                coltype=col["type"],
                label=col.get("comment"),
            )
            for col in inspect(self.engine).get_columns(dataset)
        ]

    def row_count(self, dataset: str) -> int:
        with self.engine.connect() as conn:
            return count_star(conn, dataset)

    def dataset_label(self, dataset: str) -> str:
        if not self.engine.dialect.supports_comments:
            return ""
        comment = inspect(self.engine).get_table_comment(dataset)
        return comment.get("text") or ""

    def gen_records(self, dataset: str) -> Iterable[Dict[str, Any]]:
        table = self._table(dataset)
        with self.engine.connect() as conn:
            for row in conn.execute(select(table)).mappings():
                yield dict(row)

    def write_dataset(
        self,
        dataset: str,
        variables: List[VariableMeta],
        records: List[Dict[str, Any]],
        label: str = "",
    ) -> None:
        columns = [
            Column(
                v.name,
                v.sqla_type if v.sqla_type is not None else String(255),
                comment=v.label or None,
            )
            for v in variables
        ]
        table = Table(dataset, MetaData(), *columns, comment=label or None)
        log.debug(
            f"Writing {self.name}.{dataset}: {len(variables)} variables, "
            f"{len(records)} records"
        )
        with self.engine.begin() as conn:
            table.drop(conn, checkfirst=True)
            table.create(conn)
            for chunk in chunks(records, self.chunksize):
                conn.execute(table.insert(), chunk)

    def drop_dataset(self, dataset: str) -> None:
        log.debug(f"Dropping {self.name}.{dataset}")
        table = Table(dataset, MetaData())
        with self.engine.begin() as conn:
            table.drop(conn, checkfirst=True)

    def same_location(self, other: DataLibrary) -> bool:
        if not isinstance(other, SqlaLibrary):
            return False
        return self.engine.url == other.engine.url
