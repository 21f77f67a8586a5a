"""
trialdeid/common/extendedconfigparser.py

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

**Slightly extended ConfigParser.**

"""

import configparser
import logging
from typing import Generator, Iterable, List, Optional, TextIO

from trialdeid.deidentify.constants import LibraryConfigKeys
from trialdeid.deidentify.library import SqlaLibrary

log = logging.getLogger(__name__)


def configfail(errmsg) -> None:
    """
    Args:
        errmsg: error message

    Raises:
        :exc:`ValueError`

    """
    log.critical(errmsg)
    raise ValueError(errmsg)


def gen_lines(multiline: str) -> Generator[str, None, None]:
    """
    Generate lines from a multi-line string. (Apply :func:`strip`, too.)
    """
    for line in multiline.splitlines():
        line = line.strip()
        if line:
            yield line


def gen_words(lines: Iterable[str]) -> Generator[str, None, None]:
    """
    Generate words from lines.
    """
    for line in lines:
        for word in line.split():
            yield word


class ExtendedConfigParser(configparser.ConfigParser):
    """
    A version of ``configparser.ConfigParser`` with assistance functions for
    reading parameters.
    """

    def __init__(self, *args, case_sensitive: bool = False, **kwargs) -> None:
        """
        Args:
            case_sensitive:
                Make the parser case-sensitive for option names?
        """
        kwargs["interpolation"] = None
        kwargs["inline_comment_prefixes"] = ("#", ";")
        super().__init__(*args, **kwargs)
        if case_sensitive:
            # https://stackoverflow.com/questions/1611799/preserve-case-in-configparser  # noqa
            self.optionxform = str

    @staticmethod
    def raise_missing(section: str, option: str) -> None:
        """
        Raise :exc:`ValueError` to complain about a missing parameter.

        Args:
            section: section name
            option: parameter name
        """
        configfail(f"Config section [{section}]: missing parameter: {option}")

    def require_section(self, section: str) -> None:
        """
        Requires that a section be present, or raises :exc:`ValueError`.

        Args:
            section: section name
        """
        if not self.has_section(section):
            log.warning(f"Sections: {list(self.keys())!r}")
            configfail(f"Config missing section: {section}")

    def get_str(
        self,
        section: str,
        option: str,
        required: bool = False,
        default: str = None,
    ) -> Optional[str]:
        """
        Returns a string parameter.

        Args:
            section: section name
            option: parameter name
            required: raise :exc:`ValueError` if the parameter is missing?
            default: value to return if parameter is missing and not required

        Returns:
            string parameter value, or ``default``
        """
        if required and default is not None:
            raise AssertionError("required and default are incompatible")
        s = self.get(section, option, fallback=default)
        if required and not s:
            self.raise_missing(section, option)
        return s

    def get_str_list(
        self,
        section: str,
        option: str,
        as_words: bool = True,
        lower: bool = False,
        upper: bool = False,
        required: bool = False,
    ) -> List[str]:
        """
        Returns a string list parameter.

        Args:
            section: section name
            option: parameter name
            as_words: break the value into words (rather than lines)?
            lower: force the return value into lower case?
            upper: force the return value into upper case?
            required: raise :exc:`ValueError` if the parameter is missing?

        Returns:
            list of strings
        """
        multiline = self.get(section, option, fallback="")
        if lower:
            multiline = multiline.lower()
        elif upper:
            multiline = multiline.upper()
        if as_words:
            result = list(gen_words(gen_lines(multiline)))
        else:  # as lines
            result = list(gen_lines(multiline))
        if required and not result:
            self.raise_missing(section, option)
        return result

    def get_int_default_if_failure(
        self, section: str, option: str, default: int = None
    ) -> Optional[int]:
        """
        Returns an integer parameter, or a default if we can't read one.
        """
        try:
            return self.getint(section, option, fallback=default)
        except ValueError:  # e.g. invalid literal for int() with base 10
            return default

    def get_int_positive_raise_if_no_default(
        self, section: str, option: str, default: int = None
    ) -> int:
        """
        Like :meth:`get_int_default_if_failure`, but raises if no value can
        be found, and requires that the result be greater than 0.
        """
        result = self.get_int_default_if_failure(
            section=section, option=option, default=default
        )
        if result is None:
            self.raise_missing(section, option)
        if result <= 0:
            configfail(
                f"Config section [{section}]: option {option!r} "
                f"must be positive"
            )
        return result

    def get_bool(self, section: str, option: str, default: bool = None) -> bool:
        """
        Retrieves a boolean value from a parser.

        Args:
            section:
                section name within config file
            option:
                option (parameter) name within that section
            default:
                Value to return if option is absent. If the default is not
                specified, and the option is missing, raise an error.
        """
        result = self.getboolean(section, option, fallback=default)
        if result is None:
            self.raise_missing(section, option)
        return result

    def get_library(self, section: str, name: str = None) -> SqlaLibrary:
        """
        Gets a data library (a database holding datasets) from the config
        file.

        Args:
            section: config section name
            name: name to give the library (if ``None``, the section name
                will be used)

        Returns:
            a :class:`trialdeid.deidentify.library.SqlaLibrary`

        """
        self.require_section(section)
        name = name or section
        url = self.get_str(section, LibraryConfigKeys.URL, required=True)
        echo = self.get_bool(section, LibraryConfigKeys.ECHO, default=False)
        return SqlaLibrary(name, url, echo=echo)


class ConfigSection:
    """
    Represents a section within a config file.
    """

    def __init__(
        self,
        section: str,
        parser: ExtendedConfigParser = None,
        filename: str = None,
        fileobj: TextIO = None,
        case_sensitive: bool = False,
        encoding: str = "utf8",
    ) -> None:
        """
        You must specify exactly one of ``parser``, ``filename``, or
        ``fileobj``.

        Args:
            section:
                The name of the section within the config file, e.g.
                ``main`` for the section marked by ``[main]``.
            parser:
                Specify this, a :class:`ExtendedConfigParser`, if you
                have already loaded the file into a parser.
            filename:
                The name of a file to open. Specify also the encoding.
            fileobj:
                A file-like object to read.
            case_sensitive:
                If a new parser is created, make it case-sensitive for
                options?
            encoding:
                If ``filename`` is used, the character encoding.
        """
        self.section = section

        if bool(parser) + bool(filename) + bool(fileobj) != 1:
            raise ValueError(
                "Specify exactly one of: parser, filename, fileobj"
            )

        if parser:
            assert isinstance(parser, ExtendedConfigParser)
            self.parser = parser
        elif filename:
            self.parser = ExtendedConfigParser(case_sensitive=case_sensitive)
            log.info(f"Reading config file: {filename}")
            if not self.parser.read(filename, encoding=encoding):
                configfail(f"Could not read config file: {filename}")
        else:
            self.parser = ExtendedConfigParser(case_sensitive=case_sensitive)
            self.parser.read_file(fileobj)

        self.parser.require_section(self.section)

    def opt_str(
        self, option: str, default: str = None, required: bool = False
    ) -> str:
        """
        Reads a string option.

        Args:
            option: parameter (option) name
            default: default if not found and not required
            required: is the parameter required?
        """
        return self.parser.get_str(
            self.section, option, default=default, required=required
        )

    def opt_multiline(
        self,
        option: str,
        required: bool = False,
        lower: bool = False,
        upper: bool = False,
        as_words: bool = True,
    ) -> List[str]:
        """
        Reads a multiline string, returning a list of words or lines.

        Args:
            option: parameter (option) name
            required: is the parameter required?
            lower: convert to lower case?
            upper: convert to upper case?
            as_words: split as words, rather than as lines?
        """
        return self.parser.get_str_list(
            self.section,
            option,
            as_words=as_words,
            lower=lower,
            upper=upper,
            required=required,
        )

    def opt_bool(self, option: str, default: bool = None) -> bool:
        """
        Reads a boolean option.

        Args:
            option: parameter (option) name
            default: default if not found (if None, the parameter is required)
        """
        return self.parser.get_bool(self.section, option, default=default)

    def opt_int_positive(
        self, option: str, default: int = None
    ) -> Optional[int]:
        """
        Reads an integer option that must be greater than 0.

        Args:
            option: parameter (option) name
            default: default if not found (if None, the parameter is required)
        """
        return self.parser.get_int_positive_raise_if_no_default(
            self.section, option, default=default
        )
