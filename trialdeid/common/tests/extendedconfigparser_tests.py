"""
trialdeid/common/tests/extendedconfigparser_tests.py

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

Extended config parser tests.

"""

from io import StringIO
from unittest import TestCase

from trialdeid.common.extendedconfigparser import (
    ConfigSection,
    ExtendedConfigParser,
    gen_lines,
    gen_words,
)
from trialdeid.deidentify.library import SqlaLibrary

CONFIG = """
[main]
name = Study  # comment
words =
    alpha beta
    Gamma
flag = yes
count = 7
notnumber = seven

[db]
url = sqlite://
"""


class GeneratorTests(TestCase):
    def test_lines_and_words(self) -> None:
        lines = list(gen_lines("  a b \n\n c  \n"))
        self.assertEqual(lines, ["a b", "c"])
        self.assertEqual(list(gen_words(lines)), ["a", "b", "c"])


class ConfigSectionTests(TestCase):
    def setUp(self) -> None:
        self.cfg = ConfigSection("main", fileobj=StringIO(CONFIG))

    def test_exactly_one_source(self) -> None:
        with self.assertRaises(ValueError):
            ConfigSection("main")
        with self.assertRaises(ValueError):
            ConfigSection(
                "main",
                parser=self.cfg.parser,
                fileobj=StringIO(CONFIG),
            )

    def test_missing_section(self) -> None:
        with self.assertRaises(ValueError):
            ConfigSection("nosuchsection", parser=self.cfg.parser)

    def test_str(self) -> None:
        self.assertEqual(self.cfg.opt_str("name"), "Study")
        self.assertEqual(self.cfg.opt_str("absent", default="x"), "x")
        with self.assertRaises(ValueError):
            self.cfg.opt_str("absent", required=True)

    def test_multiline(self) -> None:
        self.assertEqual(
            self.cfg.opt_multiline("words"), ["alpha", "beta", "Gamma"]
        )
        self.assertEqual(
            self.cfg.opt_multiline("words", upper=True),
            ["ALPHA", "BETA", "GAMMA"],
        )
        self.assertEqual(
            self.cfg.opt_multiline("words", as_words=False),
            ["alpha beta", "Gamma"],
        )
        self.assertEqual(self.cfg.opt_multiline("absent"), [])
        with self.assertRaises(ValueError):
            self.cfg.opt_multiline("absent", required=True)

    def test_bool(self) -> None:
        self.assertTrue(self.cfg.opt_bool("flag"))
        self.assertFalse(self.cfg.opt_bool("absent", default=False))
        with self.assertRaises(ValueError):
            self.cfg.opt_bool("absent")

    def test_int_positive(self) -> None:
        self.assertEqual(self.cfg.opt_int_positive("count"), 7)
        self.assertEqual(self.cfg.opt_int_positive("notnumber", 3), 3)
        with self.assertRaises(ValueError):
            self.cfg.opt_int_positive("absent")


class GetLibraryTests(TestCase):
    def test_get_library(self) -> None:
        parser = ExtendedConfigParser()
        parser.read_string(CONFIG)
        library = parser.get_library("db", name="study")
        self.assertIsInstance(library, SqlaLibrary)
        self.assertEqual(library.name, "study")
        library.engine.dispose()
        with self.assertRaises(ValueError):
            parser.get_library("main")
