"""
trialdeid/testing/models.py

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

**SQLAlchemy models for test clinical study datasets.**

"""

from sqlalchemy import Column, Date, DateTime, Float, Integer, String

from trialdeid.testing import SourceTestBase

SubjectKeyColType = String(length=20)
CodeColType = String(length=20)


class Adsl(SourceTestBase):
    """
    Subject-level analysis dataset; one record per subject.
    """

    __tablename__ = "ADSL"

    STUDYID = Column(CodeColType, comment="Study Identifier")
    USUBJID = Column(
        SubjectKeyColType,
        primary_key=True,
        comment="Unique Subject Identifier",
    )
    SUBJID = Column(CodeColType, comment="Subject Identifier for the Study")
    SITEID = Column(CodeColType, comment="Study Site Identifier")
    RANDID = Column(CodeColType, comment="Randomization Number")
    AGE = Column(Integer, comment="Age")
    AGEU = Column(String(10), comment="Age Units")
    AGEGR1 = Column(String(10), comment="Pooled Age Group 1")
    SEX = Column(String(1), comment="Sex")
    BRTHDT = Column(Date, comment="Date of Birth")
    RFSTDT = Column(Date, comment="Subject Reference Start Date")
    TRTSDT = Column(Date, comment="Date of First Exposure to Treatment")
    TRT01P = Column(String(40), comment="Planned Treatment for Period 01")


class Ae(SourceTestBase):
    """
    Adverse events; any number of records per subject.
    """

    __tablename__ = "AE"

    AESEQ = Column(Integer, primary_key=True, comment="Sequence Number")
    STUDYID = Column(CodeColType, comment="Study Identifier")
    USUBJID = Column(SubjectKeyColType, comment="Unique Subject Identifier")
    AETERM = Column(String(100), comment="Reported Term for the Adverse Event")
    AESTDT = Column(Date, comment="Start Date of Adverse Event")
    AEENDT = Column(Date, comment="End Date of Adverse Event")
    AESTDTM = Column(DateTime, comment="Start Date/Time of Adverse Event")
    AESEV = Column(String(10), comment="Severity/Intensity")


class Lbref(SourceTestBase):
    """
    Laboratory reference ranges; not subject data.
    """

    __tablename__ = "LBREF"

    PARAMCD = Column(CodeColType, primary_key=True, comment="Parameter Code")
    LOW = Column(Float, comment="Lower Limit of Normal")
    HIGH = Column(Float, comment="Upper Limit of Normal")
