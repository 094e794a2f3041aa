# tests/conftest.py
import asyncio
import sys

import pytest

from app.tutorado.models.entities import Attendance, StudentSummary, User

# This is the crucial fix for Windows asyncio issues with pytest.
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest.fixture
def admin_user() -> User:
    return User(id="ADM001", name="Maria Coordenadora", role="ADMIN")


@pytest.fixture
def tutor_user() -> User:
    return User(id="TUT001", name="Carlos Tutor Silva", role="TUTOR", password="1234")


@pytest.fixture
def other_tutor() -> User:
    return User(id="TUT002", name="Ana Paula Souza", role="TUTOR")


@pytest.fixture
def sample_students():
    return [
        StudentSummary(id="ALU001", tutor_id="TUT001", name="João Pedro", series="7ºSérie", birth_date="2011-03-14"),
        StudentSummary(id="ALU002", tutor_id="TUT002", name="Beatriz Lima", series="9ºSérie", birth_date="2009-10-02"),
    ]


@pytest.fixture
def sample_attendance() -> Attendance:
    return Attendance(
        id="ATD1700000000000",
        student_id="ALU001",
        student_name="João Pedro",
        tutor_id="TUT001",
        tutor_name="Carlos Tutor Silva",
        date="2024-05-10",
        dimension="Acadêmica",
        subject="Matemática",
        notes="Revisão de frações",
    )
