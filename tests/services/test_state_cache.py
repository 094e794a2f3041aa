import pytest

from app.tutorado.models.entities import Attendance, StudentDetail, StudentSummary, User
from app.tutorado.services.state_cache import ATTENDANCES, STUDENTS, USERS, AppStateCache


@pytest.fixture
def cache(sample_students, sample_attendance, admin_user, tutor_user) -> AppStateCache:
    cache = AppStateCache()
    cache.load(USERS, [admin_user, tutor_user])
    cache.load(STUDENTS, sample_students)
    cache.load(ATTENDANCES, [sample_attendance])
    return cache


def test_new_cache_is_empty():
    cache = AppStateCache()
    assert cache.is_empty
    assert cache.users == [] and cache.students == [] and cache.attendances == []


def test_upsert_of_known_id_replaces_in_place(cache):
    renamed = StudentSummary(id="ALU001", tutor_id="TUT001", name="João P. Santos", series="7ºSérie", birth_date="2011-03-14")
    cache.merge_upsert(STUDENTS, renamed)
    cache.merge_upsert(STUDENTS, renamed)

    assert cache.ids(STUDENTS) == ["ALU001", "ALU002"]
    assert cache.find(STUDENTS, "ALU001").name == "João P. Santos"


def test_new_students_and_users_are_appended(cache):
    cache.merge_upsert(STUDENTS, StudentSummary(id="ALU003", name="Novo"))
    cache.merge_upsert(USERS, User(id="TUT002", name="Outro", role="TUTOR"))
    assert cache.ids(STUDENTS)[-1] == "ALU003"
    assert cache.ids(USERS)[-1] == "TUT002"


def test_new_attendances_are_prepended(cache, sample_attendance):
    newer = sample_attendance.model_copy(update={"id": "ATD1800000000000", "date": "2024-06-01"})
    cache.merge_upsert(ATTENDANCES, newer)
    assert cache.ids(ATTENDANCES) == ["ATD1800000000000", "ATD1700000000000"]


def test_delete_removes_only_that_id(cache):
    cache.merge_delete(STUDENTS, "ALU001")
    cache.merge_delete(STUDENTS, "ALU999")
    assert cache.ids(STUDENTS) == ["ALU002"]


def test_list_identity_survives_mutations(cache):
    students = cache.students
    cache.merge_delete(STUDENTS, "ALU002")
    cache.load(STUDENTS, [])
    assert cache.students is students


def test_replace_entry_swaps_summary_for_detail(cache):
    detail = StudentDetail(id="ALU002", tutor_id="TUT002", name="Beatriz Lima", has_internet=True)
    assert cache.replace_entry(STUDENTS, detail) is True
    assert cache.find(STUDENTS, "ALU002") is detail
    assert cache.ids(STUDENTS) == ["ALU001", "ALU002"]


def test_replace_entry_ignores_unknown_id(cache):
    assert cache.replace_entry(STUDENTS, StudentDetail(id="ALU050", name="Fantasma")) is False
    assert "ALU050" not in cache.ids(STUDENTS)


def test_unknown_collection_raises(cache):
    with pytest.raises(ValueError, match="Unknown collection"):
        cache.load("teachers", [])
    with pytest.raises(ValueError):
        cache.find("teachers", "X")


def test_find_missing_returns_none(cache):
    assert cache.find(ATTENDANCES, "nope") is None
    assert isinstance(cache.find(ATTENDANCES, "ATD1700000000000"), Attendance)
