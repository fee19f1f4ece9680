import pytest

from app.core.exceptions import InvalidStatusTransition, NotFoundError
from app.models.resume import AnalysisStatus
from app.services import resume_records
from app.services.resume_records import RAW_TEXT_LIMIT


def _create(db_session, user_id, name="cv.txt"):
    return resume_records.create_resume(db_session, user_id, name, f"/api/storage/{user_id}/{name}", f"{user_id}/{name}")


def test_created_resume_is_pending(db_session, user_id):
    resume = _create(db_session, user_id)
    assert resume.status == AnalysisStatus.pending
    assert resume.id
    assert resume.created_at is not None


def test_happy_path_transitions(db_session, user_id):
    resume = _create(db_session, user_id)
    resume_records.update_resume_status(db_session, resume.id, AnalysisStatus.processing)
    updated = resume_records.update_resume_status(db_session, resume.id, "completed", raw_text="x" * 6000)
    assert updated.status == AnalysisStatus.completed
    assert len(updated.raw_text) == RAW_TEXT_LIMIT


def test_pending_can_fail_directly(db_session, user_id):
    resume = _create(db_session, user_id)
    failed = resume_records.update_resume_status(db_session, resume.id, AnalysisStatus.failed, error_message="boom")
    assert failed.status == AnalysisStatus.failed
    assert failed.error_message == "boom"


@pytest.mark.parametrize("path", [
    [AnalysisStatus.completed],
    [AnalysisStatus.processing, AnalysisStatus.pending],
    [AnalysisStatus.processing, AnalysisStatus.completed, AnalysisStatus.processing],
    [AnalysisStatus.failed, AnalysisStatus.processing],
])
def test_illegal_transitions_are_rejected(db_session, user_id, path):
    resume = _create(db_session, user_id)
    *allowed, rejected = path
    for status in allowed:
        resume_records.update_resume_status(db_session, resume.id, status)
    with pytest.raises(InvalidStatusTransition) as exc:
        resume_records.update_resume_status(db_session, resume.id, rejected)
    assert exc.value.status_code == 409


def test_same_status_is_a_noop(db_session, user_id):
    resume = _create(db_session, user_id)
    again = resume_records.update_resume_status(db_session, resume.id, AnalysisStatus.pending)
    assert again.status == AnalysisStatus.pending


def test_update_unknown_resume(db_session):
    with pytest.raises(NotFoundError):
        resume_records.update_resume_status(db_session, "missing", AnalysisStatus.processing)


def test_user_resumes_newest_first_and_scoped(db_session, user_id):
    first = _create(db_session, user_id, "first.txt")
    second = _create(db_session, user_id, "second.txt")
    _create(db_session, "someone-else", "theirs.txt")

    resumes = resume_records.get_user_resumes(db_session, user_id)
    assert [r.id for r in resumes] == [second.id, first.id]


def test_get_resume_by_id_respects_owner(db_session, user_id):
    resume = _create(db_session, user_id)
    assert resume_records.get_resume_by_id(db_session, resume.id).id == resume.id
    assert resume_records.get_resume_by_id(db_session, resume.id, "someone-else") is None
    assert resume_records.get_resume_by_id(db_session, "missing") is None


def test_delete_resume_removes_file(db_session, user_id, storage):
    key = f"{user_id}/cv.txt"
    storage.upload(key, b"resume bytes")
    resume = resume_records.create_resume(db_session, user_id, "cv.txt", storage.public_url(key), key)

    resume_records.delete_resume(db_session, resume.id, user_id, storage=storage)

    assert resume_records.get_resume_by_id(db_session, resume.id) is None
    with pytest.raises(NotFoundError):
        storage.download(key)
