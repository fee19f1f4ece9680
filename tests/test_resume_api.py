import pytest
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.exceptions import AIRateLimitError, ScraperError
from tests.conftest import SAMPLE_RESUME_TEXT, make_search_result


def _upload(client, headers, name="resume.txt", data=None, content_type="text/plain"):
    payload = SAMPLE_RESUME_TEXT.encode("utf-8") if data is None else data
    return client.post("/api/resumes/upload", headers=headers, files={"file": (name, payload, content_type)})


def _gateway_resume(client, user_id):
    response = client.post("/api/db", json={
        "action": "create_resume",
        "params": {"user_id": user_id, "file_name": "cv.txt", "file_url": "https://files.example.com/cv.txt"},
    })
    return response.json()["data"][0]["id"]


def test_upload_returns_pending_resume(client, auth_headers, user_id):
    response = _upload(client, auth_headers)
    assert response.status_code == 201
    resume = response.json()["resume"]
    assert resume["status"] == "pending"
    assert resume["user_id"] == user_id
    assert resume["file_name"] == "resume.txt"
    assert resume["file_url"].startswith(f"/api/storage/{user_id}/")


def test_upload_runs_analysis_in_background(client, auth_headers):
    resume_id = _upload(client, auth_headers).json()["resume"]["id"]

    detail = client.get(f"/api/resumes/{resume_id}", headers=auth_headers).json()
    assert detail["status"] == "completed"
    analysis = detail["resume_analysis"][0]
    assert analysis["ats_score"] == 78
    assert analysis["ats_band"]["band"] == "good"
    assert len(detail["skill_gaps"]) == 3
    assert len(detail["interview_questions"]) == 3


def test_failed_analysis_is_visible(client, auth_headers, fake_llm):
    fake_llm.responses = [AIRateLimitError()]
    resume_id = _upload(client, auth_headers).json()["resume"]["id"]

    detail = client.get(f"/api/resumes/{resume_id}", headers=auth_headers).json()
    assert detail["status"] == "failed"
    assert detail["error_message"] == "Rate limit exceeded. Please try again."
    assert detail["resume_analysis"] == []


@pytest.mark.parametrize("name, content_type, data, status_code", [
    ("resume.exe", "application/octet-stream", b"MZ binary", 400),
    ("resume.pdf", "image/png", b"%PDF-1.4", 400),
    ("resume.txt", "text/plain", b"", 400),
    ("resume.pdf", "application/pdf", b"0" * (10 * 1024 * 1024 + 1), 413),
])
def test_upload_rejections(client, auth_headers, name, content_type, data, status_code):
    response = _upload(client, auth_headers, name=name, data=data, content_type=content_type)
    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["code"] == "INVALID_FILE"
    assert client.get("/api/resumes", headers=auth_headers).json() == []


def test_oversize_upload_is_not_read_in_full(client, auth_headers, monkeypatch):
    sizes = []
    original_read = UploadFile.read

    async def recording_read(self, size=-1):
        sizes.append(size)
        return await original_read(self, size)

    monkeypatch.setattr(UploadFile, "read", recording_read)
    monkeypatch.setattr(settings, "max_upload_bytes", 64)

    response = _upload(client, auth_headers, data=b"a" * 1000)
    assert response.status_code == 413
    assert 65 in sizes
    assert -1 not in sizes


def test_octet_stream_upload_is_accepted_by_extension(client, auth_headers):
    response = _upload(client, auth_headers, name="resume.txt", content_type="application/octet-stream")
    assert response.status_code == 201


def test_resumes_are_scoped_to_owner(client, auth_headers):
    resume_id = _upload(client, auth_headers).json()["resume"]["id"]
    other = {"X-User-Id": "someone-else"}

    assert client.get(f"/api/resumes/{resume_id}", headers=other).status_code == 404
    assert client.get("/api/resumes", headers=other).json() == []
    assert client.delete(f"/api/resumes/{resume_id}", headers=other).status_code == 404


def test_history_and_delete(client, auth_headers):
    first = _upload(client, auth_headers).json()["resume"]["id"]
    second = _upload(client, auth_headers).json()["resume"]["id"]

    history = client.get("/api/resumes", headers=auth_headers).json()
    assert [r["id"] for r in history] == [second, first]

    assert client.delete(f"/api/resumes/{first}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/resumes/{first}", headers=auth_headers).status_code == 404
    assert [r["id"] for r in client.get("/api/resumes", headers=auth_headers).json()] == [second]


def test_file_download_and_signed_url(client, auth_headers):
    resume_id = _upload(client, auth_headers).json()["resume"]["id"]

    file_response = client.get(f"/api/resumes/{resume_id}/file", headers=auth_headers)
    assert file_response.status_code == 200
    assert file_response.content == SAMPLE_RESUME_TEXT.encode("utf-8")

    signed = client.get(f"/api/resumes/{resume_id}/signed-url", headers=auth_headers).json()
    assert signed["expires_in"] > 0
    assert client.get(signed["url"], headers=auth_headers).content == SAMPLE_RESUME_TEXT.encode("utf-8")
    assert client.get(signed["url"], headers={"X-User-Id": "someone-else"}).status_code == 404


def test_storage_route_rejects_parent_segments(client, storage):
    storage.upload("victim/1.txt", b"SECRET RESUME")
    headers = {"X-User-Id": "attacker"}

    response = client.get("/api/storage/attacker/%2E%2E/victim/1.txt", headers=headers)
    assert response.status_code == 404
    assert b"SECRET RESUME" not in response.content
    assert client.get("/api/storage/victim/1.txt", headers=headers).status_code == 404


def test_synchronous_analyze_for_pending_resume(client, user_id, auth_headers):
    resume_id = _gateway_resume(client, user_id)

    response = client.post(f"/api/resumes/{resume_id}/analyze", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["ats_score"] == 78

    again = client.post(f"/api/resumes/{resume_id}/analyze", headers=auth_headers)
    assert again.status_code == 409


def test_synchronous_analyze_maps_rate_limit(client, user_id, auth_headers, fake_llm):
    fake_llm.responses = [AIRateLimitError()]
    resume_id = _gateway_resume(client, user_id)

    response = client.post(f"/api/resumes/{resume_id}/analyze", headers=auth_headers)
    assert response.status_code == 429
    assert response.json()["errors"][0]["msg"] == "Rate limit exceeded. Please try again."
    assert client.get(f"/api/resumes/{resume_id}", headers=auth_headers).json()["status"] == "failed"


def test_job_refresh_and_listing(client, auth_headers, fake_scraper):
    resume_id = _upload(client, auth_headers).json()["resume"]["id"]
    assert client.get(f"/api/resumes/{resume_id}/jobs", headers=auth_headers).json() == []

    fake_scraper.results = [
        make_search_result("Python Developer", "https://www.linkedin.com/company/acme/1", "Python, FastAPI, AWS in Chennai"),
        make_search_result("Support Engineer", "https://www.linkedin.com/company/beta/2", "Linux support in Mumbai"),
    ]
    refreshed = client.post(f"/api/resumes/{resume_id}/jobs/refresh", headers=auth_headers)
    assert refreshed.status_code == 200

    jobs = client.get(f"/api/resumes/{resume_id}/jobs", headers=auth_headers).json()
    assert [j["job_title"] for j in jobs] == ["Python Developer", "Support Engineer"]
    assert jobs[0]["match_percentage"] >= jobs[1]["match_percentage"]


def test_job_refresh_during_scraper_outage_keeps_jobs(client, auth_headers, fake_scraper):
    resume_id = _upload(client, auth_headers).json()["resume"]["id"]
    fake_scraper.results = [
        make_search_result("Python Developer", "https://www.linkedin.com/company/acme/1", "Python, FastAPI, AWS in Chennai"),
    ]
    assert client.post(f"/api/resumes/{resume_id}/jobs/refresh", headers=auth_headers).status_code == 200

    fake_scraper.error = ScraperError("scraper down")
    response = client.post(f"/api/resumes/{resume_id}/jobs/refresh", headers=auth_headers)
    assert response.status_code == 502
    assert response.json()["errors"][0]["code"] == "SCRAPER_UNAVAILABLE"

    jobs = client.get(f"/api/resumes/{resume_id}/jobs", headers=auth_headers).json()
    assert [j["job_title"] for j in jobs] == ["Python Developer"]


def test_job_refresh_with_explicit_skills(client, auth_headers, fake_scraper):
    resume_id = _upload(client, auth_headers).json()["resume"]["id"]
    fake_scraper.results = [make_search_result("Go Developer", "https://example.com/jobs/9", "Go and Kubernetes")]

    response = client.post(
        f"/api/resumes/{resume_id}/jobs/refresh", headers=auth_headers, json={"skills": ["Go", "Kubernetes"]}
    )
    assert response.status_code == 200
    assert response.json()[0]["match_percentage"] == 95
    assert fake_scraper.queries[-1].startswith("Go Kubernetes jobs Hyderabad Chennai Pune")
