import pytest
import os
import uuid
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["FIRECRAWL_API_KEY"] = ""

from app.database import Base, get_db, get_session_factory
from app.dependencies import get_job_matcher, get_pipeline_builder, get_storage
from app.main import app
from app.services.analysis_pipeline import ResumeAnalysisPipeline
from app.services.job_matcher import JobMatcher
from app.services.storage import LocalStorage
from app.services.text_extractor import TextExtractor
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# pysqlite only emits BEGIN lazily; SAVEPOINT-based test isolation needs it explicit
@event.listens_for(engine, "connect")
def _disable_pysqlite_begin(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


SAMPLE_RESUME_TEXT = (
    "Jane Doe\njane.doe@example.com | +91 98765 43210\n"
    "Backend engineer with 5 years of experience building Python and FastAPI services.\n"
    "Skills: Python, FastAPI, PostgreSQL, Docker, AWS\n"
    "Experience: Senior Engineer at Acme Corp (2020-2024), led the payments API rewrite.\n"
    "Education: B.Tech Computer Science, IIT Delhi\n"
)

ENTITY_RESPONSE = {
    "personalInfo": {"name": "Jane Doe", "email": "jane.doe@example.com"},
    "professionalSummary": "Backend engineer with 5 years of experience.",
    "skills": {
        "technical": ["Python", "FastAPI", "PostgreSQL"],
        "tools": ["Docker", {"name": "AWS"}],
        "softSkills": ["Leadership"],
        "certifications": [],
    },
    "experience": [{"title": "Senior Engineer", "company": "Acme Corp"}],
    "education": [{"degree": "B.Tech Computer Science", "institution": "IIT Delhi"}],
    "projects": [],
    "languages": ["English"],
    "rawSkillsList": ["Python", "FastAPI", "PostgreSQL", "Docker", "AWS"],
}

SCORING_RESPONSE = {
    "atsScore": 78,
    "strengths": ["Clear impact statements"],
    "weaknesses": ["No summary of side projects"],
    "missingKeywords": ["Kubernetes", "CI/CD"],
    "improvementTips": ["Quantify the payments API results"],
    "skillGaps": [
        {"skillName": "Kubernetes", "category": "tools_frameworks", "importance": "high",
         "learningResources": ["Kubernetes docs"]},
        {"skillName": "System Design", "category": "technical", "importance": "medium"},
        {"skillName": "Public Speaking", "category": "soft_skills", "importance": "low"},
    ],
    "interviewQuestions": [
        {"jobRole": "Backend Engineer", "question": "How would you design an idempotent payments API?",
         "category": "technical", "difficulty": "advanced", "suggestedAnswer": "Idempotency keys."},
        {"jobRole": "Backend Engineer", "question": "Tell us about a conflict in your team.",
         "category": "hr", "difficulty": "beginner"},
        {"jobRole": "Backend Engineer", "question": "Write a rate limiter.",
         "category": "coding_scenario", "difficulty": "intermediate"},
    ],
}


class FakeLLM:
    """Scripted stand-in for LLMGateway. Exceptions in the script are raised."""

    def __init__(self, responses=None, chat_text=""):
        self.responses = list(responses or [])
        self.chat_text = chat_text
        self.json_calls = []
        self.chat_calls = []

    def chat(self, messages, model=None, temperature=None, retry=True):
        self.chat_calls.append({"messages": messages, "model": model, "retry": retry})
        if isinstance(self.chat_text, Exception):
            raise self.chat_text
        return self.chat_text

    def chat_json(self, system_prompt, user_content, temperature=None):
        self.json_calls.append({"system": system_prompt, "user": user_content})
        if not self.responses:
            raise AssertionError("FakeLLM ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeScraper:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.queries = []

    def search(self, query, limit=None, country=None):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results)


def make_search_result(title, url, markdown):
    return {"title": title, "url": url, "markdown": markdown}


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def connection():
    connection = engine.connect()
    transaction = connection.begin()
    yield connection
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def session_factory(connection):
    """Sessions joined to the per-test transaction; commits become SAVEPOINT releases."""
    def _factory():
        return TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")
    return _factory


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Get a clean database session for each test function with rollback safety."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def user_id():
    return f"user-{uuid.uuid4()}"


@pytest.fixture(scope="function")
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "storage"))


@pytest.fixture(scope="function")
def fake_llm():
    return FakeLLM([ENTITY_RESPONSE, SCORING_RESPONSE])


@pytest.fixture(scope="function")
def fake_scraper():
    return FakeScraper()


@pytest.fixture(scope="function")
def pipeline_factory(fake_llm, storage, fake_scraper):
    """Builds pipelines wired to the fakes; job enhancement is off unless a test turns it on."""
    def _build(db):
        return ResumeAnalysisPipeline(
            db,
            llm=fake_llm,
            storage=storage,
            extractor=TextExtractor(fake_llm, enable_vision=False),
            matcher=JobMatcher(fake_scraper, fake_llm, enable_ai_enhancement=False),
        )
    return _build


@pytest.fixture(scope="function")
def client(db_session, session_factory, storage, pipeline_factory, fake_scraper, fake_llm):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        # Background tasks write through their own sessions; each request starts fresh
        db_session.expire_all()
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_pipeline_builder] = lambda: pipeline_factory
    app.dependency_overrides[get_job_matcher] = lambda: JobMatcher(fake_scraper, fake_llm, enable_ai_enhancement=False)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def auth_headers(user_id):
    return {"X-User-Id": user_id}
