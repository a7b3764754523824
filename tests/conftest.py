"""
Pytest configuration and shared fixtures.
"""

import copy
import threading
from typing import Any, Dict, List, Optional

import pytest

from talentmatch.datastore import DataStore, MatchFilters, RecordNotFoundError
from talentmatch.llm_client import CompletionClient
from talentmatch.logger import StructuredLogger, reset_logger


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path, monkeypatch):
    """Keep the process-wide logger from writing into the repo."""
    monkeypatch.chdir(tmp_path)
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def quiet_logger(tmp_path) -> StructuredLogger:
    """Logger that writes only to a temporary file."""
    return StructuredLogger(
        name="talentmatch-test",
        level="DEBUG",
        log_dir=tmp_path / "logs",
        enable_console=False,
    )


@pytest.fixture
def candidate_record() -> Dict[str, Any]:
    """A complete candidate row."""
    return {
        "id": "cand-1",
        "full_name": "Ana Costa",
        "headline": "Frontend engineer",
        "summary": "Builds React apps",
        "skills": ["React", "Node"],
        "experience_years": 6,
        "current_location": "Lisbon, Portugal",
        "preferred_locations": ["Berlin"],
        "willing_to_relocate": False,
        "preferred_job_types": ["full_time"],
        "target_salary_range": {"min": 50000, "max": 70000},
        "languages": ["English", "Portuguese"],
    }


@pytest.fixture
def job_record() -> Dict[str, Any]:
    """A complete job row."""
    return {
        "id": "job-1",
        "title": "Senior Frontend Engineer",
        "company_name": "Acme",
        "location": "Lisbon, Portugal",
        "job_type": "full_time",
        "experience_level": "senior",
        "skills_required": ["React", "Node", "AWS"],
        "salary_range": {"type": "range", "min": 60000, "max": 80000},
        "preferred_language": "english",
        "description": "Build and ship the customer dashboard.",
    }


class FakeStore(DataStore):
    """In-memory DataStore for orchestrator tests."""

    def __init__(self, candidates=None, jobs=None, fail_on: Optional[str] = None):
        self.candidates = {c["id"]: c for c in (candidates or [])}
        self.jobs = {j["id"]: j for j in (jobs or [])}
        self.fail_on = fail_on
        self.created_jobs: List[Dict[str, Any]] = []
        self.created_interviews: List[Dict[str, Any]] = []
        self.last_filters: Optional[MatchFilters] = None

    def _maybe_fail(self, op: str) -> None:
        if self.fail_on == op:
            raise ConnectionError(f"store unavailable during {op}")

    def get_candidate(self, candidate_id):
        self._maybe_fail("get_candidate")
        if candidate_id not in self.candidates:
            raise RecordNotFoundError(candidate_id)
        return copy.deepcopy(self.candidates[candidate_id])

    def get_job(self, job_id):
        self._maybe_fail("get_job")
        if job_id not in self.jobs:
            raise RecordNotFoundError(job_id)
        return copy.deepcopy(self.jobs[job_id])

    def list_jobs(self, filters, candidate=None):
        self._maybe_fail("list_jobs")
        self.last_filters = filters
        return [copy.deepcopy(j) for j in self.jobs.values()]

    def list_candidates(self, filters):
        self._maybe_fail("list_candidates")
        self.last_filters = filters
        return [copy.deepcopy(c) for c in self.candidates.values()][: filters.limit]

    def create_job(self, payload):
        self._maybe_fail("create_job")
        record = dict(payload, id=f"job-new-{len(self.created_jobs) + 1}")
        self.created_jobs.append(record)
        return record

    def create_interview(self, record):
        self._maybe_fail("create_interview")
        created = dict(record, id=f"int-{len(self.created_interviews) + 1}")
        self.created_interviews.append(created)
        return created


class FakeClient(CompletionClient):
    """Completion client returning canned replies, or raising for chosen calls.

    ``replies`` is either one string used for every call or a list consumed
    in order. ``fail_calls`` holds 0-based call indexes that raise.
    """

    def __init__(self, replies="Match Score: 90", configured: bool = True, fail_calls=(), error=None):
        self.replies = replies
        self.configured = configured
        self.fail_calls = set(fail_calls)
        self.error = error or TimeoutError("upstream timed out")
        self.calls: List[List[Dict[str, str]]] = []
        self.options: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def is_configured(self):
        return self.configured

    def complete(self, messages, model="m", max_tokens=0, temperature=0.0):
        with self._lock:
            index = len(self.calls)
            self.calls.append(messages)
            self.options.append({"model": model, "max_tokens": max_tokens, "temperature": temperature})
        if index in self.fail_calls:
            raise self.error
        if isinstance(self.replies, list):
            return self.replies[index]
        return self.replies


@pytest.fixture
def make_store():
    return FakeStore


@pytest.fixture
def make_client():
    return FakeClient
