"""
Data store contract and its SQLite implementation.

The store hands out raw record dicts; turning them into typed records is
the caller's job. Lookups of unknown ids raise RecordNotFoundError.
"""

import calendar
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import sessionmaker

from .database import Candidate, Company, Interview, Job, get_engine, init_database
from .schema import CandidateProfile
from .scoring import EXPERIENCE_RANGES

ALL = "all"
DEFAULT_CANDIDATE_LIMIT = 100


class RecordNotFoundError(LookupError):
    """No record with the requested id exists."""


def _one_month_before(now: datetime) -> datetime:
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


@dataclass
class MatchFilters:
    """Pool filters. "all" (or None) disables job type, experience and location."""

    date: Optional[str] = None
    job_type: Optional[str] = None
    experience: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None
    search_term: Optional[str] = None
    require_candidate_skills: bool = True
    limit: int = DEFAULT_CANDIDATE_LIMIT

    _ALIASES = {
        "jobType": "job_type",
        "searchTerm": "search_term",
    }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MatchFilters":
        """Build filters from a dict, accepting the UI's camelCase keys."""
        if not data:
            return cls()
        known = set(cls.__dataclass_fields__)
        kwargs = {}
        for key, value in data.items():
            key = cls._ALIASES.get(key, key)
            if key not in known:
                raise ValueError(f"Unknown filter: {key}")
            kwargs[key] = value
        return cls(**kwargs)

    def posted_since(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """Start of the posting-date window, or None for no window."""
        now = now or datetime.now()
        if self.date == "today":
            return now - timedelta(days=1)
        if self.date == "week":
            return now - timedelta(days=7)
        if self.date == "month":
            return _one_month_before(now)
        return None

    @staticmethod
    def is_set(value: Optional[str]) -> bool:
        return bool(value) and value != ALL


class DataStore(ABC):
    """Reads candidate and job pools; writes job posts and interviews."""

    @abstractmethod
    def get_candidate(self, candidate_id: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def get_job(self, job_id: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def list_jobs(self, filters: MatchFilters, candidate: Optional[CandidateProfile] = None) -> List[Dict[str, Any]]:
        """Active jobs matching ``filters``.

        When ``filters.require_candidate_skills`` is set and the candidate
        has skills, only jobs whose required skills contain every one of
        the candidate's skills are returned.
        """

    @abstractmethod
    def list_candidates(self, filters: MatchFilters) -> List[Dict[str, Any]]:
        """Candidates with at least one skill, matching ``filters``."""

    @abstractmethod
    def create_job(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def create_interview(self, record: Dict[str, Any]) -> Dict[str, Any]:
        ...


class SqlDataStore(DataStore):
    """DataStore backed by a SQLite database through SQLAlchemy."""

    def __init__(self, db_path: Path, create: bool = True):
        self.db_path = Path(db_path)
        if create:
            init_database(self.db_path)
        self.engine = get_engine(self.db_path)
        self._Session = sessionmaker(bind=self.engine)

    def session(self):
        return self._Session()

    def get_candidate(self, candidate_id: str) -> Dict[str, Any]:
        with self.session() as session:
            row = session.get(Candidate, str(candidate_id))
            if row is None:
                raise RecordNotFoundError(f"Candidate profile not found: {candidate_id}")
            return row.to_record()

    def get_job(self, job_id: str) -> Dict[str, Any]:
        with self.session() as session:
            row = session.get(Job, str(job_id))
            if row is None:
                raise RecordNotFoundError(f"Job not found: {job_id}")
            return row.to_record()

    def list_jobs(self, filters: MatchFilters, candidate: Optional[CandidateProfile] = None) -> List[Dict[str, Any]]:
        with self.session() as session:
            query = session.query(Job).filter(Job.status == "active")

            since = filters.posted_since()
            if since is not None:
                query = query.filter(Job.created_at >= since)
            if MatchFilters.is_set(filters.job_type):
                query = query.filter(Job.job_type == filters.job_type)
            if filters.company:
                query = query.join(Company).filter(Company.name.ilike(f"%{filters.company}%"))
            if MatchFilters.is_set(filters.experience):
                query = query.filter(Job.experience_level == filters.experience)
            if MatchFilters.is_set(filters.location):
                query = query.filter(Job.location.ilike(f"%{filters.location}%"))

            rows = query.order_by(Job.created_at.desc(), Job.id).all()
            records = [row.to_record() for row in rows]

        if filters.require_candidate_skills and candidate is not None and candidate.skills:
            wanted = set(candidate.skills)
            records = [r for r in records if wanted.issubset(r["skills_required"])]
        return records

    def list_candidates(self, filters: MatchFilters) -> List[Dict[str, Any]]:
        with self.session() as session:
            query = session.query(Candidate)

            if MatchFilters.is_set(filters.experience):
                bounds = EXPERIENCE_RANGES.get(filters.experience)
                if bounds is not None:
                    low, high = bounds
                    query = query.filter(Candidate.experience_years >= low, Candidate.experience_years <= high)
            if MatchFilters.is_set(filters.location):
                query = query.filter(Candidate.current_location.ilike(f"%{filters.location}%"))
            if filters.search_term:
                pattern = f"%{filters.search_term}%"
                query = query.filter(or_(Candidate.headline.ilike(pattern), Candidate.summary.ilike(pattern)))

            rows = query.order_by(Candidate.created_at, Candidate.id).all()
            records = [row.to_record() for row in rows if row.skills]

        return records[: filters.limit]

    def create_job(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        with self.session() as session:
            job = Job(**payload)
            session.add(job)
            session.commit()
            session.refresh(job)
            return job.to_record()

    def create_interview(self, record: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(record)
        if isinstance(data.get("interview_date"), str):
            data["interview_date"] = datetime.fromisoformat(data["interview_date"])
        with self.session() as session:
            interview = Interview(**data)
            session.add(interview)
            session.commit()
            session.refresh(interview)
            return interview.to_record()

    def add_company(self, record: Dict[str, Any]) -> str:
        with self.session() as session:
            company = Company(**record)
            session.add(company)
            session.commit()
            return company.id

    def add_candidate(self, record: Dict[str, Any]) -> str:
        """Insert a candidate from a record shaped like ``Candidate.to_record``."""
        data = dict(record)
        salary = data.pop("target_salary_range", None) or {}
        data["target_salary_min"] = salary.get("min")
        data["target_salary_max"] = salary.get("max")
        with self.session() as session:
            candidate = Candidate(**data)
            session.add(candidate)
            session.commit()
            return candidate.id

    def add_job(self, record: Dict[str, Any]) -> str:
        """Insert a job from a record; a nested salary_range is flattened."""
        data = dict(record)
        company_name = data.pop("company_name", None)
        salary = data.pop("salary_range", None)
        if salary:
            data["salary_type"] = salary.get("type")
            data["salary_min"] = salary.get("min")
            data["salary_max"] = salary.get("max")
            data["salary_fixed"] = salary.get("fixed")
        if isinstance(data.get("created_at"), str):
            data["created_at"] = datetime.fromisoformat(data["created_at"])
        with self.session() as session:
            if company_name and not data.get("company_id"):
                company = session.query(Company).filter_by(name=company_name).first()
                if company is None:
                    company = Company(name=company_name)
                    session.add(company)
                    session.flush()
                data["company_id"] = company.id
            job = Job(**data)
            session.add(job)
            session.commit()
            return job.id

    def load_records(self, data: Dict[str, Any]) -> Dict[str, int]:
        """Bulk-load {"companies": [...], "candidates": [...], "jobs": [...]}."""
        counts = {"companies": 0, "candidates": 0, "jobs": 0}
        for record in data.get("companies", []):
            self.add_company(record)
            counts["companies"] += 1
        for record in data.get("candidates", []):
            self.add_candidate(record)
            counts["candidates"] += 1
        for record in data.get("jobs", []):
            self.add_job(record)
            counts["jobs"] += 1
        return counts
