"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for candidate profiles, companies, job postings
and interviews. List-valued columns are stored as JSON.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


class Candidate(Base):
    """Job seeker profile model."""

    __tablename__ = "job_seeker_profiles"

    id = Column(String, primary_key=True, default=new_id)
    full_name = Column(String)
    headline = Column(String)
    summary = Column(Text)
    experience_years = Column(Float)
    current_location = Column(String)
    preferred_locations = Column(JSON, nullable=False, default=list)
    willing_to_relocate = Column(Boolean, nullable=False, default=False)
    preferred_job_types = Column(JSON, nullable=False, default=list)
    target_salary_min = Column(Float)
    target_salary_max = Column(Float)
    skills = Column(JSON, nullable=False, default=list)
    languages = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_record(self) -> Dict[str, Any]:
        salary = None
        if self.target_salary_min is not None or self.target_salary_max is not None:
            salary = {"min": self.target_salary_min, "max": self.target_salary_max}
        return {
            "id": self.id,
            "full_name": self.full_name,
            "headline": self.headline,
            "summary": self.summary,
            "experience_years": self.experience_years,
            "current_location": self.current_location,
            "preferred_locations": list(self.preferred_locations or []),
            "willing_to_relocate": bool(self.willing_to_relocate),
            "preferred_job_types": list(self.preferred_job_types or []),
            "target_salary_range": salary,
            "skills": list(self.skills or []),
            "languages": list(self.languages or []),
        }


class Company(Base):
    """Employer company model."""

    __tablename__ = "companies"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    industry = Column(String)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    jobs = relationship("Job", back_populates="company")


class Job(Base):
    """Job posting model."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=new_id)
    company_id = Column(String, ForeignKey("companies.id"))
    created_by = Column(String)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    requirements = Column(Text, nullable=False, default="")
    responsibilities = Column(Text, nullable=False, default="")
    location = Column(String)
    is_remote = Column(Boolean, nullable=False, default=False)
    is_hybrid = Column(Boolean, nullable=False, default=False)
    job_type = Column(String)
    experience_level = Column(String)
    skills_required = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    application_deadline = Column(String)
    start_date = Column(String)
    drivers_license = Column(Boolean, nullable=False, default=False)
    additional_questions = Column(JSON, nullable=False, default=list)
    preferred_language = Column(String)
    priority = Column(String, nullable=False, default="normal")
    status = Column(String, nullable=False, default="active")
    salary_type = Column(String)
    salary_currency = Column(String)
    salary_period = Column(String)
    salary_min = Column(Float)
    salary_max = Column(Float)
    salary_fixed = Column(Float)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    company = relationship("Company", back_populates="jobs")

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "company_name": self.company.name if self.company is not None else None,
            "created_by": self.created_by,
            "title": self.title,
            "description": self.description,
            "requirements": self.requirements,
            "responsibilities": self.responsibilities,
            "location": self.location,
            "is_remote": bool(self.is_remote),
            "is_hybrid": bool(self.is_hybrid),
            "job_type": self.job_type,
            "experience_level": self.experience_level,
            "skills_required": list(self.skills_required or []),
            "benefits": list(self.benefits or []),
            "application_deadline": self.application_deadline,
            "start_date": self.start_date,
            "drivers_license": bool(self.drivers_license),
            "additional_questions": list(self.additional_questions or []),
            "preferred_language": self.preferred_language,
            "priority": self.priority,
            "status": self.status,
            "salary_type": self.salary_type,
            "salary_currency": self.salary_currency,
            "salary_period": self.salary_period,
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
            "salary_fixed": self.salary_fixed,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Interview(Base):
    """Scheduled interview model."""

    __tablename__ = "interviews"

    id = Column(String, primary_key=True, default=new_id)
    job_id = Column(String, ForeignKey("jobs.id"), nullable=False)
    seeker_id = Column(String, ForeignKey("job_seeker_profiles.id"), nullable=False)
    interviewer_id = Column(String)
    application_id = Column(String)
    interview_type = Column(String, nullable=False, default="1st_interview")
    interview_format = Column(String, nullable=False, default="video")
    location = Column(String)
    interview_date = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=60)
    meeting_link = Column(String)
    agenda = Column(Text)
    interview_notes = Column(Text)
    additional_interviewers = Column(JSON, nullable=False, default=list)
    status = Column(String, nullable=False, default="scheduled")
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "seeker_id": self.seeker_id,
            "interviewer_id": self.interviewer_id,
            "application_id": self.application_id,
            "interview_type": self.interview_type,
            "interview_format": self.interview_format,
            "location": self.location,
            "interview_date": self.interview_date.isoformat() if self.interview_date else None,
            "duration_minutes": self.duration_minutes,
            "meeting_link": self.meeting_link,
            "agenda": self.agenda,
            "interview_notes": self.interview_notes,
            "additional_interviewers": list(self.additional_interviewers or []),
            "status": self.status,
        }


def get_engine(db_path: Path):
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=get_engine(db_path))
    return Session()
