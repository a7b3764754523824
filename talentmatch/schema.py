"""
Typed candidate, job and match records.

Raw rows from the data store are validated field by field and turned into
frozen dataclasses. Optional fields that are absent become None or an
empty tuple, so scoring code never has to probe for missing keys.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple

SCHEMA_VERSION = 1

EXPERIENCE_LEVELS = ("entry", "mid", "senior", "lead", "executive")
SALARY_TYPES = ("fixed", "range", "negotiable")

CANDIDATE_STR_FIELDS = ["full_name", "headline", "summary", "current_location"]
CANDIDATE_LIST_FIELDS = ["skills", "preferred_locations", "preferred_job_types", "languages"]

JOB_REQUIRED_STR_FIELDS = ["title"]
JOB_STR_FIELDS = [
    "company_name",
    "location",
    "job_type",
    "experience_level",
    "preferred_language",
    "description",
    "requirements",
    "status",
]
JOB_LIST_FIELDS = ["skills_required"]


class ValidationError(ValueError):
    """Raised when a raw record cannot be turned into a typed record."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _is_str_list(v: Any) -> bool:
    return isinstance(v, (list, tuple)) and all(isinstance(x, str) for x in v)


def _opt_str(v: Any) -> Optional[str]:
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def _str_tuple(v: Any) -> Tuple[str, ...]:
    if not v:
        return ()
    return tuple(x.strip() for x in v if x.strip())


def _opt_float(v: Any) -> Optional[float]:
    if _is_number(v):
        return float(v)
    return None


def _check_id(data: Dict[str, Any], errors: List[str]) -> None:
    if "id" not in data or data["id"] is None:
        errors.append("Missing required field: id")
    elif not (_is_non_empty_str(data["id"]) or (isinstance(data["id"], int) and not isinstance(data["id"], bool))):
        errors.append("Field 'id' must be a non-empty string or integer")


def _check_optional(data: Dict[str, Any], errors: List[str], str_fields, list_fields) -> None:
    for f in str_fields:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")
    for f in list_fields:
        if data.get(f) is not None and not _is_str_list(data[f]):
            errors.append(f"Field '{f}' must be a list of strings if provided")


def _check_amounts(prefix: str, salary: Dict[str, Any], keys, errors: List[str]) -> None:
    for k in keys:
        if salary.get(k) is not None and not _is_number(salary[k]):
            errors.append(f"Field '{prefix}.{k}' must be a number if provided")


def validate_candidate(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a candidate row.
    Empty list means valid.
    """
    if not isinstance(data, dict):
        return ["Candidate record must be an object"]
    errors: List[str] = []
    _check_id(data, errors)
    _check_optional(data, errors, CANDIDATE_STR_FIELDS, CANDIDATE_LIST_FIELDS)

    years = data.get("experience_years")
    if years is not None:
        if not _is_number(years):
            errors.append("Field 'experience_years' must be a number if provided")
        elif years < 0:
            errors.append("Field 'experience_years' must not be negative")

    if data.get("willing_to_relocate") is not None and not isinstance(data["willing_to_relocate"], bool):
        errors.append("Field 'willing_to_relocate' must be a boolean if provided")

    salary = data.get("target_salary_range")
    if salary is not None:
        if not isinstance(salary, dict):
            errors.append("Field 'target_salary_range' must be an object if provided")
        else:
            _check_amounts("target_salary_range", salary, ("min", "max"), errors)

    return errors


def _job_salary_source(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Salary comes either nested under salary_range or as flat salary_* columns."""
    if data.get("salary_range") is not None:
        return data["salary_range"]
    if data.get("salary_type") is not None:
        return {
            "type": data.get("salary_type"),
            "min": data.get("salary_min"),
            "max": data.get("salary_max"),
            "fixed": data.get("salary_fixed"),
        }
    return None


def validate_job(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a job row.
    Empty list means valid.
    """
    if not isinstance(data, dict):
        return ["Job record must be an object"]
    errors: List[str] = []
    _check_id(data, errors)

    for f in JOB_REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    _check_optional(data, errors, JOB_STR_FIELDS, JOB_LIST_FIELDS)

    salary = _job_salary_source(data)
    if salary is not None:
        if not isinstance(salary, dict):
            errors.append("Field 'salary_range' must be an object if provided")
        else:
            stype = salary.get("type")
            if not isinstance(stype, str) or stype.lower() not in SALARY_TYPES:
                errors.append(f"Field 'salary_range.type' must be one of {', '.join(SALARY_TYPES)}")
            _check_amounts("salary_range", salary, ("min", "max", "fixed"), errors)

    return errors


@dataclass(frozen=True)
class SalaryExpectation:
    """A candidate's target salary band. Either bound may be unknown."""

    min: Optional[float] = None
    max: Optional[float] = None


@dataclass(frozen=True)
class JobSalary:
    """What a job pays: a fixed figure, a range, or negotiable."""

    type: str = "negotiable"
    min: Optional[float] = None
    max: Optional[float] = None
    fixed: Optional[float] = None


@dataclass(frozen=True)
class CandidateProfile:
    id: str
    full_name: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    skills: Tuple[str, ...] = ()
    experience_years: Optional[float] = None
    current_location: Optional[str] = None
    preferred_locations: Tuple[str, ...] = ()
    willing_to_relocate: bool = False
    preferred_job_types: Tuple[str, ...] = ()
    target_salary_range: Optional[SalaryExpectation] = None
    languages: Tuple[str, ...] = ()
    schema_version: int = SCHEMA_VERSION

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "CandidateProfile":
        """Validate a raw candidate row and build the typed profile.

        Raises:
            ValidationError: if any field has the wrong shape
        """
        errors = validate_candidate(data)
        if errors:
            raise ValidationError(errors)

        salary = data.get("target_salary_range")
        return cls(
            id=str(data["id"]),
            full_name=_opt_str(data.get("full_name")),
            headline=_opt_str(data.get("headline")),
            summary=_opt_str(data.get("summary")),
            skills=_str_tuple(data.get("skills")),
            experience_years=_opt_float(data.get("experience_years")),
            current_location=_opt_str(data.get("current_location")),
            preferred_locations=_str_tuple(data.get("preferred_locations")),
            willing_to_relocate=bool(data.get("willing_to_relocate") or False),
            preferred_job_types=_str_tuple(data.get("preferred_job_types")),
            target_salary_range=(
                SalaryExpectation(min=_opt_float(salary.get("min")), max=_opt_float(salary.get("max")))
                if salary is not None else None
            ),
            languages=_str_tuple(data.get("languages")),
        )

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        for key in CANDIDATE_LIST_FIELDS:
            record[key] = list(record[key])
        return record


@dataclass(frozen=True)
class JobPosting:
    id: str
    title: str
    company_name: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    skills_required: Tuple[str, ...] = ()
    salary_range: Optional[JobSalary] = None
    preferred_language: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    status: str = "active"
    schema_version: int = SCHEMA_VERSION

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "JobPosting":
        """Validate a raw job row and build the typed posting.

        Raises:
            ValidationError: if any field has the wrong shape
        """
        errors = validate_job(data)
        if errors:
            raise ValidationError(errors)

        salary = _job_salary_source(data)
        level = _opt_str(data.get("experience_level"))
        return cls(
            id=str(data["id"]),
            title=data["title"].strip(),
            company_name=_opt_str(data.get("company_name")),
            location=_opt_str(data.get("location")),
            job_type=_opt_str(data.get("job_type")),
            experience_level=level.lower() if level else None,
            skills_required=_str_tuple(data.get("skills_required")),
            salary_range=(
                JobSalary(
                    type=salary["type"].lower(),
                    min=_opt_float(salary.get("min")),
                    max=_opt_float(salary.get("max")),
                    fixed=_opt_float(salary.get("fixed")),
                )
                if salary is not None else None
            ),
            preferred_language=_opt_str(data.get("preferred_language")),
            description=_opt_str(data.get("description")),
            requirements=_opt_str(data.get("requirements")),
            status=_opt_str(data.get("status")) or "active",
        )

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        record["skills_required"] = list(record["skills_required"])
        return record


@dataclass(frozen=True)
class MatchResult:
    """One scored pairing of a subject with a pool member.

    ``enhanced`` is True only when an AI reply was parsed for this item;
    baseline-only and fallback results carry canned insight text instead.
    """

    subject_id: str
    counterpart_id: str
    score: int
    insights: str
    recommendation: str
    strengths: Tuple[str, ...] = ()
    concerns: Tuple[str, ...] = ()
    action_items: Tuple[str, ...] = ()
    reasons: Tuple[str, ...] = ()
    enhanced: bool = False
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ("strengths", "concerns", "action_items", "reasons"):
            data[key] = list(data[key])
        return data
