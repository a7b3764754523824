"""
Deterministic candidate/job compatibility scoring.

Five sub-scores (skills, experience, language, location, salary) are each
computed on a 0-100 scale and blended with fixed weights. Every function
here is pure: missing inputs lower a sub-score, they never raise.
"""

import math
from typing import Dict, Iterable, List, Optional

from .schema import CandidateProfile, JobPosting, JobSalary, SalaryExpectation

# Years of experience expected for each job level (inclusive bounds).
EXPERIENCE_RANGES = {
    "entry": (0, 2),
    "mid": (2, 5),
    "senior": (5, 8),
    "lead": (8, 12),
    "executive": (12, 50),
}

UNKNOWN_LEVEL_SCORE = 50
OVERQUALIFIED_FLOOR = 0.7
LOCATION_MISSING_SCORE = 50
SALARY_MISSING_SCORE = 50

UNIFIED_WEIGHTS = {
    "skills": 0.40,
    "experience": 0.20,
    "language": 0.20,
    "location": 0.10,
    "salary": 0.10,
}

# Candidate-centric weighting from older call sites. Kept for parity checks only.
LEGACY_WEIGHTS = {
    "skills": 0.40,
    "experience": 0.25,
    "job_type": 0.15,
    "location": 0.10,
    "salary": 0.10,
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int) -> int:
    return max(0, min(100, value))


def _overlaps(a: str, b: str) -> bool:
    return a in b or b in a


def _matched_skills(required: Iterable[str], candidate_skills: Iterable[str]) -> List[str]:
    have = [s.lower() for s in candidate_skills if s]
    return [req for req in required if req and any(_overlaps(req.lower(), s) for s in have)]


def skills_score(required_skills: Optional[Iterable[str]], candidate_skills: Optional[Iterable[str]]) -> int:
    """Share of required skills the candidate covers, 0-100.

    A required skill counts as covered when it and any candidate skill are
    substrings of one another, ignoring case.
    """
    required = list(required_skills or ())
    have = list(candidate_skills or ())
    if not required or not have:
        return 0
    matched = _matched_skills(required, have)
    return round_half_up(100 * len(matched) / len(required))


def experience_score(job_level: Optional[str], candidate_years: Optional[float]) -> int:
    """How well years of experience fit the job's level, 0-100.

    Inside the level's range scores 100. Below it the score decays linearly
    towards 0. Above it the penalty is capped at 30%.
    """
    if not job_level or candidate_years is None:
        return 0
    bounds = EXPERIENCE_RANGES.get(job_level.strip().lower())
    if bounds is None:
        return UNKNOWN_LEVEL_SCORE

    low, high = bounds
    years = float(candidate_years)
    if low <= years <= high:
        return 100
    if years < low:
        if low == 0:
            return 0
        gap = low - years
        return round_half_up(100 * max(0.0, 1 - gap / low))
    excess = years - high
    return round_half_up(100 * max(OVERQUALIFIED_FLOOR, 1 - excess / 10))


def language_score(preferred_language: Optional[str], candidate_languages: Optional[Iterable[str]]) -> int:
    languages = [lang.lower() for lang in (candidate_languages or ()) if lang]
    if not preferred_language or not languages:
        return 0
    target = preferred_language.lower()
    return 100 if any(_overlaps(lang, target) for lang in languages) else 40


def location_score(
    candidate_location: Optional[str],
    job_location: Optional[str],
    willing_to_relocate: bool = False,
    preferred_locations: Optional[Iterable[str]] = None,
    missing: int = LOCATION_MISSING_SCORE,
) -> int:
    """Location compatibility, 0-100.

    ``missing`` is returned when either location is unknown; callers that
    treat a missing location as no signal at all pass 0.
    """
    if not candidate_location or not job_location:
        return missing

    cand = candidate_location.lower()
    job = job_location.lower()
    if cand == job:
        return 100

    if willing_to_relocate:
        for loc in preferred_locations or ():
            if loc and _overlaps(loc.lower(), job):
                return 90
        return 70

    cand_parts = [p.strip() for p in cand.split(",")]
    job_parts = [p.strip() for p in job.split(",")]
    for part in cand_parts:
        if any(_overlaps(part, jp) for jp in job_parts):
            return 60
    return 30


def salary_score(candidate_range: Optional[SalaryExpectation], job_salary: Optional[JobSalary]) -> int:
    """Salary fit between what the candidate wants and what the job pays, 0-100."""
    if candidate_range is None or job_salary is None:
        return SALARY_MISSING_SCORE

    stype = (job_salary.type or "").lower()
    if stype == "negotiable":
        return 80
    if not candidate_range.min and not candidate_range.max:
        return 60

    cmin = candidate_range.min or 0
    cmax = candidate_range.max or candidate_range.min or 0

    if stype == "fixed":
        value = job_salary.fixed or 0
        if cmin <= value <= cmax:
            return 100
        if value < cmin:
            return 30
        return 80

    if stype == "range":
        jmin = job_salary.min or 0
        jmax = job_salary.max or 0
        if cmax >= jmin and cmin <= jmax:
            return 100
        if cmin > jmax:
            return 20
        return 60

    return SALARY_MISSING_SCORE


def score_breakdown(candidate: CandidateProfile, job: JobPosting) -> Dict[str, int]:
    """Return the five unified sub-scores for a candidate/job pair."""
    return {
        "skills": skills_score(job.skills_required, candidate.skills),
        "experience": experience_score(job.experience_level, candidate.experience_years),
        "language": language_score(job.preferred_language, candidate.languages),
        "location": location_score(
            candidate.current_location,
            job.location,
            candidate.willing_to_relocate,
            candidate.preferred_locations,
        ),
        "salary": salary_score(candidate.target_salary_range, job.salary_range),
    }


def compute_score(candidate: CandidateProfile, job: JobPosting) -> int:
    """Blend the sub-scores into a 0-100 match score.

    Sub-scores that are low because data is missing still carry their full
    weight; the weights are never renormalized.
    """
    parts = score_breakdown(candidate, job)
    total = sum(parts[name] * weight for name, weight in UNIFIED_WEIGHTS.items())
    return _clamp(round_half_up(total))


def legacy_score(candidate: CandidateProfile, job: JobPosting) -> int:
    """Candidate-centric weighting used by older call sites.

    Factors without data on both sides are skipped and the remaining
    weights renormalized. Skills use exact membership here, unlike the
    unified formula.
    """
    score = 0.0
    total_weight = 0.0

    if candidate.skills and job.skills_required:
        matching = [s for s in candidate.skills if s in job.skills_required]
        ratio = min(1.0, len(matching) / len(job.skills_required))
        score += ratio * LEGACY_WEIGHTS["skills"]
        total_weight += LEGACY_WEIGHTS["skills"]

    if candidate.experience_years is not None and job.experience_level:
        exp = experience_score(job.experience_level, candidate.experience_years) / 100
        score += exp * LEGACY_WEIGHTS["experience"]
        total_weight += LEGACY_WEIGHTS["experience"]

    if candidate.preferred_job_types:
        matches_type = 1.0 if job.job_type in candidate.preferred_job_types else 0.0
        score += matches_type * LEGACY_WEIGHTS["job_type"]
        total_weight += LEGACY_WEIGHTS["job_type"]

    if candidate.current_location and job.location:
        loc = location_score(
            candidate.current_location,
            job.location,
            candidate.willing_to_relocate,
            candidate.preferred_locations,
        ) / 100
        score += loc * LEGACY_WEIGHTS["location"]
        total_weight += LEGACY_WEIGHTS["location"]

    if candidate.target_salary_range is not None and job.salary_range is not None:
        sal = salary_score(candidate.target_salary_range, job.salary_range) / 100
        score += sal * LEGACY_WEIGHTS["salary"]
        total_weight += LEGACY_WEIGHTS["salary"]

    if total_weight == 0:
        return 0
    return _clamp(round_half_up(100 * score / total_weight))


_REASON_TEXT = {
    "candidate": {
        "skills": "Skills match: {matched}/{required} required skills",
        "experience_perfect": "Experience level matches perfectly",
        "experience_good": "Experience level is a good fit",
        "job_type": "Job type matches your preferences",
        "location_perfect": "Location is a perfect match",
        "location_good": "Location is a good fit",
        "relocate": "You are willing to relocate for this position",
        "overall_excellent": "Excellent overall match",
        "overall_strong": "Strong match for this position",
        "overall_good": "Good potential match",
    },
    "employer": {
        "skills": "Has {matched}/{required} required skills",
        "experience_perfect": "Experience level is perfect for this role",
        "experience_good": "Experience level fits well",
        "job_type": "Interested in this type of position",
        "location_perfect": "Location is ideal",
        "location_good": "Location is compatible",
        "relocate": "Open to relocating for the right opportunity",
        "overall_excellent": "Exceptional candidate for this role",
        "overall_strong": "Strong candidate with great potential",
        "overall_good": "Good candidate worth considering",
    },
}


def match_reasons(
    candidate: CandidateProfile,
    job: JobPosting,
    score: int,
    perspective: str = "candidate",
) -> List[str]:
    """Short human-readable reasons behind a score.

    ``perspective`` is "candidate" (a seeker looking at a job) or
    "employer" (a recruiter looking at a candidate).
    """
    if perspective not in _REASON_TEXT:
        raise ValueError(f"Unknown perspective: {perspective}")
    text = _REASON_TEXT[perspective]
    reasons: List[str] = []

    if candidate.skills and job.skills_required:
        matched = _matched_skills(job.skills_required, candidate.skills)
        if matched:
            reasons.append(text["skills"].format(matched=len(matched), required=len(job.skills_required)))

    if candidate.experience_years is not None and job.experience_level:
        exp = experience_score(job.experience_level, candidate.experience_years) / 100
        if exp > 0.8:
            reasons.append(text["experience_perfect"])
        elif exp > 0.6:
            reasons.append(text["experience_good"])

    if job.job_type and job.job_type in candidate.preferred_job_types:
        reasons.append(text["job_type"])

    if candidate.current_location and job.location:
        loc = location_score(
            candidate.current_location,
            job.location,
            candidate.willing_to_relocate,
            candidate.preferred_locations,
        ) / 100
        if loc > 0.8:
            reasons.append(text["location_perfect"])
        elif loc > 0.6:
            reasons.append(text["location_good"])
        elif candidate.willing_to_relocate:
            reasons.append(text["relocate"])

    overall = score / 100
    if overall > 0.9:
        reasons.append(text["overall_excellent"])
    elif overall > 0.7:
        reasons.append(text["overall_strong"])
    elif overall > 0.5:
        reasons.append(text["overall_good"])

    return reasons


def match_label(score: int) -> str:
    if score >= 80:
        return "Excellent Match"
    if score >= 60:
        return "Good Match"
    if score >= 40:
        return "Fair Match"
    return "Poor Match"
