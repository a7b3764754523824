"""
Match orchestration: baseline scoring plus optional AI enhancement.

For one subject (a candidate looking at jobs, or a job looking at
candidates) the orchestrator fetches the pool, scores every member with
the deterministic scorer, asks the AI completion client about the first
``ai_limit`` members, and returns everything sorted by score.

Failure handling:
    - fetching the subject or the pool is fatal and re-raised
    - a pool record that fails validation is skipped with a warning
    - an AI call failing for one member falls back to that member's
      baseline score; the rest of the batch carries on
    - an unconfigured AI client is not an error; every member keeps its
      baseline score
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .cache import DEFAULT_TTL_SECONDS, AgentCache
from .datastore import DataStore, MatchFilters
from .llm_client import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    CompletionClient,
    CompletionError,
)
from .logger import StructuredLogger, get_logger
from .parser import (
    MatchAnalysis,
    parse_candidate_evaluation,
    parse_employer_interview_guide,
    parse_interview_preparation,
    parse_market_insights,
    parse_match_analysis,
    parse_resume_analysis,
)
from .prompts import (
    INTERVIEWER_SYSTEM_PROMPT,
    MARKET_INSIGHTS_SYSTEM_PROMPT,
    build_evaluation_context,
    build_interviewer_context,
    build_market_context,
    build_match_context,
    build_resume_context,
    evaluation_system_prompt,
    interview_preparation_request,
    interview_preparation_system_prompt,
    match_system_prompt,
    resume_analysis_system_prompt,
)
from .schema import SALARY_TYPES, CandidateProfile, JobPosting, MatchResult, ValidationError
from .scoring import compute_score, match_label, match_reasons, round_half_up

CANDIDATE = "candidate"
EMPLOYER = "employer"
PERSPECTIVES = (CANDIDATE, EMPLOYER)

DEFAULT_AI_LIMIT = 10

AI_UNAVAILABLE_INSIGHTS = "AI analysis not available"
AI_UNAVAILABLE_RECOMMENDATION = "Enable AI features for personalized recommendations"
AI_FAILED_INSIGHTS = "AI analysis failed"
BASELINE_INSIGHTS = "AI analysis not run for this match"
BASELINE_RECOMMENDATION = "Basic match based on skills and experience"

JOB_POST_REQUIRED_FIELDS = ["title", "description", "location", "job_type", "experience_level"]
INTERVIEW_REQUIRED_FIELDS = ["job_id", "candidate_id", "interview_date"]

FiltersLike = Union[MatchFilters, Dict[str, Any], None]


def _require(value: Any, name: str) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing required identifier: {name}")
    return str(value)


def _ai_score(value: float) -> int:
    return max(0, min(100, round_half_up(value * 100)))


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


class MatchOrchestrator:
    """
    Fetches pools, scores them and optionally enhances them with AI.

    Args:
        store: Data store the subject and pool are read from
        client: AI completion client; None behaves like an unconfigured client
        ai_limit: How many pool members (in pool order) get an AI call
        max_concurrency: AI calls in flight at once; 1 keeps them sequential
        cache_ttl: TTL in seconds for the orchestrator's cache
        logger: Logger for progress, warnings and metrics
    """

    def __init__(
        self,
        store: DataStore,
        client: Optional[CompletionClient] = None,
        ai_limit: int = DEFAULT_AI_LIMIT,
        max_concurrency: int = 1,
        cache_ttl: float = DEFAULT_TTL_SECONDS,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        logger: Optional[StructuredLogger] = None,
    ):
        if ai_limit < 0:
            raise ValueError("ai_limit must be >= 0")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.store = store
        self.client = client
        self.ai_limit = ai_limit
        self.max_concurrency = max_concurrency
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        # Held for callers that want to memoize replies; the fetch and
        # enhance paths below never read or write it.
        self.cache = AgentCache(ttl_seconds=cache_ttl)
        self.logger = logger or get_logger()

    @classmethod
    def from_settings(cls, settings, store: DataStore, client: Optional[CompletionClient] = None, **kwargs):
        return cls(
            store=store,
            client=client,
            ai_limit=settings.ai_limit,
            max_concurrency=settings.ai_concurrency,
            cache_ttl=settings.cache_ttl,
            model=settings.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            **kwargs,
        )

    # Pool fetching

    def _filters(self, filters: FiltersLike) -> MatchFilters:
        if isinstance(filters, MatchFilters):
            return filters
        return MatchFilters.from_dict(filters)

    def _candidate_with_jobs(self, candidate_id: str, filters: FiltersLike) -> Tuple[CandidateProfile, List[JobPosting]]:
        filters = self._filters(filters)
        try:
            candidate = CandidateProfile.from_record(self.store.get_candidate(candidate_id))
            records = self.store.list_jobs(filters, candidate)
        except Exception as e:
            self.logger.error("Failed to fetch job pool", candidate_id=candidate_id, error=str(e))
            raise
        return candidate, self._valid_members(records, JobPosting)

    def _job_with_candidates(self, job_id: str, filters: FiltersLike) -> Tuple[JobPosting, List[CandidateProfile]]:
        filters = self._filters(filters)
        try:
            job = JobPosting.from_record(self.store.get_job(job_id))
            records = self.store.list_candidates(filters)
        except Exception as e:
            self.logger.error("Failed to fetch candidate pool", job_id=job_id, error=str(e))
            raise
        return job, self._valid_members(records, CandidateProfile)

    def _valid_members(self, records, record_type) -> list:
        # Pool rows the reader rejects are dropped; a bad subject record is still fatal.
        members = []
        for record in records:
            try:
                members.append(record_type.from_record(record))
            except ValidationError as e:
                self.logger.warning("Skipping invalid pool record", record_id=record.get("id"), errors=e.errors)
        return members

    # Baseline-only matching

    def fetch_matching_jobs(self, candidate_id: str, filters: FiltersLike = None) -> List[MatchResult]:
        """Score every job in the pool for a candidate. No AI calls."""
        candidate_id = _require(candidate_id, "candidate_id")
        self.logger.info("Fetching matching jobs", candidate_id=candidate_id)
        candidate, jobs = self._candidate_with_jobs(candidate_id, filters)
        results = self._sorted(self._baseline(candidate, job, CANDIDATE) for job in jobs)
        self.logger.record_matches_scored(len(results))
        self.logger.info("Found matching jobs", candidate_id=candidate_id, count=len(results))
        return results

    def fetch_recommended_candidates(self, job_id: str, filters: FiltersLike = None) -> List[MatchResult]:
        """Score every candidate in the pool for a job. No AI calls."""
        job_id = _require(job_id, "job_id")
        self.logger.info("Fetching recommended candidates", job_id=job_id)
        job, candidates = self._job_with_candidates(job_id, filters)
        results = self._sorted(self._baseline(c, job, EMPLOYER) for c in candidates)
        self.logger.record_matches_scored(len(results))
        self.logger.info("Found recommended candidates", job_id=job_id, count=len(results))
        return results

    # AI-enhanced matching

    def fetch_enhanced_matches(
        self,
        subject_id: str,
        filters: FiltersLike = None,
        ai_prompt: Optional[str] = None,
        perspective: str = CANDIDATE,
    ) -> List[MatchResult]:
        """Enhanced matches for a candidate (jobs) or a job (candidates)."""
        if perspective == CANDIDATE:
            return self.fetch_enhanced_jobs(subject_id, filters, ai_prompt)
        if perspective == EMPLOYER:
            return self.fetch_enhanced_candidates(subject_id, filters, ai_prompt)
        raise ValueError(f"Unknown perspective: {perspective}")

    def fetch_enhanced_jobs(
        self, candidate_id: str, filters: FiltersLike = None, ai_prompt: Optional[str] = None
    ) -> List[MatchResult]:
        candidate_id = _require(candidate_id, "candidate_id")
        self.logger.info("Fetching AI-enhanced job matches", candidate_id=candidate_id)
        candidate, jobs = self._candidate_with_jobs(candidate_id, filters)
        pairs = [(candidate, job) for job in jobs]
        results = self.enhance(pairs, ai_prompt=ai_prompt, perspective=CANDIDATE)
        self.logger.info("Found AI-enhanced job matches", candidate_id=candidate_id, count=len(results))
        return results

    def fetch_enhanced_candidates(
        self, job_id: str, filters: FiltersLike = None, ai_prompt: Optional[str] = None
    ) -> List[MatchResult]:
        job_id = _require(job_id, "job_id")
        self.logger.info("Fetching AI-enhanced candidate recommendations", job_id=job_id)
        job, candidates = self._job_with_candidates(job_id, filters)
        pairs = [(candidate, job) for candidate in candidates]
        results = self.enhance(pairs, ai_prompt=ai_prompt, perspective=EMPLOYER)
        self.logger.info("Found AI-enhanced candidate recommendations", job_id=job_id, count=len(results))
        return results

    def enhance(
        self,
        pairs: Sequence[Tuple[CandidateProfile, JobPosting]],
        ai_prompt: Optional[str] = None,
        perspective: str = CANDIDATE,
    ) -> List[MatchResult]:
        """Score (candidate, job) pairs and enhance the first ``ai_limit`` with AI.

        Pairs past the limit keep their baseline score. The result is sorted
        by score, highest first; equal scores keep pool order.
        """
        if perspective not in PERSPECTIVES:
            raise ValueError(f"Unknown perspective: {perspective}")

        baselines = [self._baseline(c, j, perspective) for c, j in pairs]
        self.logger.record_matches_scored(len(baselines))

        if self.client is None or not self.client.is_configured():
            self.logger.info("AI client not configured, returning baseline matches", count=len(baselines))
            return self._sorted(
                self._with_text(b, AI_UNAVAILABLE_INSIGHTS, AI_UNAVAILABLE_RECOMMENDATION) for b in baselines
            )

        head = list(zip(pairs[: self.ai_limit], baselines[: self.ai_limit]))
        tail = baselines[self.ai_limit:]

        if self.max_concurrency == 1 or len(head) <= 1:
            enhanced = [self._enhance_one(pair, base, ai_prompt, perspective) for pair, base in head]
        else:
            with ThreadPoolExecutor(max_workers=self.max_concurrency) as pool:
                enhanced = list(
                    pool.map(lambda item: self._enhance_one(item[0], item[1], ai_prompt, perspective), head)
                )

        return self._sorted(enhanced + tail)

    def analyze_pair(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
        ai_prompt: Optional[str] = None,
        perspective: str = CANDIDATE,
    ) -> MatchAnalysis:
        """Ask the AI client about one pair and parse its reply. Errors propagate."""
        messages = [
            {"role": "system", "content": match_system_prompt(perspective)},
            {"role": "user", "content": build_match_context(candidate, job, ai_prompt, perspective)},
        ]
        reply = self._complete(messages)
        return parse_match_analysis(reply, perspective)

    def _enhance_one(
        self,
        pair: Tuple[CandidateProfile, JobPosting],
        baseline: MatchResult,
        ai_prompt: Optional[str],
        perspective: str,
    ) -> MatchResult:
        candidate, job = pair
        try:
            analysis = self.analyze_pair(candidate, job, ai_prompt, perspective)
        except Exception as e:
            error_type = type(e).__name__
            self.logger.record_ai_failure(error_type)
            self.logger.record_fallback()
            self.logger.warning(
                "AI analysis failed, using baseline score",
                subject_id=baseline.subject_id,
                counterpart_id=baseline.counterpart_id,
                error_type=error_type,
                error=str(e),
            )
            return self._with_text(baseline, AI_FAILED_INSIGHTS, BASELINE_RECOMMENDATION)

        self.logger.record_ai_success()
        # A parsed score of zero is treated as unusable.
        score = _ai_score(analysis.score) or baseline.score
        return MatchResult(
            subject_id=baseline.subject_id,
            counterpart_id=baseline.counterpart_id,
            score=score,
            insights=analysis.insights,
            recommendation=analysis.recommendation,
            strengths=analysis.strengths,
            concerns=analysis.concerns,
            action_items=analysis.action_items,
            reasons=baseline.reasons,
            enhanced=True,
            title=baseline.title,
        )

    def _complete(self, messages: List[Dict[str, str]]) -> str:
        self.logger.record_ai_call()
        return self.client.complete(
            messages,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

    # AI advice
    #
    # Unlike the match passes there is no fallback here: an unconfigured
    # client, a missing record or a failed call raises.

    def _advise(self, action: str, build_messages, parse, **context) -> Dict[str, Any]:
        if self.client is None or not self.client.is_configured():
            raise CompletionError("AI completion client is not configured")

        self.logger.info(action, **context)
        try:
            messages = build_messages()
        except Exception as e:
            self.logger.error(f"{action} failed", error=str(e), **context)
            raise
        try:
            reply = self._complete(messages)
        except Exception as e:
            self.logger.record_ai_failure(type(e).__name__)
            self.logger.error(f"{action} failed", error=str(e), **context)
            raise
        self.logger.record_ai_success()
        return parse(reply)

    def _load_pair(self, candidate_id: str, job_id: str) -> Tuple[CandidateProfile, JobPosting]:
        candidate = CandidateProfile.from_record(self.store.get_candidate(candidate_id))
        job = JobPosting.from_record(self.store.get_job(job_id))
        return candidate, job

    def evaluate_candidate(self, candidate_id: str, job_id: str, evaluation_type: str = "overall") -> Dict[str, Any]:
        """Structured AI evaluation of one candidate for one job."""
        candidate_id = _require(candidate_id, "candidate_id")
        job_id = _require(job_id, "job_id")

        def build():
            candidate, job = self._load_pair(candidate_id, job_id)
            return [
                {"role": "system", "content": evaluation_system_prompt(job, evaluation_type)},
                {"role": "user", "content": build_evaluation_context(candidate, job)},
            ]

        return self._advise(
            "Candidate evaluation", build, parse_candidate_evaluation, candidate_id=candidate_id, job_id=job_id
        )

    def prepare_for_interview(self, candidate_id: str, job_id: str, interview_type: str = "general") -> Dict[str, Any]:
        """Coaching for a candidate: likely questions, tips and company research points."""
        candidate_id = _require(candidate_id, "candidate_id")
        job_id = _require(job_id, "job_id")

        def build():
            candidate, job = self._load_pair(candidate_id, job_id)
            return [
                {"role": "system", "content": interview_preparation_system_prompt(candidate, job, interview_type)},
                {"role": "user", "content": interview_preparation_request(job, interview_type)},
            ]

        return self._advise(
            "Interview preparation", build, parse_interview_preparation, candidate_id=candidate_id, job_id=job_id
        )

    def prepare_interview_for_employer(
        self, candidate_id: str, job_id: str, interview_type: str = "general"
    ) -> Dict[str, Any]:
        """Interviewer guide for one candidate: questions, assessment methods and red flags."""
        candidate_id = _require(candidate_id, "candidate_id")
        job_id = _require(job_id, "job_id")

        def build():
            candidate, job = self._load_pair(candidate_id, job_id)
            return [
                {"role": "system", "content": INTERVIEWER_SYSTEM_PROMPT},
                {"role": "user", "content": build_interviewer_context(candidate, job, interview_type)},
            ]

        return self._advise(
            "Interviewer guide", build, parse_employer_interview_guide, candidate_id=candidate_id, job_id=job_id
        )

    def get_market_insights(
        self, job_title: str, location: Optional[str] = None, industry: Optional[str] = None
    ) -> Dict[str, Any]:
        """Hiring market read for a role: salary range, skills in demand, trends and hiring tips."""
        job_title = _require(job_title, "job_title")

        def build():
            return [
                {"role": "system", "content": MARKET_INSIGHTS_SYSTEM_PROMPT},
                {"role": "user", "content": build_market_context(job_title, location, industry)},
            ]

        return self._advise("Market insights", build, parse_market_insights, job_title=job_title, location=location)

    def analyze_resume_for_hiring(self, resume_text: str, job_id: str) -> Dict[str, Any]:
        """Read a resume against one job: red flags, interview focus and a hiring call."""
        if not resume_text or not resume_text.strip():
            raise ValueError("Missing required field: resume_text")
        job_id = _require(job_id, "job_id")

        def build():
            job = JobPosting.from_record(self.store.get_job(job_id))
            return [
                {"role": "system", "content": resume_analysis_system_prompt(job)},
                {"role": "user", "content": build_resume_context(job, resume_text)},
            ]

        return self._advise("Resume analysis", build, parse_resume_analysis, job_id=job_id)

    # Writes

    def create_job_post(self, job_data: Dict[str, Any], employer_id: str, company_id: str) -> Dict[str, Any]:
        """Validate a job post and write it through the data store."""
        employer_id = _require(employer_id, "employer_id")
        company_id = _require(company_id, "company_id")
        for field in JOB_POST_REQUIRED_FIELDS:
            value = job_data.get(field)
            if not value or (isinstance(value, str) and not value.strip()):
                raise ValueError(f"Missing required field: {field}")
        salary_type = str(job_data.get("salary_type") or "negotiable").strip().lower()
        if salary_type not in SALARY_TYPES:
            raise ValueError(f"Invalid salary_type: {salary_type} (expected one of {', '.join(SALARY_TYPES)})")

        self.logger.info("Creating job post", title=job_data["title"], company_id=company_id)
        payload = {
            "company_id": company_id,
            "created_by": employer_id,
            "title": job_data["title"].strip(),
            "description": job_data["description"].strip(),
            "requirements": (job_data.get("requirements") or "").strip(),
            "responsibilities": (job_data.get("responsibilities") or "").strip(),
            "location": job_data["location"].strip(),
            "is_remote": bool(job_data.get("is_remote", False)),
            "is_hybrid": bool(job_data.get("is_hybrid", False)),
            "job_type": job_data["job_type"],
            "experience_level": job_data["experience_level"],
            "skills_required": list(job_data.get("skills_required") or []),
            "benefits": list(job_data.get("benefits") or []),
            "application_deadline": job_data.get("application_deadline") or None,
            "start_date": job_data.get("start_date") or None,
            "drivers_license": bool(job_data.get("drivers_license", False)),
            "additional_questions": list(job_data.get("additional_questions") or []),
            "preferred_language": job_data.get("preferred_language") or "english",
            "priority": job_data.get("priority") or "normal",
            "status": job_data.get("status") or "active",
            "salary_type": salary_type,
            "salary_currency": job_data.get("salary_currency") or "USD",
            "salary_period": job_data.get("salary_period") or "annually",
        }
        for key in ("salary_min", "salary_max", "salary_fixed"):
            amount = _to_float(job_data.get(key))
            if amount:
                payload[key] = amount

        try:
            created = self.store.create_job(payload)
        except Exception as e:
            self.logger.error("Failed to create job post", title=payload["title"], error=str(e))
            raise
        self.logger.info("Job created", job_id=created.get("id"))
        return created

    def schedule_interview(self, interview_data: Dict[str, Any], employer_id: str) -> Dict[str, Any]:
        """Validate an interview request and write it through the data store."""
        employer_id = _require(employer_id, "employer_id")
        for field in INTERVIEW_REQUIRED_FIELDS:
            if not interview_data.get(field):
                raise ValueError(f"Missing required field: {field}")

        when = interview_data["interview_date"]
        if isinstance(when, str):
            when = datetime.fromisoformat(when)

        record = {
            "job_id": str(interview_data["job_id"]),
            "seeker_id": str(interview_data["candidate_id"]),
            "interviewer_id": employer_id,
            "interview_type": interview_data.get("interview_type") or "1st_interview",
            "interview_format": interview_data.get("interview_format") or "video",
            "location": interview_data.get("location"),
            "interview_date": when.isoformat(),
            "duration_minutes": interview_data.get("duration_minutes") or 60,
            "meeting_link": interview_data.get("meeting_link"),
            "agenda": interview_data.get("agenda"),
            "interview_notes": interview_data.get("notes"),
            "additional_interviewers": list(interview_data.get("additional_interviewers") or []),
            "status": "scheduled",
        }
        if interview_data.get("application_id"):
            record["application_id"] = interview_data["application_id"]

        self.logger.info("Scheduling interview", candidate_id=record["seeker_id"], job_id=record["job_id"])
        try:
            created = self.store.create_interview(record)
        except Exception as e:
            self.logger.error("Failed to schedule interview", job_id=record["job_id"], error=str(e))
            raise
        return created

    # Cache

    def cache_stats(self) -> Dict[str, int]:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()

    # Helpers

    def _baseline(self, candidate: CandidateProfile, job: JobPosting, perspective: str) -> MatchResult:
        score = compute_score(candidate, job)
        if perspective == CANDIDATE:
            subject_id, counterpart_id, title = candidate.id, job.id, job.title
        else:
            subject_id, counterpart_id, title = job.id, candidate.id, candidate.full_name
        return MatchResult(
            subject_id=subject_id,
            counterpart_id=counterpart_id,
            score=score,
            insights=f"{match_label(score)}: {BASELINE_INSIGHTS}",
            recommendation=BASELINE_RECOMMENDATION,
            reasons=tuple(match_reasons(candidate, job, score, perspective)),
            title=title,
        )

    @staticmethod
    def _with_text(result: MatchResult, insights: str, recommendation: str) -> MatchResult:
        return MatchResult(
            subject_id=result.subject_id,
            counterpart_id=result.counterpart_id,
            score=result.score,
            insights=insights,
            recommendation=recommendation,
            reasons=result.reasons,
            title=result.title,
        )

    @staticmethod
    def _sorted(results) -> List[MatchResult]:
        return sorted(results, key=lambda r: r.score, reverse=True)
