"""
Response envelopes around the orchestrator for API-style callers.

Every method returns {"success", "data", "count", "message"} and adds
"error" on failure. Exceptions never escape from here.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .orchestrator import CANDIDATE, MatchOrchestrator
from .schema import MatchResult


def _ok(data: Any, message: str, count: Optional[int] = None) -> Dict[str, Any]:
    envelope = {"success": True, "data": data, "message": message}
    if count is not None:
        envelope["count"] = count
    return envelope


def _fail(error: Exception, message: str, data: Any = None) -> Dict[str, Any]:
    return {
        "success": False,
        "data": data,
        "count": 0,
        "message": message,
        "error": str(error),
    }


def _dicts(results: Iterable[MatchResult]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in results]


class MatchService:
    def __init__(self, orchestrator: MatchOrchestrator):
        self.orchestrator = orchestrator
        self.logger = orchestrator.logger

    def get_matching_jobs(self, candidate_id: str, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            results = _dicts(self.orchestrator.fetch_matching_jobs(candidate_id, filters))
            return _ok(results, f"Found {len(results)} matching jobs", count=len(results))
        except Exception as e:
            return _fail(e, "Failed to fetch matching jobs", data=[])

    def get_recommended_candidates(self, job_id: str, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            results = _dicts(self.orchestrator.fetch_recommended_candidates(job_id, filters))
            return _ok(results, f"Found {len(results)} recommended candidates", count=len(results))
        except Exception as e:
            return _fail(e, "Failed to fetch recommended candidates", data=[])

    def get_enhanced_matches(
        self,
        subject_id: str,
        filters: Optional[Dict[str, Any]] = None,
        ai_prompt: Optional[str] = None,
        perspective: str = CANDIDATE,
    ) -> Dict[str, Any]:
        try:
            results = _dicts(
                self.orchestrator.fetch_enhanced_matches(subject_id, filters, ai_prompt, perspective)
            )
            return _ok(results, f"Found {len(results)} AI-enhanced matches", count=len(results))
        except Exception as e:
            return _fail(e, "Failed to fetch AI-enhanced matches", data=[])

    def create_job_post(self, job_data: Dict[str, Any], employer_id: str, company_id: str) -> Dict[str, Any]:
        try:
            job = self.orchestrator.create_job_post(job_data, employer_id, company_id)
            return _ok(job, "Job post created successfully")
        except Exception as e:
            return _fail(e, "Failed to create job post")

    def schedule_interview(self, interview_data: Dict[str, Any], employer_id: str) -> Dict[str, Any]:
        try:
            interview = self.orchestrator.schedule_interview(interview_data, employer_id)
            return _ok(interview, "Interview scheduled successfully")
        except Exception as e:
            return _fail(e, "Failed to schedule interview")

    def batch_process_job_matches(self, candidate_ids: List[str], filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run baseline job matching for several candidates; one failure does not stop the rest."""
        results = []
        for candidate_id in candidate_ids:
            try:
                matches = _dicts(self.orchestrator.fetch_matching_jobs(candidate_id, filters))
                results.append({"candidate_id": candidate_id, "success": True, "data": matches, "count": len(matches)})
            except Exception as e:
                self.logger.warning("Batch job matching failed", candidate_id=candidate_id, error=str(e))
                results.append({"candidate_id": candidate_id, "success": False, "error": str(e), "data": [], "count": 0})
        succeeded = sum(1 for r in results if r["success"])
        return _ok(results, f"Processed {succeeded}/{len(candidate_ids)} candidates", count=len(results))

    def batch_process_candidate_recommendations(
        self, job_ids: List[str], filters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Run baseline candidate recommendation for several jobs."""
        results = []
        for job_id in job_ids:
            try:
                matches = _dicts(self.orchestrator.fetch_recommended_candidates(job_id, filters))
                results.append({"job_id": job_id, "success": True, "data": matches, "count": len(matches)})
            except Exception as e:
                self.logger.warning("Batch candidate recommendation failed", job_id=job_id, error=str(e))
                results.append({"job_id": job_id, "success": False, "error": str(e), "data": [], "count": 0})
        succeeded = sum(1 for r in results if r["success"])
        return _ok(results, f"Processed {succeeded}/{len(job_ids)} jobs", count=len(results))

    def get_agent_stats(self) -> Dict[str, Any]:
        data = {
            "cache": self.orchestrator.cache_stats(),
            "metrics": self.logger.get_metrics(),
        }
        return _ok(data, "Agent statistics retrieved")

    def clear_agent_cache(self) -> Dict[str, Any]:
        self.orchestrator.clear_cache()
        return _ok(None, "Agent cache cleared")

    def health_check(self) -> Dict[str, Any]:
        client = self.orchestrator.client
        data = {
            "status": "healthy",
            "ai_configured": bool(client is not None and client.is_configured()),
            "cache": self.orchestrator.cache_stats(),
            "timestamp": datetime.now().isoformat(),
        }
        return _ok(data, "Matching service is healthy")
