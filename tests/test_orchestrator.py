"""
Tests for orchestrator.py - baseline scoring, AI enhancement and fallback.
"""

from datetime import datetime

import pytest

from talentmatch.llm_client import CompletionError
from talentmatch.orchestrator import (
    AI_FAILED_INSIGHTS,
    AI_UNAVAILABLE_INSIGHTS,
    AI_UNAVAILABLE_RECOMMENDATION,
    BASELINE_RECOMMENDATION,
    MatchOrchestrator,
)
from talentmatch.datastore import MatchFilters, RecordNotFoundError
from talentmatch.schema import CandidateProfile, JobPosting, ValidationError
from talentmatch.scoring import compute_score


def _jobs(n):
    """n jobs whose baseline scores differ: job i requires i+1 skills, one of them React."""
    jobs = []
    for i in range(n):
        required = ["React"] + [f"Skill{k}" for k in range(i)]
        jobs.append({
            "id": f"job-{i}",
            "title": f"Job {i}",
            "location": "Lisbon",
            "experience_level": "mid",
            "skills_required": required,
            "description": "x" * 800,
        })
    return jobs


def _candidate():
    return {
        "id": "cand-1",
        "full_name": "Ana",
        "skills": ["React"],
        "experience_years": 3,
        "current_location": "Lisbon",
        "languages": ["English"],
    }


def _baseline(candidate_record, job_record):
    return compute_score(CandidateProfile.from_record(candidate_record), JobPosting.from_record(job_record))


def _is_sorted(results):
    return all(a.score >= b.score for a, b in zip(results, results[1:]))


class TestBaselineOnly:
    """No AI client, or one that is not configured."""

    def test_no_client_returns_baseline_scores(self, make_store, quiet_logger):
        store = make_store(candidates=[_candidate()], jobs=_jobs(4))
        orch = MatchOrchestrator(store, client=None, logger=quiet_logger)

        results = orch.fetch_enhanced_jobs("cand-1")

        assert len(results) == 4
        assert _is_sorted(results)
        for r in results:
            assert r.enhanced is False
            assert r.insights == AI_UNAVAILABLE_INSIGHTS
            assert r.recommendation == AI_UNAVAILABLE_RECOMMENDATION
            assert r.score == _baseline(_candidate(), store.jobs[r.counterpart_id])

    def test_unconfigured_client_is_never_called(self, make_store, make_client, quiet_logger):
        client = make_client(configured=False)
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(3)), client=client, logger=quiet_logger)

        orch.fetch_enhanced_jobs("cand-1")

        assert client.calls == []

    def test_fetch_matching_jobs_attaches_reasons(self, make_store, quiet_logger):
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(3)), logger=quiet_logger)

        results = orch.fetch_matching_jobs("cand-1")

        top = results[0]
        assert top.counterpart_id == "job-0"
        assert "Skills match: 1/1 required skills" in top.reasons
        assert top.recommendation == BASELINE_RECOMMENDATION
        assert _is_sorted(results)

    def test_fetch_recommended_candidates(self, make_store, quiet_logger):
        candidates = [
            dict(_candidate(), id="c-low", skills=["Go"]),
            dict(_candidate(), id="c-high"),
        ]
        job = _jobs(1)[0]
        orch = MatchOrchestrator(make_store(candidates=candidates, jobs=[job]), logger=quiet_logger)

        results = orch.fetch_recommended_candidates("job-0")

        assert [r.counterpart_id for r in results] == ["c-high", "c-low"]
        assert all(r.subject_id == "job-0" for r in results)
        assert results[0].title == "Ana"

    def test_filters_dict_is_converted(self, make_store, quiet_logger):
        store = make_store(candidates=[_candidate()], jobs=_jobs(1))
        orch = MatchOrchestrator(store, logger=quiet_logger)

        orch.fetch_matching_jobs("cand-1", {"jobType": "full_time", "location": "Lisbon"})

        assert store.last_filters == MatchFilters(job_type="full_time", location="Lisbon")

    def test_metrics_count_scored_matches(self, make_store, quiet_logger):
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(5)), logger=quiet_logger)
        orch.fetch_matching_jobs("cand-1")
        assert quiet_logger.get_metrics()["matches_scored"] == 5


class TestEnhancement:
    """AI-enhanced passes with a configured fake client."""

    def test_ai_score_replaces_baseline(self, make_store, make_client, quiet_logger):
        client = make_client(replies="Match Score: 91\n\nInsights: great fit\n\nRecommendation: apply now")
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(2)), client=client, logger=quiet_logger)

        results = orch.fetch_enhanced_jobs("cand-1")

        assert [r.score for r in results] == [91, 91]
        assert all(r.enhanced for r in results)
        assert results[0].insights == "great fit"
        assert results[0].recommendation == "apply now"

    def test_batch_cap(self, make_store, make_client, quiet_logger):
        client = make_client(replies="Score: 99")
        store = make_store(candidates=[_candidate()], jobs=_jobs(15))
        orch = MatchOrchestrator(store, client=client, logger=quiet_logger)

        results = orch.fetch_enhanced_jobs("cand-1")

        assert len(client.calls) == 10
        assert len(results) == 15
        assert sum(1 for r in results if r.enhanced) == 10
        enhanced_ids = {r.counterpart_id for r in results if r.enhanced}
        assert enhanced_ids == {f"job-{i}" for i in range(10)}
        for r in results:
            if not r.enhanced:
                assert r.score == _baseline(_candidate(), store.jobs[r.counterpart_id])
        assert _is_sorted(results)

    def test_cap_follows_pool_order_not_score(self, make_store, make_client, quiet_logger):
        # Pool order puts the weakest baseline first
        jobs = list(reversed(_jobs(4)))
        client = make_client(replies="Score: 50")
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=jobs), client=client, ai_limit=2, logger=quiet_logger)

        results = orch.fetch_enhanced_jobs("cand-1")

        enhanced_ids = {r.counterpart_id for r in results if r.enhanced}
        assert enhanced_ids == {"job-3", "job-2"}

    def test_failure_falls_back_to_exact_baseline(self, make_store, make_client, quiet_logger):
        client = make_client(replies="Score: 95", fail_calls={1})
        store = make_store(candidates=[_candidate()], jobs=_jobs(3))
        orch = MatchOrchestrator(store, client=client, logger=quiet_logger)

        results = orch.fetch_enhanced_jobs("cand-1")

        by_id = {r.counterpart_id: r for r in results}
        failed = by_id["job-1"]
        assert failed.enhanced is False
        assert failed.insights == AI_FAILED_INSIGHTS
        assert failed.recommendation == BASELINE_RECOMMENDATION
        assert failed.score == _baseline(_candidate(), store.jobs["job-1"])
        assert by_id["job-0"].score == 95
        assert by_id["job-2"].score == 95
        assert len(client.calls) == 3

    def test_failure_is_logged_and_counted(self, make_store, make_client, quiet_logger):
        client = make_client(fail_calls={0, 1}, error=CompletionError("bad gateway", 502))
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(2)), client=client, logger=quiet_logger)

        orch.fetch_enhanced_jobs("cand-1")

        metrics = quiet_logger.get_metrics()
        assert metrics["ai_calls"] == 2
        assert metrics["ai_failures"] == 2
        assert metrics["fallbacks"] == 2
        assert metrics["errors_by_type"] == {"CompletionError": 2}

    def test_zero_ai_score_keeps_baseline(self, make_store, make_client, quiet_logger):
        client = make_client(replies="Score: 0")
        store = make_store(candidates=[_candidate()], jobs=_jobs(1))
        orch = MatchOrchestrator(store, client=client, logger=quiet_logger)

        result = orch.fetch_enhanced_jobs("cand-1")[0]

        assert result.enhanced is True
        assert result.score == _baseline(_candidate(), store.jobs["job-0"])

    def test_unstructured_reply_scores_default(self, make_store, make_client, quiet_logger):
        client = make_client(replies="no structured content here")
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(1)), client=client, logger=quiet_logger)

        assert orch.fetch_enhanced_jobs("cand-1")[0].score == 70

    def test_out_of_range_ai_score_is_clamped(self, make_store, make_client, quiet_logger):
        client = make_client(replies="Score: 850")
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(1)), client=client, logger=quiet_logger)

        assert orch.fetch_enhanced_jobs("cand-1")[0].score == 100

    def test_prompt_contents(self, make_store, make_client, quiet_logger):
        client = make_client()
        orch = MatchOrchestrator(
            make_store(candidates=[_candidate()], jobs=_jobs(1)),
            client=client,
            model="test-model",
            max_tokens=123,
            temperature=0.1,
            logger=quiet_logger,
        )

        orch.fetch_enhanced_jobs("cand-1", ai_prompt="Prefers remote work")

        messages = client.calls[0]
        assert [m["role"] for m in messages] == ["system", "user"]
        assert "match score (0-100)" in messages[0]["content"]
        user = messages[1]["content"]
        assert "x" * 500 + "..." in user
        assert "x" * 501 not in user
        assert "Additional Context: Prefers remote work" in user
        assert client.options[0] == {"model": "test-model", "max_tokens": 123, "temperature": 0.1}

    def test_employer_perspective(self, make_store, make_client, quiet_logger):
        candidates = [dict(_candidate(), id=f"c-{i}") for i in range(3)]
        client = make_client(replies=["Score: 60", "Score: 90", "Score: 75"])
        orch = MatchOrchestrator(make_store(candidates=candidates, jobs=_jobs(1)), client=client, logger=quiet_logger)

        results = orch.fetch_enhanced_matches("job-0", perspective="employer")

        assert [r.counterpart_id for r in results] == ["c-1", "c-2", "c-0"]
        assert "recruiter" in client.calls[0][0]["content"]

    def test_unknown_perspective(self, make_store, quiet_logger):
        orch = MatchOrchestrator(make_store(), logger=quiet_logger)
        with pytest.raises(ValueError):
            orch.fetch_enhanced_matches("x", perspective="admin")

    def test_concurrent_pass_matches_sequential(self, make_store, make_client, quiet_logger):
        store = make_store(candidates=[_candidate()], jobs=_jobs(12))

        sequential = MatchOrchestrator(store, client=make_client(replies="Score: 77"), logger=quiet_logger)
        concurrent = MatchOrchestrator(
            store, client=make_client(replies="Score: 77"), max_concurrency=4, logger=quiet_logger
        )

        seq = sequential.fetch_enhanced_jobs("cand-1")
        con = concurrent.fetch_enhanced_jobs("cand-1")

        assert [(r.counterpart_id, r.score, r.enhanced) for r in con] == [
            (r.counterpart_id, r.score, r.enhanced) for r in seq
        ]

    def test_concurrent_failure_stays_isolated(self, make_store, make_client, quiet_logger):
        client = make_client(replies="Score: 77", fail_calls={3})
        orch = MatchOrchestrator(
            make_store(candidates=[_candidate()], jobs=_jobs(10)),
            client=client,
            max_concurrency=4,
            logger=quiet_logger,
        )

        results = orch.fetch_enhanced_jobs("cand-1")

        assert len(client.calls) == 10
        assert sum(1 for r in results if r.enhanced) == 9
        assert sum(1 for r in results if r.insights == AI_FAILED_INSIGHTS) == 1
        assert _is_sorted(results)


class TestFatalErrors:
    """Fetch failures propagate unchanged."""

    def test_missing_candidate(self, make_store, make_client, quiet_logger):
        orch = MatchOrchestrator(make_store(), client=make_client(), logger=quiet_logger)
        with pytest.raises(RecordNotFoundError):
            orch.fetch_enhanced_jobs("ghost")

    def test_pool_fetch_failure(self, make_store, make_client, quiet_logger):
        store = make_store(candidates=[_candidate()], jobs=_jobs(2), fail_on="list_jobs")
        client = make_client()
        orch = MatchOrchestrator(store, client=client, logger=quiet_logger)

        with pytest.raises(ConnectionError):
            orch.fetch_enhanced_jobs("cand-1")
        assert client.calls == []

    @pytest.mark.parametrize("bad_id", [None, "", "   "])
    def test_missing_identifier(self, make_store, quiet_logger, bad_id):
        orch = MatchOrchestrator(make_store(), logger=quiet_logger)
        with pytest.raises(ValueError):
            orch.fetch_enhanced_jobs(bad_id)

    def test_invalid_constructor_settings(self, make_store, quiet_logger):
        with pytest.raises(ValueError):
            MatchOrchestrator(make_store(), ai_limit=-1, logger=quiet_logger)
        with pytest.raises(ValueError):
            MatchOrchestrator(make_store(), max_concurrency=0, logger=quiet_logger)


class TestInvalidPoolRecords:
    """A stored row the reader rejects is dropped from the pool, not fatal."""

    BAD_JOB = {"id": "job-bad", "title": "Hourly gig", "salary_type": "hourly"}

    def test_invalid_job_is_skipped(self, tmp_path, make_store, quiet_logger):
        store = make_store(candidates=[_candidate()], jobs=_jobs(2) + [dict(self.BAD_JOB)])
        orch = MatchOrchestrator(store, logger=quiet_logger)

        results = orch.fetch_matching_jobs("cand-1")

        assert sorted(r.counterpart_id for r in results) == ["job-0", "job-1"]
        log = next((tmp_path / "logs").glob("*.log")).read_text()
        assert "Skipping invalid pool record" in log
        assert "job-bad" in log

    def test_enhanced_pass_skips_invalid_job(self, make_store, make_client, quiet_logger):
        store = make_store(candidates=[_candidate()], jobs=[dict(self.BAD_JOB)] + _jobs(2))
        client = make_client(replies="Score: 77")
        orch = MatchOrchestrator(store, client=client, logger=quiet_logger)

        results = orch.fetch_enhanced_jobs("cand-1")

        assert [r.score for r in results] == [77, 77]
        assert len(client.calls) == 2

    def test_invalid_candidate_is_skipped(self, make_store, quiet_logger):
        bad = {"id": "cand-bad", "skills": "React"}
        store = make_store(candidates=[bad, _candidate()], jobs=_jobs(1))
        orch = MatchOrchestrator(store, logger=quiet_logger)

        results = orch.fetch_recommended_candidates("job-0")

        assert [r.counterpart_id for r in results] == ["cand-1"]

    def test_invalid_subject_is_still_fatal(self, make_store, quiet_logger):
        store = make_store(candidates=[_candidate()], jobs=[dict(self.BAD_JOB)])
        orch = MatchOrchestrator(store, logger=quiet_logger)

        with pytest.raises(ValidationError):
            orch.fetch_recommended_candidates("job-bad")


class TestCacheWiring:
    """The cache is owned by the orchestrator but the pipeline never touches it."""

    def test_cache_never_serves_a_hit_under_current_wiring(self, make_store, make_client, quiet_logger):
        client = make_client(replies="Score: 88")
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(2)), client=client, logger=quiet_logger)

        orch.fetch_enhanced_jobs("cand-1")
        orch.fetch_enhanced_jobs("cand-1")

        assert len(client.calls) == 4
        assert orch.cache_stats() == {"size": 0, "timeout_ms": 300000}

    def test_clear_cache(self, make_store, quiet_logger):
        orch = MatchOrchestrator(make_store(), cache_ttl=60, logger=quiet_logger)
        orch.cache.set("k", "v")
        orch.clear_cache()
        assert orch.cache_stats() == {"size": 0, "timeout_ms": 60000}


class TestEvaluateCandidate:
    def test_evaluation(self, make_store, make_client, quiet_logger):
        reply = "Rating: 8\nStrong React skills.\nConcern: no AWS.\nWe recommend a second round."
        client = make_client(replies=reply)
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(1)), client=client, logger=quiet_logger)

        result = orch.evaluate_candidate("cand-1", "job-0", "technical")

        assert result["overall_score"] == 8
        assert result["strengths"] == ["Strong React skills."]
        assert result["concerns"] == ["Concern: no AWS."]
        assert result["recommendations"] == ["We recommend a second round."]
        assert "Evaluation Type: technical" in client.calls[0][0]["content"]

    def test_requires_configured_client(self, make_store, make_client, quiet_logger):
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(1)), client=make_client(configured=False), logger=quiet_logger)
        with pytest.raises(CompletionError):
            orch.evaluate_candidate("cand-1", "job-0")

    def test_ai_failure_propagates(self, make_store, make_client, quiet_logger):
        client = make_client(fail_calls={0})
        orch = MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(1)), client=client, logger=quiet_logger)
        with pytest.raises(TimeoutError):
            orch.evaluate_candidate("cand-1", "job-0")


class TestAdvice:
    """Interview preparation, market insights and resume analysis."""

    PREP = (
        "Questions they might ask:\n"
        "- They might ask: how did you scale the React app?\n"
        "- Walk through your testing approach.\n"
        "1. Research the company's product line\n"
        "They are likely to ask about state management?\n"
    )

    GUIDE = (
        "1. Pair-programming exercise on a React component\n"
        "2. Ask: how would you structure a large form?\n"
        "Red flag: vague answers about past ownership.\n"
        "Watch for blame on former teammates.\n"
        "Follow up: what would you change next time?\n"
    )

    MARKET = (
        "Market demand is strong for frontend roles.\n"
        "Typical salary: $60,000-$85,000 per year.\n"
        "Key skills: React, TypeScript, testing.\n"
        "Competition for senior talent is High.\n"
        "- Post salary ranges up front\n"
        "- Move fast on offers\n"
    )

    RESUME = (
        "Skills match: 80% of the required stack.\n"
        "Experience relevance: high\n"
        "Strong React background across three products.\n"
        "Red flag: two short stints under six months.\n"
        "Interview focus: system design depth.\n"
        "Overall rating: 78. We recommend you hire after a design round.\n"
    )

    def _orch(self, make_store, client, logger):
        return MatchOrchestrator(make_store(candidates=[_candidate()], jobs=_jobs(1)), client=client, logger=logger)

    def test_prepare_for_interview(self, make_store, make_client, quiet_logger):
        client = make_client(replies=self.PREP)
        result = self._orch(make_store, client, quiet_logger).prepare_for_interview("cand-1", "job-0", "technical")

        assert result["preparation"] == self.PREP
        assert result["questions"] == [
            "- They might ask: how did you scale the React app?",
            "They are likely to ask about state management?",
        ]
        assert result["tips"] == [
            "- They might ask: how did you scale the React app?",
            "- Walk through your testing approach.",
            "1. Research the company's product line",
        ]
        assert result["research"] == ["1. Research the company's product line"]

        system, user = client.calls[0]
        assert "Interview Type: technical" in system["content"]
        assert "- Skills: React" in system["content"]
        assert user["content"] == "Prepare me for a technical interview for the Job 0 position at Unknown."

    def test_prepare_interview_for_employer(self, make_store, make_client, quiet_logger):
        client = make_client(replies=self.GUIDE)
        result = self._orch(make_store, client, quiet_logger).prepare_interview_for_employer("cand-1", "job-0")

        assert result["questions"] == ["2. Ask: how would you structure a large form?"]
        assert result["assessment_methods"] == [
            "1. Pair-programming exercise on a React component",
            "2. Ask: how would you structure a large form?",
        ]
        assert result["red_flags"] == [
            "Red flag: vague answers about past ownership.",
            "Watch for blame on former teammates.",
        ]
        assert result["follow_up_questions"] == ["Follow up: what would you change next time?"]
        assert "Candidate: Ana" in client.calls[0][1]["content"]
        assert "Interview Type: general" in client.calls[0][1]["content"]

    def test_get_market_insights(self, make_store, make_client, quiet_logger):
        client = make_client(replies=self.MARKET)
        orch = MatchOrchestrator(make_store(), client=client, logger=quiet_logger)

        result = orch.get_market_insights("Frontend Engineer", "Lisbon")

        assert result["insights"] == self.MARKET
        assert result["salary_range"] == "$60,000-$85,000"
        assert result["skills_in_demand"] == ["Key skills: React, TypeScript, testing."]
        assert result["market_trends"] == ["Market demand is strong for frontend roles."]
        assert result["hiring_tips"] == ["- Post salary ranges up front", "- Move fast on offers"]
        assert result["competition_level"] == "high"
        assert client.calls[0][1]["content"] == (
            "Job Title: Frontend Engineer\nLocation: Lisbon\nIndustry: Not specified"
        )

    def test_analyze_resume_for_hiring(self, make_store, make_client, quiet_logger):
        client = make_client(replies=self.RESUME)
        result = self._orch(make_store, client, quiet_logger).analyze_resume_for_hiring("Ana - 3 years React", "job-0")

        assert result["skills_match"] == "80%"
        assert result["experience_relevance"] == "high"
        assert result["hiring_recommendation"] == "hire"
        assert result["red_flags"] == ["Red flag: two short stints under six months."]
        assert result["interview_focus"] == ["Interview focus: system design depth."]
        assert result["strengths"] == ["Strong React background across three products."]
        assert result["overall_score"] == 78
        assert client.calls[0][1]["content"] == "Please analyze this resume for the Job 0 position:\n\nAna - 3 years React"

    def test_empty_resume(self, make_store, make_client, quiet_logger):
        client = make_client()
        with pytest.raises(ValueError, match="resume_text"):
            self._orch(make_store, client, quiet_logger).analyze_resume_for_hiring("  ", "job-0")
        assert client.calls == []

    def test_missing_job_is_not_an_ai_call(self, make_store, make_client, quiet_logger):
        client = make_client()
        with pytest.raises(RecordNotFoundError):
            self._orch(make_store, client, quiet_logger).analyze_resume_for_hiring("resume", "ghost")
        assert client.calls == []
        assert quiet_logger.get_metrics()["ai_calls"] == 0

    def test_requires_configured_client(self, make_store, make_client, quiet_logger):
        orch = MatchOrchestrator(make_store(), client=make_client(configured=False), logger=quiet_logger)
        with pytest.raises(CompletionError):
            orch.get_market_insights("Frontend Engineer")

    def test_ai_failure_is_counted_and_raised(self, make_store, make_client, quiet_logger):
        client = make_client(fail_calls={0})
        with pytest.raises(TimeoutError):
            self._orch(make_store, client, quiet_logger).prepare_for_interview("cand-1", "job-0")

        metrics = quiet_logger.get_metrics()
        assert metrics["ai_calls"] == 1
        assert metrics["ai_failures"] == 1
        assert metrics["errors_by_type"] == {"TimeoutError": 1}


class TestWrites:
    @pytest.fixture
    def job_data(self):
        return {
            "title": "  Backend Engineer ",
            "description": "Build APIs",
            "location": "Remote",
            "job_type": "full_time",
            "experience_level": "mid",
            "salary_min": "50000",
            "salary_max": 70000,
        }

    def test_create_job_post_defaults(self, make_store, quiet_logger, job_data):
        store = make_store()
        orch = MatchOrchestrator(store, logger=quiet_logger)

        created = orch.create_job_post(job_data, "emp-1", "co-1")

        assert created["id"] == "job-new-1"
        payload = store.created_jobs[0]
        assert payload["title"] == "Backend Engineer"
        assert payload["created_by"] == "emp-1"
        assert payload["company_id"] == "co-1"
        assert payload["salary_type"] == "negotiable"
        assert payload["salary_currency"] == "USD"
        assert payload["salary_period"] == "annually"
        assert payload["preferred_language"] == "english"
        assert payload["priority"] == "normal"
        assert payload["status"] == "active"
        assert payload["salary_min"] == 50000.0
        assert payload["salary_max"] == 70000.0
        assert "salary_fixed" not in payload

    @pytest.mark.parametrize("field", ["title", "description", "location", "job_type", "experience_level"])
    def test_create_job_post_requires_fields(self, make_store, quiet_logger, job_data, field):
        job_data[field] = ""
        store = make_store()
        with pytest.raises(ValueError, match=field):
            MatchOrchestrator(store, logger=quiet_logger).create_job_post(job_data, "emp-1", "co-1")
        assert store.created_jobs == []

    def test_create_job_post_rejects_unknown_salary_type(self, make_store, quiet_logger, job_data):
        # a stored "hourly" job would later fail validation in every pool read
        job_data["salary_type"] = "hourly"
        store = make_store()
        with pytest.raises(ValueError, match="salary_type"):
            MatchOrchestrator(store, logger=quiet_logger).create_job_post(job_data, "emp-1", "co-1")
        assert store.created_jobs == []

    def test_create_job_post_normalizes_salary_type(self, make_store, quiet_logger, job_data):
        job_data["salary_type"] = " Range "
        store = make_store()
        MatchOrchestrator(store, logger=quiet_logger).create_job_post(job_data, "emp-1", "co-1")
        assert store.created_jobs[0]["salary_type"] == "range"

    def test_schedule_interview(self, make_store, quiet_logger):
        store = make_store()
        orch = MatchOrchestrator(store, logger=quiet_logger)

        created = orch.schedule_interview(
            {"job_id": "job-0", "candidate_id": "cand-1", "interview_date": "2026-11-02T10:00:00", "notes": "bring laptop"},
            "emp-1",
        )

        assert created["id"] == "int-1"
        assert created["seeker_id"] == "cand-1"
        assert created["interviewer_id"] == "emp-1"
        assert created["interview_type"] == "1st_interview"
        assert created["interview_format"] == "video"
        assert created["duration_minutes"] == 60
        assert created["status"] == "scheduled"
        assert created["interview_notes"] == "bring laptop"
        assert created["interview_date"] == datetime(2026, 11, 2, 10, 0).isoformat()
        assert "application_id" not in created

    def test_schedule_interview_requires_date(self, make_store, quiet_logger):
        with pytest.raises(ValueError, match="interview_date"):
            MatchOrchestrator(make_store(), logger=quiet_logger).schedule_interview(
                {"job_id": "job-0", "candidate_id": "cand-1"}, "emp-1"
            )
