import argparse
import json
import sys
from pathlib import Path

from . import __version__
from .config import Settings
from .datastore import MatchFilters, SqlDataStore
from .database import init_database
from .llm_client import GroqClient
from .logger import get_logger
from .orchestrator import CANDIDATE, EMPLOYER, MatchOrchestrator
from .parser import parse_match_analysis
from .schema import CandidateProfile, JobPosting, ValidationError
from .scoring import compute_score, legacy_score, match_label, match_reasons, score_breakdown


def _read_json(path: str) -> dict:
    p = Path(path)
    if not p.exists():
        raise SystemExit(f"Input file not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _db_path(args: argparse.Namespace, settings: Settings) -> Path:
    return Path(args.db) if args.db else settings.db_path


def _filters(args: argparse.Namespace) -> MatchFilters:
    return MatchFilters(
        date=getattr(args, "date", None),
        job_type=getattr(args, "job_type", None),
        experience=getattr(args, "experience", None),
        location=getattr(args, "location", None),
        company=getattr(args, "company", None),
        search_term=getattr(args, "search", None),
        require_candidate_skills=not getattr(args, "any_skills", False),
    )


def _build_orchestrator(args: argparse.Namespace, settings: Settings) -> MatchOrchestrator:
    db_path = _db_path(args, settings)
    if not db_path.exists():
        raise SystemExit(f"Database not found: {db_path}. Run 'talentmatch init-db' first.")
    store = SqlDataStore(db_path, create=False)
    client = GroqClient(api_key=settings.groq_api_key) if getattr(args, "ai", False) else None
    logger = get_logger(level=settings.log_level)
    return MatchOrchestrator.from_settings(settings, store=store, client=client, logger=logger)


def _print_results(results) -> None:
    if not results:
        print("No matches found.")
        return
    for r in results:
        marker = "AI" if r.enhanced else "--"
        print(f"[{r.score:3d}] {marker} {r.counterpart_id}  {r.title or ''}")
        print(f"      {r.insights.splitlines()[0] if r.insights else ''}")
        for reason in r.reasons:
            print(f"      - {reason}")


def cmd_init_db(args: argparse.Namespace, settings: Settings) -> None:
    db_path = _db_path(args, settings)
    init_database(db_path)
    print(f"Database ready: {db_path}")


def cmd_load(args: argparse.Namespace, settings: Settings) -> None:
    data = _read_json(args.input)
    store = SqlDataStore(_db_path(args, settings))
    counts = store.load_records(data)
    print(f"Loaded companies={counts['companies']} candidates={counts['candidates']} jobs={counts['jobs']}")


def cmd_score(args: argparse.Namespace, settings: Settings) -> None:
    try:
        candidate = CandidateProfile.from_record(_read_json(args.candidate))
        job = JobPosting.from_record(_read_json(args.job))
    except ValidationError as e:
        print("Invalid:")
        for err in e.errors:
            print(f" - {err}")
        raise SystemExit(2)

    score = compute_score(candidate, job)
    print(f"Score: {score} ({match_label(score)})")
    for name, value in score_breakdown(candidate, job).items():
        print(f"  {name:<10} {value}")
    if args.legacy:
        print(f"Legacy score: {legacy_score(candidate, job)}")
    for reason in match_reasons(candidate, job, score):
        print(f" - {reason}")


def cmd_match_jobs(args: argparse.Namespace, settings: Settings) -> None:
    orchestrator = _build_orchestrator(args, settings)
    if args.ai:
        results = orchestrator.fetch_enhanced_jobs(args.candidate_id, _filters(args), args.prompt)
    else:
        results = orchestrator.fetch_matching_jobs(args.candidate_id, _filters(args))
    _print_results(results)
    if args.ai:
        orchestrator.logger.log_metrics_summary()


def cmd_match_candidates(args: argparse.Namespace, settings: Settings) -> None:
    orchestrator = _build_orchestrator(args, settings)
    if args.ai:
        results = orchestrator.fetch_enhanced_candidates(args.job_id, _filters(args), args.prompt)
    else:
        results = orchestrator.fetch_recommended_candidates(args.job_id, _filters(args))
    _print_results(results)
    if args.ai:
        orchestrator.logger.log_metrics_summary()


def _ai_orchestrator(args: argparse.Namespace, settings: Settings) -> MatchOrchestrator:
    args.ai = True
    orchestrator = _build_orchestrator(args, settings)
    if not orchestrator.client.is_configured():
        raise SystemExit("GROQ_API_KEY not set. Set it in the environment or .env.")
    return orchestrator


def _print_json(result: dict) -> None:
    print(json.dumps(result, indent=2, ensure_ascii=False))


def cmd_evaluate(args: argparse.Namespace, settings: Settings) -> None:
    orchestrator = _ai_orchestrator(args, settings)
    _print_json(orchestrator.evaluate_candidate(args.candidate_id, args.job_id, args.type))


def cmd_interview_prep(args: argparse.Namespace, settings: Settings) -> None:
    orchestrator = _ai_orchestrator(args, settings)
    if args.interviewer:
        result = orchestrator.prepare_interview_for_employer(args.candidate_id, args.job_id, args.type)
    else:
        result = orchestrator.prepare_for_interview(args.candidate_id, args.job_id, args.type)
    _print_json(result)


def cmd_market_insights(args: argparse.Namespace, settings: Settings) -> None:
    orchestrator = _ai_orchestrator(args, settings)
    _print_json(orchestrator.get_market_insights(args.title, args.location, args.industry))


def cmd_analyze_resume(args: argparse.Namespace, settings: Settings) -> None:
    p = Path(args.resume)
    if not p.exists():
        raise SystemExit(f"Input file not found: {p}")
    orchestrator = _ai_orchestrator(args, settings)
    _print_json(orchestrator.analyze_resume_for_hiring(p.read_text(encoding="utf-8"), args.job_id))


def cmd_parse_reply(args: argparse.Namespace, settings: Settings) -> None:
    if args.input:
        p = Path(args.input)
        if not p.exists():
            raise SystemExit(f"Input file not found: {p}")
        text = p.read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()
    analysis = parse_match_analysis(text, args.perspective)
    print(json.dumps({
        "score": analysis.score,
        "insights": analysis.insights,
        "recommendation": analysis.recommendation,
        "strengths": list(analysis.strengths),
        "concerns": list(analysis.concerns),
        "action_items": list(analysis.action_items),
    }, indent=2, ensure_ascii=False))


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--date", choices=["today", "week", "month"], help="Posting date window")
    p.add_argument("--job-type", help="Job type (or 'all')")
    p.add_argument("--experience", help="Experience level: entry, mid, senior, lead, executive (or 'all')")
    p.add_argument("--location", help="Location substring (or 'all')")


def main():
    parser = argparse.ArgumentParser(prog="talentmatch", description="Candidate/job matching with optional AI enhancement")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite database (default: TALENTMATCH_DB or data/talentmatch.db)")

    subparsers = parser.add_subparsers(dest="command")

    init = subparsers.add_parser("init-db", help="Create the database tables")
    init.set_defaults(func=cmd_init_db)

    load = subparsers.add_parser("load", help="Load companies, candidates and jobs from a JSON file")
    load.add_argument("--input", required=True, help="JSON file with companies/candidates/jobs lists")
    load.set_defaults(func=cmd_load)

    score = subparsers.add_parser("score", help="Score one candidate JSON against one job JSON")
    score.add_argument("--candidate", required=True, help="Path to candidate JSON")
    score.add_argument("--job", required=True, help="Path to job JSON")
    score.add_argument("--legacy", action="store_true", help="Also print the legacy weighting")
    score.set_defaults(func=cmd_score)

    mj = subparsers.add_parser("match-jobs", help="Rank jobs for a candidate")
    mj.add_argument("--candidate-id", required=True, help="Candidate profile id")
    mj.add_argument("--company", help="Company name substring")
    mj.add_argument("--any-skills", action="store_true", help="Do not require jobs to list all candidate skills")
    mj.add_argument("--ai", action="store_true", help="Enhance the top matches with AI analysis")
    mj.add_argument("--prompt", help="Extra context passed to the AI analysis")
    _add_filter_args(mj)
    mj.set_defaults(func=cmd_match_jobs)

    mc = subparsers.add_parser("match-candidates", help="Rank candidates for a job")
    mc.add_argument("--job-id", required=True, help="Job id")
    mc.add_argument("--search", help="Headline/summary substring")
    mc.add_argument("--ai", action="store_true", help="Enhance the top matches with AI analysis")
    mc.add_argument("--prompt", help="Extra context passed to the AI analysis")
    _add_filter_args(mc)
    mc.set_defaults(func=cmd_match_candidates)

    ev = subparsers.add_parser("evaluate", help="AI evaluation of a candidate for a job")
    ev.add_argument("--candidate-id", required=True, help="Candidate profile id")
    ev.add_argument("--job-id", required=True, help="Job id")
    ev.add_argument("--type", default="overall", help="Evaluation type (default: overall)")
    ev.set_defaults(func=cmd_evaluate)

    ip = subparsers.add_parser("interview-prep", help="AI interview preparation for a candidate and a job")
    ip.add_argument("--candidate-id", required=True, help="Candidate profile id")
    ip.add_argument("--job-id", required=True, help="Job id")
    ip.add_argument("--type", default="general", help="Interview type (default: general)")
    ip.add_argument("--interviewer", action="store_true", help="Prepare the interviewer instead of the candidate")
    ip.set_defaults(func=cmd_interview_prep)

    mi = subparsers.add_parser("market-insights", help="AI hiring market insights for a role")
    mi.add_argument("--title", required=True, help="Job title")
    mi.add_argument("--location", help="Location")
    mi.add_argument("--industry", help="Industry")
    mi.set_defaults(func=cmd_market_insights)

    ar = subparsers.add_parser("analyze-resume", help="AI resume analysis against a job")
    ar.add_argument("--resume", required=True, help="Text file with the resume")
    ar.add_argument("--job-id", required=True, help="Job id")
    ar.set_defaults(func=cmd_analyze_resume)

    pr = subparsers.add_parser("parse-reply", help="Parse a saved AI reply into structured fields")
    pr.add_argument("--input", help="Text file with the reply (default: stdin)")
    pr.add_argument("--perspective", choices=[CANDIDATE, EMPLOYER], default=CANDIDATE)
    pr.set_defaults(func=cmd_parse_reply)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    settings = Settings.from_env()
    try:
        settings.validate()
    except ValueError as e:
        raise SystemExit(str(e))

    if hasattr(args, "func"):
        args.func(args, settings)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
