#!/usr/bin/env python3
"""
Compare the unified match score with the legacy candidate-centric weighting.

Older call sites weighted experience at 0.25 and job-type preference at
0.15 and renormalized over the factors with data. This script scores every
candidate/job pair in a database both ways and reports where they disagree.

Usage:
    python scripts/compare_weightings.py --db data/talentmatch.db --threshold 15
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from talentmatch.database import Candidate, Job, get_session
from talentmatch.schema import CandidateProfile, JobPosting, ValidationError
from talentmatch.scoring import compute_score, legacy_score


def compare(db_path: Path, threshold: int = 15, show: int = 10):
    """
    Score all pairs with both weightings.

    Returns a dict with pair count, mean absolute difference and the pairs
    whose scores differ by more than ``threshold``.
    """
    print(f"Querying database at {db_path}...")
    session = get_session(db_path)
    try:
        candidates = []
        for row in session.query(Candidate).all():
            try:
                candidates.append(CandidateProfile.from_record(row.to_record()))
            except ValidationError as e:
                print(f"⚠️  Skipping candidate {row.id}: {e}")
        jobs = []
        for row in session.query(Job).filter(Job.status == "active").all():
            try:
                jobs.append(JobPosting.from_record(row.to_record()))
            except ValidationError as e:
                print(f"⚠️  Skipping job {row.id}: {e}")
    finally:
        session.close()

    print(f"  Candidates: {len(candidates)}")
    print(f"  Active jobs: {len(jobs)}")

    diffs = []
    total_delta = 0
    for candidate in candidates:
        for job in jobs:
            unified = compute_score(candidate, job)
            legacy = legacy_score(candidate, job)
            delta = abs(unified - legacy)
            total_delta += delta
            if delta > threshold:
                diffs.append((delta, candidate.id, job.id, unified, legacy))

    pairs = len(candidates) * len(jobs)
    mean = round(total_delta / pairs, 2) if pairs else 0.0
    diffs.sort(reverse=True)

    print(f"\nPairs scored: {pairs}")
    print(f"Mean |unified - legacy|: {mean}")
    print(f"Pairs differing by more than {threshold}: {len(diffs)}")
    for delta, cid, jid, unified, legacy in diffs[:show]:
        print(f"  candidate={cid} job={jid} unified={unified} legacy={legacy} (Δ{delta})")

    return {"pairs": pairs, "mean_delta": mean, "divergent": diffs}


def main():
    parser = argparse.ArgumentParser(description="Compare unified and legacy match weightings")
    parser.add_argument("--db", type=Path, default=Path("data/talentmatch.db"),
                       help="Path to SQLite database file")
    parser.add_argument("--threshold", type=int, default=15,
                       help="Report pairs whose scores differ by more than this")
    parser.add_argument("--show", type=int, default=10,
                       help="How many divergent pairs to print")

    args = parser.parse_args()

    if not args.db.exists():
        print(f"❌ Database not found: {args.db}")
        sys.exit(1)

    result = compare(args.db, threshold=args.threshold, show=args.show)
    sys.exit(0 if result["pairs"] else 1)


if __name__ == "__main__":
    main()
