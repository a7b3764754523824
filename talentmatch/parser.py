"""
Best-effort extraction of structured fields from free-text LLM replies.

This is a heuristic text-mining layer, not a grammar. Every extractor has
a documented default and none of them raise: a reply that matches no
pattern still yields a complete result built from the defaults below.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

# Score used when a reply carries no "score: N" marker (0-1 scale).
DEFAULT_SCORE = 0.70
# Overall evaluation score used when a reply carries no "score/rating: N" marker (0-100 scale).
DEFAULT_OVERALL_SCORE = 75

DEFAULT_JOB_RECOMMENDATION = "Consider this opportunity based on your career goals."
DEFAULT_CANDIDATE_RECOMMENDATION = "Consider this candidate based on their qualifications."

DEFAULT_SALARY_RANGE = "Not specified"
DEFAULT_LEVEL = "medium"
DEFAULT_HIRING_DECISION = "consider"
DEFAULT_SKILLS_MATCH = "75%"

SCORE_PATTERN = re.compile(r"(?:match score|score):?\s*(\d+)", re.IGNORECASE)
OVERALL_SCORE_PATTERN = re.compile(r"(?:score|rating):?\s*(\d+)", re.IGNORECASE)
BULLET_PATTERN = re.compile(r"^(?:[-•]\s|\d+\.\s)")

# The "first match on the same line" patterns below never cross a newline.
SALARY_RANGE_PATTERN = re.compile(r"(?:salary|compensation).*?(\$[\d,]+(?:-\$[\d,]+)?)", re.IGNORECASE)
COMPETITION_PATTERN = re.compile(r"(?:competition|competitive).*?\b(high|medium|low)\b", re.IGNORECASE)
RELEVANCE_PATTERN = re.compile(r"(?:experience|relevant).*?\b(high|medium|low)\b", re.IGNORECASE)
HIRING_DECISION_PATTERN = re.compile(r"(?:recommend|suggest).*?\b(hire|consider|pass)\b", re.IGNORECASE)
SKILLS_MATCH_PATTERN = re.compile(r"(?:skills match|match).*?(\d+%)", re.IGNORECASE)

INSIGHT_ANCHORS = ("insights?", "analysis")
RECOMMENDATION_ANCHORS = ("recommendation", "suggestion")


@dataclass(frozen=True)
class ListRule:
    """Which lines of a reply belong to a list.

    A line is taken when it is a bullet or numbered item (if ``bullets``)
    or contains one of ``keywords`` (case-insensitive). When ``requires``
    is set, the line must also contain every one of those tokens.
    """

    keywords: Tuple[str, ...] = ()
    bullets: bool = False
    requires: Tuple[str, ...] = ()
    limit: int = 3

    def accepts(self, line: str) -> bool:
        lowered = line.lower()
        hit = (self.bullets and BULLET_PATTERN.match(line) is not None) or any(
            k in lowered for k in self.keywords
        )
        if not hit:
            return False
        return all(token in line for token in self.requires)


LIST_RULES: Dict[str, ListRule] = {
    "job_strengths": ListRule(keywords=("strength", "good fit"), limit=3),
    "candidate_strengths": ListRule(keywords=("strength", "strong"), limit=5),
    "job_concerns": ListRule(keywords=("concern", "consider"), limit=3),
    "candidate_concerns": ListRule(keywords=("concern", "weakness"), limit=3),
    "action_items": ListRule(bullets=True, limit=3),
    "tips": ListRule(bullets=True, limit=5),
    "recommendations": ListRule(keywords=("recommend", "suggest"), limit=3),
    "interview_questions": ListRule(keywords=("ask", "question"), requires=("?",), limit=5),
    "likely_questions": ListRule(keywords=("might ask", "likely to ask"), requires=("?",), limit=5),
    "follow_up_questions": ListRule(keywords=("follow",), requires=("?",), limit=3),
    "company_research": ListRule(keywords=("research", "company"), limit=3),
    "red_flags": ListRule(keywords=("red flag", "concern"), limit=3),
    "interview_red_flags": ListRule(keywords=("red flag", "watch"), limit=3),
    "interview_focus": ListRule(keywords=("focus", "interview"), limit=3),
    "resume_strengths": ListRule(keywords=("strength", "strong"), limit=3),
    "skills_in_demand": ListRule(keywords=("skill",), requires=(",",), limit=3),
    "market_trends": ListRule(keywords=("trend", "market"), limit=3),
}


@dataclass(frozen=True)
class MatchAnalysis:
    score: float
    insights: str
    recommendation: str
    strengths: Tuple[str, ...]
    concerns: Tuple[str, ...]
    action_items: Tuple[str, ...]


def extract_score(text: Optional[str], default: float = DEFAULT_SCORE) -> float:
    """Return the first "score: N" in the reply on a 0-1 scale."""
    match = SCORE_PATTERN.search(text or "")
    if not match:
        return default
    return int(match.group(1)) / 100


def extract_overall_score(text: Optional[str], default: int = DEFAULT_OVERALL_SCORE) -> int:
    """Return the first "score: N" or "rating: N" as an integer."""
    match = OVERALL_SCORE_PATTERN.search(text or "")
    if not match:
        return default
    return int(match.group(1))


def _section_pattern(anchors: Iterable[str]):
    # Anchors are case-insensitive; the section ends at a blank line or at
    # the next line that starts with a capital letter.
    joined = "|".join(anchors)
    return re.compile(r"(?i:" + joined + r"):?\s*([\s\S]*?)(?:\n\n|\n[A-Z]|\Z)")


def extract_section(text: Optional[str], anchors: Iterable[str], default: str) -> str:
    """Capture the text following the first anchor word, or ``default``."""
    match = _section_pattern(anchors).search(text or "")
    if not match:
        return default
    captured = match.group(1).strip()
    return captured or default


def extract_list(text: Optional[str], rule: ListRule) -> List[str]:
    items: List[str] = []
    for line in (text or "").split("\n"):
        if rule.accepts(line):
            items.append(line.strip())
            if len(items) >= rule.limit:
                break
    return items


def parse_match_analysis(text: Optional[str], perspective: str = "candidate") -> MatchAnalysis:
    """Turn a match-analysis reply into a MatchAnalysis.

    For the "candidate" perspective the reply discusses a job for a seeker;
    for "employer" it discusses a candidate for a recruiter. The two differ
    only in which keywords mark strengths and concerns and in the default
    recommendation.
    """
    text = text or ""
    if perspective == "employer":
        strengths_rule = LIST_RULES["candidate_strengths"]
        concerns_rule = LIST_RULES["candidate_concerns"]
        default_recommendation = DEFAULT_CANDIDATE_RECOMMENDATION
    else:
        strengths_rule = LIST_RULES["job_strengths"]
        concerns_rule = LIST_RULES["job_concerns"]
        default_recommendation = DEFAULT_JOB_RECOMMENDATION

    return MatchAnalysis(
        score=extract_score(text),
        insights=extract_section(text, INSIGHT_ANCHORS, default=text),
        recommendation=extract_section(text, RECOMMENDATION_ANCHORS, default=default_recommendation),
        strengths=tuple(extract_list(text, strengths_rule)),
        concerns=tuple(extract_list(text, concerns_rule)),
        action_items=tuple(extract_list(text, LIST_RULES["action_items"])),
    )


def parse_candidate_evaluation(text: Optional[str]) -> Dict[str, object]:
    """Structure a recruiter-facing candidate evaluation reply."""
    text = text or ""
    return {
        "evaluation": text,
        "strengths": extract_list(text, LIST_RULES["candidate_strengths"]),
        "concerns": extract_list(text, LIST_RULES["candidate_concerns"]),
        "recommendations": extract_list(text, LIST_RULES["recommendations"]),
        "interview_questions": extract_list(text, LIST_RULES["interview_questions"]),
        "overall_score": extract_overall_score(text),
    }


def extract_first(text: Optional[str], pattern, default: str) -> str:
    """Return the first capture group of ``pattern`` in the reply, or ``default``."""
    match = pattern.search(text or "")
    if not match:
        return default
    return match.group(1)


def parse_interview_preparation(text: Optional[str]) -> Dict[str, object]:
    """Structure a candidate-facing interview coaching reply."""
    text = text or ""
    return {
        "preparation": text,
        "questions": extract_list(text, LIST_RULES["likely_questions"]),
        "tips": extract_list(text, LIST_RULES["tips"]),
        "research": extract_list(text, LIST_RULES["company_research"]),
    }


def parse_employer_interview_guide(text: Optional[str]) -> Dict[str, object]:
    """Structure an interviewer guide: what to ask, how to assess, what to watch for."""
    text = text or ""
    return {
        "preparation": text,
        "questions": extract_list(text, LIST_RULES["interview_questions"]),
        "assessment_methods": extract_list(text, LIST_RULES["tips"]),
        "red_flags": extract_list(text, LIST_RULES["interview_red_flags"]),
        "follow_up_questions": extract_list(text, LIST_RULES["follow_up_questions"]),
    }


def parse_market_insights(text: Optional[str]) -> Dict[str, object]:
    text = text or ""
    return {
        "insights": text,
        "salary_range": extract_first(text, SALARY_RANGE_PATTERN, DEFAULT_SALARY_RANGE),
        "skills_in_demand": extract_list(text, LIST_RULES["skills_in_demand"]),
        "market_trends": extract_list(text, LIST_RULES["market_trends"]),
        "hiring_tips": extract_list(text, LIST_RULES["tips"]),
        "competition_level": extract_first(text, COMPETITION_PATTERN, DEFAULT_LEVEL).lower(),
    }


def parse_resume_analysis(text: Optional[str]) -> Dict[str, object]:
    """Structure a recruiter's read of a resume against one job."""
    text = text or ""
    return {
        "analysis": text,
        "skills_match": extract_first(text, SKILLS_MATCH_PATTERN, DEFAULT_SKILLS_MATCH),
        "experience_relevance": extract_first(text, RELEVANCE_PATTERN, DEFAULT_LEVEL).lower(),
        "hiring_recommendation": extract_first(text, HIRING_DECISION_PATTERN, DEFAULT_HIRING_DECISION).lower(),
        "interview_focus": extract_list(text, LIST_RULES["interview_focus"]),
        "red_flags": extract_list(text, LIST_RULES["red_flags"]),
        "strengths": extract_list(text, LIST_RULES["resume_strengths"]),
        "overall_score": extract_overall_score(text),
    }
