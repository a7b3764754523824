"""Prompt text sent to the AI completion endpoint."""

import json
from typing import Optional

from .schema import CandidateProfile, JobPosting, SalaryExpectation

# Job descriptions are cut to this many characters before being sent.
DESCRIPTION_LIMIT = 500

NOT_SPECIFIED = "Not specified"

JOB_MATCH_SYSTEM_PROMPT = """You are an expert career advisor and job matching specialist. Analyze how well a job matches a candidate's profile and provide personalized insights.

Focus on:
1. Skills alignment and gaps
2. Career growth potential
3. Cultural fit
4. Salary expectations
5. Location and work preferences
6. Specific recommendations for the candidate

Provide a match score (0-100) and detailed reasoning."""

CANDIDATE_MATCH_SYSTEM_PROMPT = """You are an expert recruiter and talent acquisition specialist. Analyze how well a candidate matches a job position and provide hiring insights.

Focus on:
1. Skills alignment and gaps
2. Experience relevance and depth
3. Cultural fit and team compatibility
4. Growth potential and career trajectory
5. Salary expectations alignment
6. Location and work preferences
7. Specific hiring recommendations

Provide a match score (0-100) and detailed reasoning."""


def _join(values) -> str:
    return ", ".join(values) if values else NOT_SPECIFIED


def _salary(salary: Optional[SalaryExpectation]) -> str:
    if salary is None:
        return NOT_SPECIFIED
    return json.dumps({"min": salary.min, "max": salary.max})


def _years(years: Optional[float]) -> str:
    if years is None:
        return "0"
    return f"{years:g}"


def truncate_description(description: Optional[str], limit: int = DESCRIPTION_LIMIT) -> str:
    if not description:
        return ""
    return description[:limit]


def build_match_context(
    candidate: CandidateProfile,
    job: JobPosting,
    ai_prompt: Optional[str] = None,
    perspective: str = "candidate",
) -> str:
    """Serialize a candidate/job pair into the user message for match analysis."""
    lines = [
        "Candidate Profile:",
        f"- Name: {candidate.full_name or 'Unknown'}",
        f"- Headline: {candidate.headline or NOT_SPECIFIED}",
        f"- Experience: {_years(candidate.experience_years)} years",
        f"- Skills: {_join(candidate.skills)}",
        f"- Location: {candidate.current_location or NOT_SPECIFIED}",
    ]
    if perspective == "employer":
        lines.append(f"- Summary: {candidate.summary or NOT_SPECIFIED}")
    else:
        lines.append(f"- Preferred Job Types: {_join(candidate.preferred_job_types)}")
    lines.append(f"- Target Salary: {_salary(candidate.target_salary_range)}")

    lines += [
        "",
        "Job Requirements:" if perspective == "employer" else "Job Details:",
        f"- Title: {job.title}",
        f"- Company: {job.company_name or 'Unknown'}",
        f"- Location: {job.location or NOT_SPECIFIED}",
        f"- Type: {job.job_type or NOT_SPECIFIED}",
        f"- Experience Required: {job.experience_level or NOT_SPECIFIED}",
        f"- Skills Required: {_join(job.skills_required)}",
        f"- Description: {truncate_description(job.description)}...",
    ]
    if ai_prompt:
        lines += ["", f"Additional Context: {ai_prompt}"]
    return "\n".join(lines)


def match_system_prompt(perspective: str = "candidate") -> str:
    if perspective == "employer":
        return CANDIDATE_MATCH_SYSTEM_PROMPT
    return JOB_MATCH_SYSTEM_PROMPT


def evaluation_system_prompt(job: JobPosting, evaluation_type: str = "overall") -> str:
    return f"""You are an expert recruiter and hiring manager. Evaluate candidates for specific job positions with detailed analysis.

Job Context:
- Position: {job.title}
- Company: {job.company_name or 'Unknown'}
- Requirements: {job.requirements or NOT_SPECIFIED}
- Skills Needed: {_join(job.skills_required)}

Evaluation Type: {evaluation_type}

Provide:
1. Detailed skills and experience analysis
2. Cultural fit assessment
3. Growth potential evaluation
4. Specific strengths and concerns
5. Interview recommendations
6. Overall hiring recommendation
7. Salary negotiation insights

Be specific, objective, and actionable in your analysis."""


def build_evaluation_context(candidate: CandidateProfile, job: JobPosting) -> str:
    return "\n".join([
        "Candidate Profile:",
        f"- Name: {candidate.full_name or 'Unknown'}",
        f"- Headline: {candidate.headline or NOT_SPECIFIED}",
        f"- Experience: {_years(candidate.experience_years)} years",
        f"- Skills: {_join(candidate.skills)}",
        f"- Summary: {candidate.summary or NOT_SPECIFIED}",
        f"- Location: {candidate.current_location or NOT_SPECIFIED}",
        "",
        "Job Requirements:",
        f"- Title: {job.title}",
        f"- Company: {job.company_name or 'Unknown'}",
        f"- Experience Required: {job.experience_level or NOT_SPECIFIED}",
        f"- Skills Required: {_join(job.skills_required)}",
        f"- Description: {truncate_description(job.description)}...",
    ])


def interview_preparation_system_prompt(candidate: CandidateProfile, job: JobPosting, interview_type: str = "general") -> str:
    return f"""You are an expert interview coach. Prepare candidates for job interviews with specific, actionable guidance.

Job Context:
- Position: {job.title}
- Company: {job.company_name or 'Unknown'}
- Requirements: {job.requirements or NOT_SPECIFIED}
- Skills Needed: {_join(job.skills_required)}

Candidate Context:
- Experience: {_years(candidate.experience_years)} years
- Skills: {_join(candidate.skills)}
- Background: {candidate.summary or NOT_SPECIFIED}

Interview Type: {interview_type}

Provide:
1. Specific questions they might ask
2. How to answer using their experience
3. Questions to ask the interviewer
4. Company research points
5. Technical preparation (if applicable)
6. Behavioral examples to prepare
7. Follow-up strategies

Make it specific to their background and the job requirements."""


def interview_preparation_request(job: JobPosting, interview_type: str = "general") -> str:
    return f"Prepare me for a {interview_type} interview for the {job.title} position at {job.company_name or 'Unknown'}."


INTERVIEWER_SYSTEM_PROMPT = """You are an expert interviewer and hiring manager. Prepare comprehensive interview guidance for evaluating a candidate.

Focus on:
1. Specific questions to ask based on their background
2. Skills assessment techniques
3. Behavioral interview questions
4. Technical evaluation methods
5. Cultural fit assessment
6. Red flags to watch for
7. Follow-up questions and probing techniques

Make it specific to the candidate's profile and job requirements."""


def build_interviewer_context(candidate: CandidateProfile, job: JobPosting, interview_type: str = "general") -> str:
    return "\n".join([
        f"Candidate: {candidate.full_name or 'Unknown'}",
        f"Experience: {_years(candidate.experience_years)} years",
        f"Skills: {_join(candidate.skills)}",
        f"Background: {candidate.summary or NOT_SPECIFIED}",
        "",
        f"Job: {job.title}",
        f"Company: {job.company_name or 'Unknown'}",
        f"Requirements: {job.requirements or NOT_SPECIFIED}",
        f"Skills Needed: {_join(job.skills_required)}",
        "",
        f"Interview Type: {interview_type}",
    ])


MARKET_INSIGHTS_SYSTEM_PROMPT = """You are an expert talent acquisition and market research specialist. Provide comprehensive market insights for hiring.

Focus on:
1. Current market demand and trends
2. Salary ranges and compensation benchmarks
3. Required skills and qualifications
4. Candidate availability and competition
5. Hiring timeline expectations
6. Best practices for attracting top talent
7. Industry-specific insights

Provide specific, actionable data and recommendations."""


def build_market_context(job_title: str, location: Optional[str] = None, industry: Optional[str] = None) -> str:
    return "\n".join([
        f"Job Title: {job_title}",
        f"Location: {location or NOT_SPECIFIED}",
        f"Industry: {industry or NOT_SPECIFIED}",
    ])


def resume_analysis_system_prompt(job: JobPosting) -> str:
    return f"""You are an expert recruiter and hiring manager. Analyze this resume for a specific job position and provide hiring recommendations.

Job Context:
- Title: {job.title}
- Company: {job.company_name or 'Unknown'}
- Requirements: {job.requirements or NOT_SPECIFIED}
- Skills Required: {_join(job.skills_required)}

Analyze:
1. Skills alignment with job requirements
2. Experience relevance and depth
3. Career progression and growth potential
4. Cultural fit indicators
5. Red flags or concerns
6. Interview focus areas
7. Overall hiring recommendation

Provide specific, actionable insights for the hiring decision."""


def build_resume_context(job: JobPosting, resume_text: str) -> str:
    return f"Please analyze this resume for the {job.title} position:\n\n{resume_text}"
