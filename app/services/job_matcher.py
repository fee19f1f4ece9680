"""
Job matching: scrape listings for the candidate's skills, score them by skill
overlap, and optionally let the LLM re-rank and re-describe them.

The overlap score is the seed: it decides which ten listings survive
deduplication. When the LLM pass succeeds its percentages replace the seed
(clamped); when it fails the seeded listings are used as they are.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core import prompts
from app.core.config import settings
from app.core.exceptions import ScraperError
from app.models.job_recommendation import JobRecommendation
from app.schemas.analysis import JobListing
from app.services.coercion import as_list, clamp_percentage, coerce_text, coerce_text_list, first_present

logger = logging.getLogger(__name__)

MAX_RESULTS = 10
MAX_DESCRIPTION_LENGTH = 2000
MAX_MATCHED_SKILLS = 5
MATCH_OFFSET = 40
MATCH_CEILING = 95

JOB_BOARD_FILTER = "site:linkedin.com/jobs OR site:indeed.co.in OR site:naukri.com OR site:glassdoor.co.in"

COMPANY_URL_PATTERNS = (
    re.compile(r"linkedin\.com/company/([^/?]+)", re.IGNORECASE),
    re.compile(r"indeed\.co\.in/cmp/([^/?]+)", re.IGNORECASE),
    re.compile(r"naukri\.com/([^/?]+)-jobs", re.IGNORECASE),
)

INDIAN_CITIES = (
    "Bangalore", "Bengaluru", "Mumbai", "Delhi", "NCR", "Gurgaon", "Gurugram",
    "Hyderabad", "Chennai", "Pune", "Kolkata", "Noida", "Ahmedabad", "Jaipur",
    "Kochi", "Thiruvananthapuram", "Coimbatore", "Indore", "Chandigarh",
)


def build_search_queries(skills: List[str]) -> List[str]:
    top_skills = " ".join(skills[:5])
    return [
        f"{top_skills} jobs India Bangalore Mumbai Delhi",
        f"{skills[0]} developer jobs India",
        f"{' '.join(skills[:3])} engineer India remote",
        f"{top_skills} jobs Hyderabad Chennai Pune",
    ]


def extract_company(text: str) -> str:
    for pattern in COMPANY_URL_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return match.group(1).replace("-", " ")
    return "Tech Company"


def extract_location(text: str) -> str:
    lower = (text or "").lower()
    for city in INDIAN_CITIES:
        if city.lower() in lower:
            return f"{city}, India"
    if "remote" in lower and "india" in lower:
        return "Remote, India"
    if "india" in lower:
        return "India"
    return "India (Remote/Hybrid)"


def skill_overlap(skills: List[str], text: str) -> List[str]:
    lower = (text or "").lower()
    return [skill for skill in skills if skill.lower() in lower]


def overlap_percentage(matched: int, total: int) -> int:
    """Skill-overlap ratio scaled to 0-100, offset by 40 and capped at 95."""
    if total <= 0:
        return 0
    return clamp_percentage(min(MATCH_CEILING, round(matched / total * 100) + MATCH_OFFSET))


def listing_from_result(result: Dict[str, Any], skills: List[str]) -> JobListing:
    body = result.get("markdown") or result.get("description") or ""
    url = result.get("url") or ""
    matched = skill_overlap(skills, body)
    company = extract_company(url or result.get("title") or "")
    return JobListing(
        job_title=result.get("title") or "Job Opening",
        company=company,
        company_type=company,
        location=extract_location(body),
        job_description=body[:MAX_DESCRIPTION_LENGTH],
        apply_url=url,
        matched_skills=matched[:MAX_MATCHED_SKILLS],
        match_percentage=overlap_percentage(len(matched), len(skills)),
    )


def dedupe_listings(listings: List[JobListing]) -> List[JobListing]:
    """Drop repeats of the same lowercase title+company; first one wins."""
    seen = set()
    unique = []
    for listing in listings:
        key = f"{listing.job_title.lower()}-{listing.company.lower()}"
        if key in seen:
            continue
        seen.add(key)
        unique.append(listing)
    return unique


def rank_listings(listings: List[JobListing], limit: int = MAX_RESULTS) -> List[JobListing]:
    return sorted(dedupe_listings(listings), key=lambda j: j.match_percentage, reverse=True)[:limit]


def listing_from_enhanced(item: Dict[str, Any], fallback: Optional[JobListing]) -> JobListing:
    company = coerce_text(first_present(item, "companyName", "company")) or (fallback.company if fallback else "Tech Company")
    return JobListing(
        job_title=coerce_text(first_present(item, "jobTitle", "title")) or (fallback.job_title if fallback else "Unknown Position"),
        company=company,
        company_type=coerce_text(first_present(item, "companyType", "companyName")) or "Company",
        location=coerce_text(item.get("location")) or (fallback.location if fallback else ""),
        job_description=coerce_text(first_present(item, "jobDescription", "description")) or (fallback.job_description if fallback else ""),
        apply_url=coerce_text(first_present(item, "applyUrl", "url")) or (fallback.apply_url if fallback else ""),
        salary_range=coerce_text(item.get("salaryRange")) or "Competitive",
        matched_skills=coerce_text_list(as_list(item.get("matchedSkills"))),
        required_skills=coerce_text_list(as_list(item.get("requiredSkills"))),
        match_percentage=clamp_percentage(
            item.get("matchPercentage"), fallback.match_percentage if fallback else 70
        ),
    )


class JobMatcher:
    def __init__(self, scraper, llm=None, enable_ai_enhancement: Optional[bool] = None):
        self.scraper = scraper
        self.llm = llm
        self.enable_ai_enhancement = (
            settings.scraper.enable_ai_enhancement if enable_ai_enhancement is None else enable_ai_enhancement
        )

    def search(self, skills: List[str]) -> List[JobListing]:
        """Run every query; a single failed query is skipped, all of them failing raises ScraperError."""
        queries = build_search_queries(skills)
        listings = []
        failures = 0
        for query in queries:
            try:
                logger.info(f"Searching: {query}")
                results = self.scraper.search(f"{query} {JOB_BOARD_FILTER}")
            except Exception as e:
                logger.error(f"Search error for query '{query}': {e}")
                failures += 1
                continue
            listings.extend(listing_from_result(r, skills) for r in results if isinstance(r, dict))
        if failures == len(queries):
            raise ScraperError("Job search is unavailable, every query failed")
        return listings

    def enhance(self, skills: List[str], listings: List[JobListing]) -> List[JobListing]:
        user_content = prompts.get_prompt(
            prompts.JOB_ENHANCE_USER_TEMPLATE,
            skills=", ".join(skills),
            jobs_json=json.dumps([j.model_dump() for j in listings], indent=2),
            country=settings.scraper.country,
        )
        data = self.llm.chat_json(prompts.JOB_ENHANCE_SYSTEM, user_content, temperature=0.3)
        if isinstance(data, dict):
            data = data.get("jobs") or data.get("recommendations") or []
        if not isinstance(data, list):
            raise ValueError("Job enhancement did not return a JSON array")

        enhanced = []
        for index, item in enumerate(data):
            if isinstance(item, dict):
                fallback = listings[index] if index < len(listings) else None
                enhanced.append(listing_from_enhanced(item, fallback))
        return rank_listings(enhanced)

    def find_jobs(self, skills: List[str]) -> List[JobListing]:
        skills = [s for s in (coerce_text(s).strip() for s in skills or []) if s]
        if not skills:
            raise ValueError("No skills provided for job search")

        logger.info(f"Searching for jobs with skills: {', '.join(skills[:5])}")
        ranked = rank_listings(self.search(skills))
        logger.info(f"Found unique jobs: {len(ranked)}")

        if ranked and self.enable_ai_enhancement and self.llm is not None:
            try:
                enhanced = self.enhance(skills, ranked)
                if enhanced:
                    return enhanced
            except Exception as e:
                logger.warning(f"Job enhancement failed, keeping heuristic ranking: {e}")
        return ranked


def replace_job_recommendations(
    db: Session, resume_id: str, user_id: str, listings: List[JobListing]
) -> List[JobRecommendation]:
    """
    Delete-then-insert. The two steps commit separately, so a crash between
    them leaves the resume with no job rows until the next refresh.
    """
    db.query(JobRecommendation).filter(
        JobRecommendation.resume_id == resume_id,
        JobRecommendation.user_id == user_id,
    ).delete(synchronize_session=False)
    db.commit()

    rows = [
        JobRecommendation(
            resume_id=resume_id,
            user_id=user_id,
            job_title=listing.job_title,
            company_type=listing.company_type or listing.company,
            location=listing.location,
            match_percentage=clamp_percentage(listing.match_percentage),
            matched_skills=listing.matched_skills,
            required_skills=listing.required_skills,
            job_description=listing.job_description,
            salary_range=listing.salary_range,
            apply_url=listing.apply_url,
        )
        for listing in listings
    ]
    db.add_all(rows)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Saved {len(rows)} job recommendations for resume {resume_id}")
    return rows


def refresh_recommendations(
    db: Session, matcher: JobMatcher, resume_id: str, user_id: str, skills: List[str]
) -> List[JobRecommendation]:
    """An empty search leaves the stored recommendations untouched."""
    listings = matcher.find_jobs(skills)
    if not listings:
        logger.info(f"No jobs found for resume {resume_id}, keeping existing recommendations")
        return (
            db.query(JobRecommendation)
            .filter(JobRecommendation.resume_id == resume_id, JobRecommendation.user_id == user_id)
            .order_by(JobRecommendation.match_percentage.desc())
            .all()
        )
    return replace_job_recommendations(db, resume_id, user_id, listings)
