import logging

from pydantic import ValidationError

from app.core import prompts
from app.core.exceptions import AIResponseParseError
from app.schemas.analysis import ResumeProfile

logger = logging.getLogger(__name__)


def extract_entities(llm, resume_text: str) -> ResumeProfile:
    """
    Ask the model for a structured profile of the resume.
    Any gateway or parse failure propagates: the analysis attempt is over.
    """
    logger.info("Performing NLP entity extraction...")
    user_content = prompts.get_prompt(
        prompts.ENTITY_EXTRACTION_USER_TEMPLATE, resume_text=resume_text
    )
    data = llm.chat_json(prompts.ENTITY_EXTRACTION_SYSTEM, user_content, temperature=0.1)

    if not isinstance(data, dict):
        raise AIResponseParseError("Entity extraction did not return a JSON object.")

    try:
        profile = ResumeProfile.model_validate(_drop_nulls(data))
    except ValidationError as e:
        logger.error(f"Entity extraction returned an unusable shape: {e}")
        raise AIResponseParseError("Failed to parse entity extraction results.")

    logger.info(f"NLP extraction successful: {len(profile.all_skills())} skills")
    return profile


def _drop_nulls(data: dict) -> dict:
    """The model answers null for sections it found nothing for; treat as absent."""
    cleaned = {k: v for k, v in data.items() if v is not None}
    skills = cleaned.get("skills")
    if isinstance(skills, dict):
        cleaned["skills"] = {k: v for k, v in skills.items() if isinstance(v, list)}
    elif skills is not None:
        cleaned.pop("skills")
    for key in ("experience", "education", "projects", "languages", "rawSkillsList"):
        if key in cleaned and not isinstance(cleaned[key], list):
            cleaned[key] = [cleaned[key]]
    if not isinstance(cleaned.get("personalInfo", {}), dict):
        cleaned.pop("personalInfo")
    if not isinstance(cleaned.get("professionalSummary", ""), str):
        cleaned["professionalSummary"] = str(cleaned["professionalSummary"])
    return cleaned
