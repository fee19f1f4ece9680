"""
Centralized AI Prompt Repository
- Keeps every model instruction in one place
- Decouples prompts from pipeline logic
"""

# --- TEXT EXTRACTION ---
RESUME_TRANSCRIBE_SYSTEM = (
    "You are a document transcription engine. Transcribe every piece of readable text "
    "in the attached resume verbatim, preserving section order. Do not summarize, "
    "do not comment, return ONLY the transcribed text."
)

RESUME_TRANSCRIBE_USER = "Transcribe the attached resume file '{file_name}'."

# --- ENTITY EXTRACTION ---
ENTITY_EXTRACTION_SYSTEM = (
    "You are an expert NLP system for resume parsing. "
    "Extract all entities accurately. Return only valid JSON."
)

ENTITY_EXTRACTION_USER_TEMPLATE = """Perform NLP entity extraction on this resume text. Extract structured information with high accuracy.

RESUME TEXT:
{resume_text}

Extract and return JSON with these entities:
{{
  "personalInfo": {{
    "name": "full name if found",
    "email": "email address",
    "phone": "phone number",
    "location": "city, state/country",
    "linkedin": "linkedin url",
    "github": "github url",
    "portfolio": "portfolio/website url"
  }},
  "professionalSummary": "brief career summary if present",
  "skills": {{
    "technical": ["programming languages, frameworks, databases, etc."],
    "tools": ["software tools, IDEs, platforms"],
    "softSkills": ["communication, leadership, etc."],
    "certifications": ["AWS, Google, Microsoft certifications, etc."]
  }},
  "experience": [
    {{
      "title": "job title",
      "company": "company name",
      "location": "job location",
      "startDate": "start date",
      "endDate": "end date or Present",
      "responsibilities": ["key responsibilities/achievements"],
      "technologies": ["technologies used in this role"]
    }}
  ],
  "education": [
    {{
      "degree": "degree type and field",
      "institution": "school/university name",
      "graduationDate": "graduation year",
      "gpa": "GPA if mentioned",
      "achievements": ["honors, relevant coursework"]
    }}
  ],
  "projects": [
    {{
      "name": "project name",
      "description": "what the project does",
      "technologies": ["tech stack used"],
      "url": "project URL if available"
    }}
  ],
  "languages": ["spoken languages with proficiency"],
  "rawSkillsList": ["ALL skills mentioned in any form - exhaustive list"]
}}

Be thorough - extract EVERY skill, technology, and qualification mentioned. Include abbreviations and full forms."""

# --- SCORING / ADVICE ---
RESUME_SCORING_SYSTEM = (
    "You are an expert career coach and resume analyzer. Provide honest, helpful feedback "
    "based on actual resume content. Return only valid JSON."
)

RESUME_SCORING_USER_TEMPLATE = """Analyze this resume data and provide career guidance:

EXTRACTED NLP DATA:
{profile_json}

RAW RESUME TEXT (for additional context):
{resume_excerpt}

Provide JSON response:
{{
  "atsScore": number (0-100, based on formatting, keywords, completeness),
  "strengths": ["3-5 resume strengths based on actual content"],
  "weaknesses": ["3-5 areas for improvement"],
  "missingKeywords": ["important keywords missing for their target roles"],
  "improvementTips": ["5 specific, actionable tips"],
  "skillGaps": [
    {{
      "skillName": "missing but important skill",
      "category": "technical|soft_skills|tools_frameworks",
      "importance": "high|medium|low",
      "learningResources": ["url1", "url2"]
    }}
  ],
  "interviewQuestions": [
    {{
      "jobRole": "role this applies to",
      "question": "interview question",
      "category": "technical|hr|coding_scenario",
      "difficulty": "beginner|intermediate|advanced",
      "suggestedAnswer": "approach to answer"
    }}
  ]
}}"""

# --- JOB MATCHING ---
JOB_ENHANCE_SYSTEM = (
    "You are a job matching expert. Enhance job listings with accurate skill matching. "
    "Return only valid JSON array."
)

JOB_ENHANCE_USER_TEMPLATE = """Given these job search results and the candidate's skills, enhance and structure the job recommendations:

CANDIDATE SKILLS: {skills}

RAW JOB RESULTS:
{jobs_json}

Return a JSON array with enhanced job recommendations. For each job:
1. Clean up the job title
2. Extract or estimate the company name
3. Calculate an accurate match percentage based on skill overlap
4. Identify which candidate skills match the job
5. Identify required skills the candidate is missing
6. Provide a detailed job description covering responsibilities, requirements, and benefits
7. Estimate a salary range in the local currency of {country}
8. Keep the location of the original listing

Return format:
[
  {{
    "jobTitle": "clean job title",
    "companyType": "startup/enterprise/agency/tech company",
    "companyName": "company name if known",
    "location": "City, Country",
    "matchPercentage": number (0-100),
    "matchedSkills": ["skill1", "skill2"],
    "requiredSkills": ["missing skill1"],
    "jobDescription": "detailed job description",
    "salaryRange": "salary range per annum",
    "applyUrl": "job url"
  }}
]"""


# helper to build prompts
def get_prompt(template: str, **kwargs) -> str:
    return template.format(**kwargs)
