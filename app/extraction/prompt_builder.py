"""Prompt construction for batch CV extraction."""
from typing import Sequence

CV_SEPARATOR = "---CV---"

CV_SCHEMA = """{
  "name": "Full name (e.g., Juan David Barrera Fernandez)",
  "email": "Email address",
  "date_of_birth": "YYYY-MM-DD or empty if unknown",
  "phone": "Phone number",
  "occupation": "Current or main profession",
  "summary": "Detailed professional summary",
  "experience": [
    { "company": "", "position": "", "description": "", "years": "YYYY-YYYY" }
  ],
  "skills": ["Skill1", "Skill2"],
  "languages": [{ "language": "", "level": "" }],
  "education": [{ "degree": "", "institution": "", "years": "YYYY-YYYY" }],
  "references": [{ "name": "", "occupation": "", "phone": "" }],
  "general_experience": 0,
  "status": "approved | rejected",
  "ai_reason": "Reason why approved or rejected"
}"""

CV_EXAMPLE = """[
  {
    "name": "Juan Guillermo Barrera Fernandez",
    "email": "juan.barrera@gmail.com",
    "date_of_birth": "1990-05-14",
    "phone": "+57 3001234567",
    "occupation": "Software Engineer",
    "summary": "Software engineer with 8+ years of experience in full-stack web development...",
    "experience": [
      { "company": "Tech Solutions", "position": "Backend Developer", "description": "Developed APIs with Node.js", "years": "2015-2018" },
      { "company": "GlobalSoft", "position": "Senior Engineer", "description": "Led a team of 5 developers", "years": "2018-2023" }
    ],
    "skills": ["Node.js", "React", "SQL", "AWS"],
    "languages": [{ "language": "Spanish", "level": "Native" }, { "language": "English", "level": "Advanced" }],
    "education": [{ "degree": "BSc Computer Science", "institution": "Universidad de Medellin", "years": "2008-2012" }],
    "references": [{ "name": "Carlos Perez", "occupation": "CTO", "phone": "+57 3109876543" }],
    "general_experience": 8,
    "status": "approved",
    "ai_reason": "The candidate has over 8 years of experience in full-stack development and matches the vacancy requirements."
  }
]"""


def build_cv_extraction_prompt(
    cv_texts: Sequence[str],
    vacancy_title: str,
    vacancy_filter: str,
) -> str:
    """
    Build the single extraction prompt for one batch of CVs.

    Args:
        cv_texts: Cleaned CV texts of the batch, in upload order
        vacancy_title: Title of the vacancy the CVs are screened against
        vacancy_filter: Free-text list of desired skills / keywords

    Returns:
        Prompt text; identical inputs always give an identical prompt
    """
    vacancy_title = (vacancy_title or "").strip() or "the vacancy"
    vacancy_filter = (vacancy_filter or "").strip() or "the skills the vacancy requires"

    cvs_block = "\n".join(f"{CV_SEPARATOR}\n{text}" for text in cv_texts)

    return (
        "You are an assistant that extracts structured data from resumes.\n"
        f"Each CV is separated by {CV_SEPARATOR}.\n\n"
        "OUTPUT CONTRACT:\n"
        "Return ONLY a valid JSON array of objects, no text outside JSON.\n"
        "No explanations. No markdown.\n\n"
        "Schema for each candidate:\n"
        f"{CV_SCHEMA}\n\n"
        "Rules:\n"
        "- Always return an array, even if there is only one CV.\n"
        "- If the array has to be wrapped in an object, use the single key \"candidates\".\n"
        "- Return exactly one object per CV, in the same order as the CVs.\n"
        "- If years of experience are not explicit, estimate them based on the text.\n"
        "- general_experience = sum of the year spans of all experience entries (an integer).\n"
        f"- status = \"approved\" if the candidate meets the vacancy requirements ({vacancy_title}) "
        f"and has knowledge in {vacancy_filter}, else \"rejected\".\n"
        "- ai_reason must justify the status clearly in 1-2 sentences.\n\n"
        "Example of the expected output (don't use this data, it's just an example):\n"
        f"{CV_EXAMPLE}\n\n"
        "CVs:\n"
        f"{cvs_block}\n"
    )
