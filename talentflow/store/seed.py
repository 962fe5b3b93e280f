"""
Preset data and the seeding step.

``ensure_seeded`` is called explicitly by the application startup (and by
the ``/api/seed`` route). Whether seeding is needed is decided from the
collection count, so calling it again is harmless.
"""

from typing import Any, Dict, List, Optional

from talentflow.common.logger import app_logger
from talentflow.store.base import ASSESSMENTS, Document, DocumentStore

logger = app_logger.getChild("store.seed")


def _single(qid: str, text: str, options: List[str], order: int) -> Dict[str, Any]:
    return {"id": qid, "type": "single-choice", "question": text, "required": True,
            "options": options, "order": order}


def _multi(qid: str, text: str, options: List[str], order: int) -> Dict[str, Any]:
    return {"id": qid, "type": "multi-choice", "question": text, "required": True,
            "options": options, "order": order}


def _text(qid: str, text: str, min_length: int, max_length: int, order: int,
          long: bool = False, required: bool = True) -> Dict[str, Any]:
    return {"id": qid, "type": "long-text" if long else "short-text", "question": text,
            "required": required, "validation": {"minLength": min_length, "maxLength": max_length},
            "order": order}


def _numeric(qid: str, text: str, minimum: int, maximum: int, order: int) -> Dict[str, Any]:
    return {"id": qid, "type": "numeric", "question": text, "required": True,
            "validation": {"min": minimum, "max": maximum}, "order": order}


def _assessment(index: int, job_id: str, title: str, description: str,
                sections: List[Dict[str, Any]], created: str) -> Document:
    return {
        "id": f"assessment-{index}",
        "jobId": job_id,
        "title": title,
        "description": description,
        "sections": sections,
        "isPublished": True,
        "shareableLink": f"take-assessment-{index}",
        "createdAt": created,
        "updatedAt": created,
    }


PRESET_ASSESSMENTS: List[Document] = [
    _assessment(1, "job-1", "Frontend Developer Technical Assessment",
                "Evaluation of frontend development skills including React, JavaScript, "
                "and modern web technologies.", [
        {"id": "section-1", "title": "React & JavaScript Fundamentals",
         "description": "Core concepts and best practices", "order": 0, "questions": [
            _single("q1", "What is the purpose of React hooks?", [
                "To add state and lifecycle methods to functional components",
                "To create class components",
                "To handle routing",
                "To manage CSS styles",
            ], 0),
            _multi("q2", "Which of the following are valid React lifecycle methods?",
                   ["componentDidMount", "componentWillUpdate", "useEffect", "componentDidUpdate"], 1),
            _text("q3", "Explain the difference between props and state in React.", 50, 500, 2),
        ]},
        {"id": "section-2", "title": "Advanced Frontend Concepts",
         "description": "Performance, testing, and modern tooling", "order": 1, "questions": [
            _multi("q6", "Which tools can be used for React testing?",
                   ["Jest", "React Testing Library", "Enzyme", "Cypress"], 0),
            _numeric("q9", "How many years of React experience do you have?", 0, 20, 1),
            _text("q10", "Describe your experience with state management libraries.",
                  50, 1000, 2, long=True, required=False),
        ]},
    ], "2024-01-30T00:00:00+00:00"),
    _assessment(2, "job-2", "Full Stack Developer Assessment",
                "Assessment covering frontend and backend development skills.", [
        {"id": "section-3", "title": "Backend Development",
         "description": "Server-side development and API design", "order": 0, "questions": [
            _single("q11", "Which HTTP method is typically used to update a resource?",
                    ["GET", "POST", "PUT", "DELETE"], 0),
            _text("q12", "Explain the difference between SQL and NoSQL databases.", 50, 300, 1),
            _text("q14", "Design a RESTful API for a blog application with posts and comments.",
                  200, 1500, 2, long=True),
        ]},
        {"id": "section-4", "title": "Database & DevOps",
         "description": "Database design and deployment practices", "order": 1, "questions": [
            _multi("q17", "Which are popular cloud platforms?",
                   ["AWS", "Google Cloud", "Azure", "DigitalOcean"], 0),
            _single("q18", "What is Docker primarily used for?", [
                "Containerization of applications",
                "Database management",
                "Frontend styling",
                "Version control",
            ], 1),
            _numeric("q20", "How many years of full-stack development experience do you have?", 0, 25, 2),
        ]},
    ], "2024-02-01T00:00:00+00:00"),
    _assessment(3, "job-3", "UX/UI Designer Assessment",
                "Evaluation of design skills, user experience principles, and design tool proficiency.", [
        {"id": "section-5", "title": "Design Principles & Theory",
         "description": "Fundamental design concepts and user experience", "order": 0, "questions": [
            _single("q21", "What is the primary goal of user-centered design?", [
                "To create designs that meet user needs and expectations",
                "To make designs look aesthetically pleasing",
                "To reduce development costs",
                "To follow current design trends",
            ], 0),
            _multi("q22", "Which are key principles of good UX design?",
                   ["Usability", "Accessibility", "Consistency", "Visual hierarchy"], 1),
            _text("q23", "Explain the difference between UX and UI design.", 100, 500, 2),
        ]},
        {"id": "section-6", "title": "Tools & Implementation",
         "description": "Design tools, prototyping, and collaboration", "order": 1, "questions": [
            _multi("q26", "Which design tools have you used professionally?",
                   ["Figma", "Sketch", "Adobe XD", "InVision"], 0),
            _text("q29", "Walk through your design process from initial brief to final handoff.",
                  300, 1500, 1, long=True),
            _numeric("q30", "How many years of UX/UI design experience do you have?", 0, 20, 2),
        ]},
    ], "2024-02-03T00:00:00+00:00"),
]


async def ensure_seeded(store: DocumentStore, force: bool = False,
                        documents: Optional[List[Document]] = None) -> bool:
    """
    Add the preset assessments when the collection is empty.

    Args:
        store: Target document store
        force: Clear the collection and seed regardless of its contents
        documents: Documents to seed instead of the presets

    Returns:
        True if documents were added

    Raises:
        PersistenceError: If a store call fails; nothing is retried
    """
    documents = PRESET_ASSESSMENTS if documents is None else documents

    if force:
        await store.clear(ASSESSMENTS)
    else:
        existing = await store.count(ASSESSMENTS)
        if existing > 0:
            logger.info(f"Store already holds {existing} assessment(s), skipping seeding")
            return False

    await store.bulk_add(ASSESSMENTS, documents)
    logger.info(f"Seeded {len(documents)} assessment(s)")
    return True
