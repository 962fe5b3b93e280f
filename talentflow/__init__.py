"""
TalentFlow Assessment Engine

Definition, validation, building and taking of candidate assessments:

1. Assessment documents made of ordered sections and typed questions
2. Per-answer and per-section validation with conditional visibility
3. Copy-on-write builder operations used by the assessment editor
4. A runtime that walks a respondent through a published assessment
5. Progress and score summaries
"""

__version__ = "1.0.0"
