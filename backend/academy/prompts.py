from __future__ import annotations
from typing import Any, Optional

from .catalog import FACTOR_KEYS, FACTOR_LABELS, FREE_TEXT_FIELDS, SURVEY_QUESTIONS, factor_column, item_column

UNANSWERED = "unanswered"
NOT_AVAILABLE = "N/A"

_CONTACT_FIELDS = (
	("Student phone", "student_phone"),
	("Parent phone", "parent_phone"),
	("Referral source", "referral"),
	("Previous academy", "prev_academy"),
	("Complaints about previous academy", "prev_complaint"),
)


def _text(survey: Any, field: str) -> str:
	value = getattr(survey, field, None)
	return "" if value is None else str(value)


def _format_factor(value: Optional[float]) -> str:
	if value is None:
		return NOT_AVAILABLE
	return f"{value:.1f}"


def survey_to_text(survey: Any) -> str:
	"""Render a stored survey as the data block of the analysis prompt.

	Output depends only on the survey's fields, so the same survey always
	produces byte-identical text.
	"""
	lines = []
	lines.append(f"Student name: {_text(survey, 'name')}")
	lines.append(f"School / grade: {_text(survey, 'school')} {_text(survey, 'grade')}".rstrip())
	for label, field in _CONTACT_FIELDS:
		lines.append(f"{label}: {_text(survey, field)}")
	lines.append("")

	lines.append("=== Survey answers (1-5) ===")
	for number, question in enumerate(SURVEY_QUESTIONS, start=1):
		score = getattr(survey, item_column(number), None)
		lines.append(f"{number}. {question}: {UNANSWERED if score is None else score}")
	lines.append("")

	lines.append("=== Factor averages ===")
	for key in FACTOR_KEYS:
		lines.append(f"{FACTOR_LABELS[key]}: {_format_factor(getattr(survey, factor_column(key), None))}")
	lines.append("")

	lines.append("=== Free-text answers ===")
	for field, label in FREE_TEXT_FIELDS:
		lines.append(f"{label}: {_text(survey, field)}")

	return "\n".join(lines) + "\n"


ANALYSIS_INSTRUCTIONS = """You are a learning psychologist and admissions consultant with 15 years of experience.
Analyse the student survey below from a psychological and behavioural point of view and return the result as JSON.

[How to read the survey]
- Sociability (Q1, Q2, Q4, Q5): extraversion, adaptability, need for belonging, self-regulation between friends and study.
- Class attitude (Q6-Q10): sustained attention, active note taking, alertness, punctuality, cognitive self-efficacy.
- Self-directed learning (Q11, Q14, Q15, Q18, Q19): intrinsic motivation, planning, persistence, help-seeking. High Q18 with low Q19 suggests stubbornness; both low suggests giving up quickly.
- Assignment completion (Q12, Q13, Q16, Q17): conscientiousness, deadlines, quality. Q13 is an attitude; cross-check it against Q11 and Q12.
- Willingness (Q21-Q25): extrinsic motivation, tolerance for hard work, grit, achievement motivation, intention.
- Management preference (Q3, Q20, Q28, Q30): need for counselling, preference for structure and external control.
- Teacher preference (Q26-Q30): what kind of teacher the student responds to (clear explanations, kindness, counselling, fun, firm pushing). Q28 and Q30 also feed management preference.
- Emotional confidence: no survey item measures it. Score it only when the free-text answers give real evidence (test anxiety, fear of a subject, low self-belief); otherwise leave "emotion" out of both "scores" and "scoreComments".

[Cross-analysis patterns to check]
1. Will-action gap: high Q24/Q25 but low Q11/Q14/Q16.
2. Overestimation: high Q10 but low Q12/Q16/Q17.
3. Passive learner: high Q30/Q20 but low Q11/Q14.
4. Social over study: high Q4 but low Q5.
5. Attitude-behaviour mismatch: high Q13 but low Q11.
6. Avoidance: low Q18 and Q23.
7. Missing metacognition: empty or generic free-text answers about own problems.
8. Previous academy complaints contradicting current answers.
9. Comfort seeking: high Q27 and Q29 with low Q22 and Q30.

[Writing rules]
- Warm but professional tone, written for parents.
- Short sentences. Quote question numbers and scores as evidence (e.g. "Q11 was answered with 2").

"""

ANALYSIS_OUTPUT_FORMAT = """[Output format - return ONLY this JSON structure, no other text]
{
  "studentType": "a psychological label for the student type",
  "scores": {
    "attitude": 4.2,
    "selfDirected": 3.2,
    "assignment": 3.5,
    "willingness": 3.4,
    "social": 3.8,
    "management": 4.0,
    "emotion": 3.6
  },
  "scoreComments": {
    "attitude": "3-4 sentences quoting Q6-Q10",
    "selfDirected": "3-4 sentences quoting Q11, Q14, Q15, Q18, Q19",
    "assignment": "3-4 sentences quoting Q12, Q13, Q16, Q17",
    "willingness": "3-4 sentences quoting Q21-Q25",
    "social": "3-4 sentences quoting Q1, Q2, Q4, Q5",
    "management": "3-4 sentences quoting Q3, Q20, Q28, Q30",
    "emotion": "optional; 2-3 sentences quoting the free-text answers it is based on"
  },
  "summary": "6-8 sentences describing the student's core traits and learning style",
  "strengths": [
    {"title": "strength", "description": "3-4 sentences with evidence"}
  ],
  "weaknesses": [
    {"title": "weakness", "description": "3-4 sentences on the root cause"}
  ],
  "paradox": [
    {
      "title": "a title that names the gap",
      "description": "2-3 sentences",
      "label1": "higher indicator",
      "value1": 4.5,
      "label2": "lower indicator",
      "value2": 2.0
    }
  ],
  "solutions": [
    {"step": 1, "weeks": "weeks 1-4", "goal": "goal", "actions": ["action", "action"]}
  ],
  "finalAssessment": "6-8 sentences on how the academy should teach and manage this student"
}"""


def build_analysis_prompt(survey_text: str) -> str:
	return ANALYSIS_INSTRUCTIONS + "[Student survey data]\n" + survey_text + "\n" + ANALYSIS_OUTPUT_FORMAT
