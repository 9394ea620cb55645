"""Canned survey answers and generator responses shared by the tests."""
import json

from academy.analysis import assessment_from_payload
from academy.extraction import AssessmentPayload
from academy.factors import compute_factors
from academy.models import SurveyResponse

# Item 1..30
FULL_ANSWERS = [4, 3, 2, 5, 4, 4, 5, 3, 4, 5, 2, 4, 5, 2, 3, 4, 4, 3, 2, 2, 5, 4, 3, 5, 5, 2, 3, 4, 3, 4]


def survey_form(name="Kim Minji", answers=FULL_ANSWERS, **extra):
    form = {
        "name": name,
        "school": "Hanbit Middle School",
        "grade": "M2",
        "parent_phone": "010-1234-5678",
        "study_core": "Understanding concepts",
        "problem_self": "I get distracted by my phone",
    }
    for number, score in enumerate(answers, start=1):
        form[f"q{number}"] = score
    form.update(extra)
    return form


def make_survey(db, answers=FULL_ANSWERS, name="Kim Minji"):
    row = SurveyResponse(name=name, school="Hanbit Middle School", grade="M2")
    items = {}
    for number, score in enumerate(answers, start=1):
        setattr(row, f"q{number}", score)
        items[number] = score
    for key, value in compute_factors(items).items():
        setattr(row, f"factor_{key}", value)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def assessment_dict(**overrides):
    data = {
        "studentType": "Will-action gap type",
        "scores": {
            "attitude": 4.2,
            "selfDirected": 2.4,
            "assignment": 4.3,
            "willingness": 4.4,
            "social": 4.0,
            "management": 3.0,
            "emotion": 2.7,
        },
        "scoreComments": {
            "attitude": "Q6 was answered with 4 and Q7 with 5.",
            "selfDirected": "Q11 was answered with 2.",
            "assignment": "Homework habits are solid.",
            "willingness": "Q24 and Q25 were both 5.",
            "social": "Outgoing and adaptable.",
            "management": "Moderate need for structure.",
            "emotion": "Says math tests make them nervous.",
        },
        "summary": "A motivated student whose plans outpace daily habits.",
        "strengths": [{"title": "Strong motivation", "description": "Q24 and Q25 were both 5."}],
        "weaknesses": [{"title": "Little independent study", "description": "Q11 was 2."}],
        "paradox": [
            {
                "title": "Will is 5, action is 2",
                "description": "Intent is high but self-study is low.",
                "label1": "Willingness",
                "value1": 5.0,
                "label2": "Self-study",
                "value2": 2.0,
            }
        ],
        "solutions": [{"step": 1, "weeks": "weeks 1-4", "goal": "Daily planner", "actions": ["Check planner daily"]}],
        "finalAssessment": "A managed class with weekly check-ins suits this student.",
    }
    data.update(overrides)
    return data


def with_trailing_comma(text):
    """Insert a trailing comma before the final closing brace."""
    idx = text.rindex("}")
    return text[:idx].rstrip() + ",\n" + text[idx:]


def fenced_response(data=None, trailing_comma=True):
    body = json.dumps(data if data is not None else assessment_dict(), indent=2, ensure_ascii=False)
    if trailing_comma:
        body = with_trailing_comma(body)
    return "Here is the analysis you asked for.\n\n```json\n" + body + "\n```\n\nLet me know if you need changes."


def make_assessment(db, survey=None, requested_by="tester"):
    survey = survey or make_survey(db)
    payload = AssessmentPayload.model_validate(assessment_dict())
    row = assessment_from_payload(payload, survey, requested_by=requested_by)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
