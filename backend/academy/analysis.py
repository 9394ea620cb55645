from __future__ import annotations
import json
from typing import List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import AssessmentNotFound, ExtractionFailed, StorageFailure, SurveyNotFound
from .extraction import AssessmentPayload, Extracted, extract_assessment
from .gemini_client import GeminiClient
from .logger import get_logger
from .models import Assessment, SurveyResponse
from .prompts import build_analysis_prompt, survey_to_text

log = get_logger("analysis")

# How much of a bad generator answer goes into the log
_RAW_PREVIEW_CHARS = 300


def build_prompt_for(survey: SurveyResponse) -> str:
	return build_analysis_prompt(survey_to_text(survey))


def _dump(items) -> str:
	return json.dumps([item.model_dump() for item in items], ensure_ascii=False)


def assessment_from_payload(
	payload: AssessmentPayload,
	survey: SurveyResponse,
	*,
	requested_by: Optional[str] = None,
) -> Assessment:
	return Assessment(
		survey_id=survey.id,
		name=survey.name,
		school=survey.school,
		grade=survey.grade,
		student_type=payload.student_type,
		summary=payload.summary,
		final_assessment=payload.final_assessment,
		strengths=_dump(payload.strengths),
		weaknesses=_dump(payload.weaknesses),
		paradox=_dump(payload.paradox),
		solutions=_dump(payload.solutions),
		created_by=requested_by,
		**payload.factor_columns(),
	)


def _load_survey(db: Session, survey_id: str) -> SurveyResponse:
	survey = db.get(SurveyResponse, survey_id)
	if survey is None:
		raise SurveyNotFound(survey_id)
	return survey


def _store_assessment(db: Session, row: Assessment, survey: SurveyResponse) -> Assessment:
	try:
		db.add(row)
		db.flush()
		survey.analysis_id = row.id
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Failed to store assessment for survey %s", survey.id)
		raise StorageFailure()
	db.refresh(row)
	return row


async def analyze_survey(
	db: Session,
	survey_id: str,
	*,
	client: Optional[GeminiClient] = None,
	requested_by: Optional[str] = None,
) -> Assessment:
	"""Run one generator pass over a stored survey and persist the result.

	Every call makes exactly one generator request and, on success, one new
	Assessment row; nothing is written when the generator or the extractor
	fails. Callers that want a single assessment per survey should check
	`survey.analysis_id` first. Session work runs in the threadpool so the
	event loop is only held while waiting on the generator.
	"""
	survey = await run_in_threadpool(_load_survey, db, survey_id)

	prompt = build_prompt_for(survey)
	owns_client = client is None
	client = client or GeminiClient()
	try:
		raw = await client.generate(prompt)
	finally:
		if owns_client:
			await client.aclose()

	result = extract_assessment(raw)
	if not isinstance(result, Extracted):
		log.warning(
			"Could not extract assessment for survey %s (%s): %s | raw=%r",
			survey_id,
			type(result).__name__,
			result.describe(),
			raw[:_RAW_PREVIEW_CHARS],
		)
		raise ExtractionFailed(result)

	row = assessment_from_payload(result.assessment, survey, requested_by=requested_by)
	row = await run_in_threadpool(_store_assessment, db, row, survey)
	log.info("Stored assessment %s for survey %s (strategy=%s)", row.id, survey_id, result.strategy)
	return row


def get_assessment(db: Session, assessment_id: str) -> Assessment:
	row = db.get(Assessment, assessment_id)
	if row is None:
		raise AssessmentNotFound(assessment_id)
	return row


def list_assessments(db: Session, *, search: Optional[str] = None, page: int = 1, limit: int = 20) -> Tuple[List[Assessment], int]:
	query = db.query(Assessment)
	if search:
		query = query.filter(Assessment.name.ilike(f"%{search}%"))
	total = query.count()
	rows = query.order_by(Assessment.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
	return rows, total


def attach_report_document(db: Session, assessment_id: str, report_html: str) -> Assessment:
	"""Store the rendered report; the only change allowed after creation."""
	row = get_assessment(db, assessment_id)
	row.report_html = report_html
	try:
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Failed to attach report to assessment %s", assessment_id)
		raise StorageFailure()
	db.refresh(row)
	return row


def delete_assessment(db: Session, assessment_id: str) -> None:
	row = get_assessment(db, assessment_id)
	try:
		db.query(SurveyResponse).filter(SurveyResponse.analysis_id == assessment_id).update(
			{SurveyResponse.analysis_id: None}, synchronize_session=False
		)
		db.delete(row)
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Failed to delete assessment %s", assessment_id)
		raise StorageFailure()
	log.info("Deleted assessment %s", assessment_id)
