from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..analysis import analyze_survey, attach_report_document, delete_assessment, get_assessment, list_assessments
from ..db import get_db
from ..errors import AssessmentNotFound, ExtractionFailed, StorageFailure, SurveyNotFound, UpstreamUnavailable
from ..gemini_client import GeminiClient
from .auth import User, get_current_user

router = APIRouter(prefix="/analyses", tags=["analyses"])


class AnalyzeRequest(BaseModel):
	survey_id: str


class ReportDocumentRequest(BaseModel):
	report_html: str = Field(min_length=1)


async def get_generator():
	try:
		client = GeminiClient()
	except ValueError as e:
		raise HTTPException(status_code=503, detail=str(e))
	try:
		yield client
	finally:
		await client.aclose()


@router.post("", status_code=201)
async def analyze(
	req: AnalyzeRequest,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
	client: GeminiClient = Depends(get_generator),
):
	try:
		row = await analyze_survey(db, req.survey_id, client=client, requested_by=user.username)
	except SurveyNotFound as e:
		raise HTTPException(status_code=404, detail=str(e))
	except UpstreamUnavailable as e:
		raise HTTPException(status_code=502, detail={"message": str(e), "retryable": True})
	except ExtractionFailed as e:
		# Staff get the raw text back so they can fix the record by hand
		raise HTTPException(status_code=422, detail={"error": e.kind, "message": str(e), "raw": e.raw})
	except StorageFailure as e:
		raise HTTPException(status_code=500, detail=str(e))
	return row.as_dict()


@router.get("")
def analyses(
	search: Optional[str] = None,
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=20, ge=1, le=100),
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	rows, total = list_assessments(db, search=search, page=page, limit=limit)
	return {
		"data": [r.as_dict() for r in rows],
		"pagination": {"page": page, "limit": limit, "total": total, "total_pages": -(-total // limit)},
	}


@router.get("/{assessment_id}")
def analysis_detail(assessment_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		row = get_assessment(db, assessment_id)
	except AssessmentNotFound as e:
		raise HTTPException(status_code=404, detail=str(e))
	return {**row.as_dict(), "report_html": row.report_html}


@router.put("/{assessment_id}/report")
def attach_report(
	assessment_id: str,
	req: ReportDocumentRequest,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	try:
		row = attach_report_document(db, assessment_id, req.report_html)
	except AssessmentNotFound as e:
		raise HTTPException(status_code=404, detail=str(e))
	except StorageFailure as e:
		raise HTTPException(status_code=500, detail=str(e))
	return row.as_dict()


@router.delete("/{assessment_id}", status_code=204)
def remove_analysis(assessment_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		delete_assessment(db, assessment_id)
	except AssessmentNotFound as e:
		raise HTTPException(status_code=404, detail=str(e))
	except StorageFailure as e:
		raise HTTPException(status_code=500, detail=str(e))
