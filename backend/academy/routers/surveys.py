from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import RateLimitExceeded, StorageFailure, SurveyNotFound, ValidationError
from ..surveys import get_survey, list_surveys, submit_survey, survey_as_dict
from .auth import User, get_current_user

router = APIRouter(prefix="/surveys", tags=["surveys"])


@router.post("/public", status_code=201)
def submit_public_survey(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
	try:
		row = submit_survey(db, payload)
	except ValidationError as e:
		raise HTTPException(status_code=422, detail={"field": e.field, "message": e.message})
	except RateLimitExceeded:
		# No quota details, so the limit can't be probed
		raise HTTPException(status_code=429, detail="Too many submissions. Please try again later.")
	except StorageFailure as e:
		raise HTTPException(status_code=500, detail=str(e))
	return {"ok": True, "id": row.id}


@router.get("")
def surveys(
	search: Optional[str] = None,
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=20, ge=1, le=100),
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	rows, total = list_surveys(db, search=search, page=page, limit=limit)
	return {
		"data": [survey_as_dict(r) for r in rows],
		"pagination": {"page": page, "limit": limit, "total": total, "total_pages": -(-total // limit)},
	}


@router.get("/{survey_id}")
def survey_detail(survey_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		return survey_as_dict(get_survey(db, survey_id))
	except SurveyNotFound as e:
		raise HTTPException(status_code=404, detail=str(e))
