from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..logger import get_logger
from ..models import EnrollmentDocument
from .auth import User, get_current_user

router = APIRouter(prefix="/enrollments", tags=["enrollments"])

log = get_logger("enrollments")


class EnrollmentDocumentRequest(BaseModel):
	name: str = Field(min_length=1, max_length=128)
	report_html: str = Field(min_length=1)
	analysis_id: Optional[str] = None


@router.post("", status_code=201)
def create_enrollment_document(
	req: EnrollmentDocumentRequest,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	# The document arrives already rendered; we only keep it so it can be shared
	row = EnrollmentDocument(
		name=req.name.strip(),
		report_html=req.report_html,
		analysis_id=req.analysis_id,
		created_by=user.username,
	)
	try:
		db.add(row)
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Failed to store enrollment document for %r", req.name)
		raise HTTPException(status_code=500, detail="could not save the record, please try again")
	db.refresh(row)
	return row.as_dict()


@router.get("/{document_id}")
def enrollment_document(document_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = db.get(EnrollmentDocument, document_id)
	if row is None:
		raise HTTPException(status_code=404, detail=f"enrollment document {document_id} not found")
	return {**row.as_dict(), "report_html": row.report_html}
