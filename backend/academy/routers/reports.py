from __future__ import annotations
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import ReportTargetNotFound, StorageFailure
from ..report_tokens import TokenStatus, expires_at, issue_token, resolve_token
from ..settings import settings
from .auth import User, get_current_user

router = APIRouter(prefix="/reports", tags=["reports"])

EXPIRED_MESSAGE = "This report link has expired. Please contact your teacher for a new link."


class ShareRequest(BaseModel):
	report_type: Literal["analysis", "registration"]
	target_id: str
	name: Optional[str] = None


@router.post("", status_code=201)
def share_report(req: ShareRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	try:
		row = issue_token(db, req.report_type, req.target_id, name=req.name, created_by=user.username)
	except ReportTargetNotFound as e:
		raise HTTPException(status_code=404, detail=str(e))
	except StorageFailure as e:
		raise HTTPException(status_code=500, detail=str(e))
	return {
		"token": row.token,
		"path": f"/reports/{row.token}",
		"report_type": row.report_type,
		"valid_days": settings.report_token_valid_days,
		"expires_at": expires_at(row).isoformat(),
	}


@router.get("/{token}")
def view_report(token: str, db: Session = Depends(get_db)):
	result = resolve_token(db, token)
	if result.status is TokenStatus.NOT_FOUND:
		raise HTTPException(status_code=404, detail="report not found")
	if result.status is TokenStatus.EXPIRED:
		raise HTTPException(
			status_code=410,
			detail={"status": "expired", "message": EXPIRED_MESSAGE, "expired_at": result.expires_at.isoformat()},
		)
	return {
		"report_type": result.report_type,
		"name": result.name,
		"content": result.content,
		"report_html": result.report_html,
		"valid_days": settings.report_token_valid_days,
		"expires_at": result.expires_at.isoformat(),
	}
