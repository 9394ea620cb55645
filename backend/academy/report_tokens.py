from __future__ import annotations
import enum
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ReportTargetNotFound, StorageFailure
from .logger import get_logger
from .models import Assessment, EnrollmentDocument, ReportToken, utcnow
from .settings import settings

log = get_logger("report_tokens")

REPORT_TYPES = {
	"analysis": Assessment,
	"registration": EnrollmentDocument,
}

# 32 random bytes, ~43 url-safe characters
_TOKEN_BYTES = 32


def validity_window() -> timedelta:
	return timedelta(days=settings.report_token_valid_days)


def expires_at(token: ReportToken) -> datetime:
	return token.issued_at + validity_window()


class TokenStatus(str, enum.Enum):
	OK = "ok"
	EXPIRED = "expired"
	NOT_FOUND = "not_found"


@dataclass(frozen=True)
class TokenResolution:
	status: TokenStatus
	report_type: Optional[str] = None
	name: Optional[str] = None
	content: Optional[Dict[str, Any]] = None
	report_html: Optional[str] = None
	expires_at: Optional[datetime] = None


def _load_target(db: Session, report_type: str, target_id: str):
	model = REPORT_TYPES.get(report_type)
	if model is None:
		return None
	return db.get(model, target_id)


def issue_token(
	db: Session,
	report_type: str,
	target_id: str,
	*,
	name: Optional[str] = None,
	created_by: Optional[str] = None,
	now: Optional[datetime] = None,
) -> ReportToken:
	target = _load_target(db, report_type, target_id)
	if target is None:
		raise ReportTargetNotFound(report_type, target_id)
	row = ReportToken(
		token=secrets.token_urlsafe(_TOKEN_BYTES),
		report_type=report_type,
		target_id=target_id,
		name=name or target.name,
		issued_at=now or utcnow(),
		created_by=created_by,
	)
	try:
		db.add(row)
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Failed to store report token for %s %s", report_type, target_id)
		raise StorageFailure()
	db.refresh(row)
	log.info("Issued %s report token for %s", report_type, target_id)
	return row


def resolve_token(db: Session, token: str, *, now: Optional[datetime] = None) -> TokenResolution:
	"""Look up a shared report. Expired and unknown tokens stay distinguishable."""
	row = db.get(ReportToken, token) if token else None
	if row is None:
		return TokenResolution(status=TokenStatus.NOT_FOUND)
	now = now or utcnow()
	if now - row.issued_at > validity_window():
		return TokenResolution(
			status=TokenStatus.EXPIRED,
			report_type=row.report_type,
			name=row.name,
			expires_at=expires_at(row),
		)
	target = _load_target(db, row.report_type, row.target_id)
	if target is None:
		# Report was deleted after the link was shared
		return TokenResolution(status=TokenStatus.NOT_FOUND)
	return TokenResolution(
		status=TokenStatus.OK,
		report_type=row.report_type,
		name=row.name,
		content=target.as_dict(),
		report_html=target.report_html,
		expires_at=expires_at(row),
	)
