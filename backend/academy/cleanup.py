from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import ReportToken, utcnow
from .settings import settings


def purge_expired_report_tokens(db: Session, now: Optional[datetime] = None) -> int:
	# Expired tokens are kept for audit until they are retention_days past expiry
	retention_days = settings.report_token_retention_days
	if retention_days <= 0:
		return 0
	now = now or utcnow()
	threshold = now - timedelta(days=settings.report_token_valid_days + retention_days)
	res = db.execute(delete(ReportToken).where(ReportToken.issued_at < threshold))
	db.commit()
	return res.rowcount or 0
