from __future__ import annotations
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, create_model, field_validator
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .catalog import FREE_TEXT_FIELDS, SURVEY_ITEM_COUNT, factor_column, item_column
from .errors import RateLimitExceeded, StorageFailure, SurveyNotFound, ValidationError
from .factors import compute_factors
from .logger import get_logger
from .models import SurveyResponse
from .rate_limit import RateLimiter, survey_limiter
from .settings import settings

log = get_logger("surveys")

ITEM_FIELDS: Tuple[str, ...] = tuple(item_column(n) for n in range(1, SURVEY_ITEM_COUNT + 1))

ItemScore = Optional[Annotated[int, Field(ge=1, le=5)]]


class _SurveyFields(BaseModel):
	model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

	name: str = Field(min_length=1, max_length=128)
	school: Optional[str] = None
	grade: Optional[str] = None
	student_phone: Optional[str] = None
	parent_phone: Optional[str] = None
	referral: Optional[str] = None
	prev_academy: Optional[str] = None
	prev_complaint: Optional[str] = None
	study_core: Optional[str] = None
	problem_self: Optional[str] = None
	dream: Optional[str] = None
	prefer_days: Optional[str] = None
	requests: Optional[str] = None
	math_difficulty: Optional[str] = None
	english_difficulty: Optional[str] = None

	@field_validator(*ITEM_FIELDS, mode="before", check_fields=False)
	@classmethod
	def _blank_item_is_unanswered(cls, value: Any) -> Any:
		# HTML forms send "" for a skipped radio group
		if isinstance(value, str) and not value.strip():
			return None
		return value


SurveySubmission = create_model(
	"SurveySubmission",
	__base__=_SurveyFields,
	**{field: (ItemScore, None) for field in ITEM_FIELDS},
)


def _message_for(field: str, error: Mapping[str, Any]) -> str:
	if field == "name":
		return "name is required"
	if field in ITEM_FIELDS:
		return f"{field} must be a whole number from 1 to 5"
	return f"{field}: {error['msg']}"


def validate_submission(data: Mapping[str, Any]) -> BaseModel:
	"""Validate a raw form payload, reporting only the first bad field."""
	try:
		return SurveySubmission.model_validate(dict(data))
	except PydanticValidationError as exc:
		error = exc.errors()[0]
		field = str(error["loc"][0]) if error["loc"] else "(form)"
		raise ValidationError(field, _message_for(field, error)) from None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
	return value or None


def submit_survey(db: Session, data: Mapping[str, Any], *, limiter: RateLimiter = survey_limiter) -> SurveyResponse:
	submission = validate_submission(data)
	if not limiter.check(submission.name, settings.survey_rate_limit_max, settings.survey_rate_limit_window_seconds):
		log.warning("Survey submission throttled for %r", submission.name)
		raise RateLimitExceeded(submission.name)

	values = submission.model_dump()
	row = SurveyResponse(name=values.pop("name"))
	items = {n: values.pop(item_column(n)) for n in range(1, SURVEY_ITEM_COUNT + 1)}
	for number, score in items.items():
		setattr(row, item_column(number), score)
	for key, value in compute_factors(items).items():
		setattr(row, factor_column(key), value)
	for field, value in values.items():
		setattr(row, field, _blank_to_none(value))

	try:
		db.add(row)
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		log.exception("Failed to store survey for %r", submission.name)
		raise StorageFailure()
	db.refresh(row)
	log.info("Stored survey %s", row.id)
	return row


def get_survey(db: Session, survey_id: str) -> SurveyResponse:
	row = db.get(SurveyResponse, survey_id)
	if row is None:
		raise SurveyNotFound(survey_id)
	return row


def list_surveys(db: Session, *, search: Optional[str] = None, page: int = 1, limit: int = 20) -> Tuple[List[SurveyResponse], int]:
	query = db.query(SurveyResponse)
	if search:
		query = query.filter(SurveyResponse.name.ilike(f"%{search}%"))
	total = query.count()
	rows = query.order_by(SurveyResponse.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
	return rows, total


def survey_as_dict(row: SurveyResponse) -> Dict[str, Any]:
	data: Dict[str, Any] = {
		"id": row.id,
		"name": row.name,
		"school": row.school,
		"grade": row.grade,
		"student_phone": row.student_phone,
		"parent_phone": row.parent_phone,
		"referral": row.referral,
		"prev_academy": row.prev_academy,
		"prev_complaint": row.prev_complaint,
		"items": {item_column(n): score for n, score in row.items().items()},
		"factors": row.factors(),
		"analysis_id": row.analysis_id,
		"created_at": row.created_at.isoformat() if row.created_at else None,
	}
	for field, _ in FREE_TEXT_FIELDS:
		data[field] = getattr(row, field)
	return data
