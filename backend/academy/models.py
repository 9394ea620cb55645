from __future__ import annotations
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from sqlalchemy import Column, String, DateTime, Integer, Float, Text, ForeignKey
from .catalog import FACTOR_KEYS, SURVEY_ITEM_COUNT
from .db import Base


def utcnow() -> datetime:
	# Naive UTC; SQLite drops tzinfo on the way back anyway
	return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
	return uuid.uuid4().hex


def _loads(value: Optional[str]) -> Any:
	if not value:
		return []
	return json.loads(value)


class AuthUser(Base):
	__tablename__ = "auth_users"
	# Primary key is username
	username = Column(String(128), primary_key=True, index=True)
	password_hash = Column(String(256), nullable=False)
	email = Column(String(256), nullable=True)
	phone = Column(String(32), nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False)
	updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# Session id is the JWT "jti" claim
	session_id = Column(String(64), primary_key=True)
	username = Column(String(128), nullable=False, index=True)
	created_at = Column(DateTime, default=utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=utcnow, nullable=False)


class SurveyResponse(Base):
	__tablename__ = "surveys"
	id = Column(String(32), primary_key=True, default=new_id)
	name = Column(String(128), nullable=False, index=True)
	school = Column(String(128), nullable=True)
	grade = Column(String(32), nullable=True)
	student_phone = Column(String(32), nullable=True)
	parent_phone = Column(String(32), nullable=True)
	referral = Column(String(256), nullable=True)
	prev_academy = Column(String(256), nullable=True)
	prev_complaint = Column(Text, nullable=True)
	# Likert items, 1-5 or NULL when skipped
	q1 = Column(Integer, nullable=True)
	q2 = Column(Integer, nullable=True)
	q3 = Column(Integer, nullable=True)
	q4 = Column(Integer, nullable=True)
	q5 = Column(Integer, nullable=True)
	q6 = Column(Integer, nullable=True)
	q7 = Column(Integer, nullable=True)
	q8 = Column(Integer, nullable=True)
	q9 = Column(Integer, nullable=True)
	q10 = Column(Integer, nullable=True)
	q11 = Column(Integer, nullable=True)
	q12 = Column(Integer, nullable=True)
	q13 = Column(Integer, nullable=True)
	q14 = Column(Integer, nullable=True)
	q15 = Column(Integer, nullable=True)
	q16 = Column(Integer, nullable=True)
	q17 = Column(Integer, nullable=True)
	q18 = Column(Integer, nullable=True)
	q19 = Column(Integer, nullable=True)
	q20 = Column(Integer, nullable=True)
	q21 = Column(Integer, nullable=True)
	q22 = Column(Integer, nullable=True)
	q23 = Column(Integer, nullable=True)
	q24 = Column(Integer, nullable=True)
	q25 = Column(Integer, nullable=True)
	q26 = Column(Integer, nullable=True)
	q27 = Column(Integer, nullable=True)
	q28 = Column(Integer, nullable=True)
	q29 = Column(Integer, nullable=True)
	q30 = Column(Integer, nullable=True)
	# Free-text answers
	study_core = Column(Text, nullable=True)
	problem_self = Column(Text, nullable=True)
	dream = Column(Text, nullable=True)
	prefer_days = Column(String(128), nullable=True)
	requests = Column(Text, nullable=True)
	math_difficulty = Column(Text, nullable=True)
	english_difficulty = Column(Text, nullable=True)
	# Composite factors; NULL means not enough items were answered
	factor_attitude = Column(Float, nullable=True)
	factor_self_directed = Column(Float, nullable=True)
	factor_assignment = Column(Float, nullable=True)
	factor_willingness = Column(Float, nullable=True)
	factor_social = Column(Float, nullable=True)
	factor_management = Column(Float, nullable=True)
	factor_emotion = Column(Float, nullable=True)
	# Latest assessment for this survey
	analysis_id = Column(String(32), nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False)

	def items(self) -> Dict[int, Optional[int]]:
		return {n: getattr(self, f"q{n}") for n in range(1, SURVEY_ITEM_COUNT + 1)}

	def factors(self) -> Dict[str, Optional[float]]:
		return {key: getattr(self, f"factor_{key}") for key in FACTOR_KEYS}


class Assessment(Base):
	__tablename__ = "assessments"
	id = Column(String(32), primary_key=True, default=new_id)
	survey_id = Column(String(32), ForeignKey("surveys.id"), nullable=True, index=True)
	name = Column(String(128), nullable=False)
	school = Column(String(128), nullable=True)
	grade = Column(String(32), nullable=True)
	student_type = Column(String(256), nullable=False)
	score_attitude = Column(Float, nullable=False)
	score_self_directed = Column(Float, nullable=False)
	score_assignment = Column(Float, nullable=False)
	score_willingness = Column(Float, nullable=False)
	score_social = Column(Float, nullable=False)
	score_management = Column(Float, nullable=False)
	score_emotion = Column(Float, nullable=True)
	comment_attitude = Column(Text, nullable=False)
	comment_self_directed = Column(Text, nullable=False)
	comment_assignment = Column(Text, nullable=False)
	comment_willingness = Column(Text, nullable=False)
	comment_social = Column(Text, nullable=False)
	comment_management = Column(Text, nullable=False)
	comment_emotion = Column(Text, nullable=True)
	# JSON string snapshots
	strengths = Column(Text, nullable=False, default="[]")
	weaknesses = Column(Text, nullable=False, default="[]")
	paradox = Column(Text, nullable=False, default="[]")
	solutions = Column(Text, nullable=False, default="[]")
	summary = Column(Text, nullable=False)
	final_assessment = Column(Text, nullable=False)
	report_html = Column(Text, nullable=True)
	created_by = Column(String(128), nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"survey_id": self.survey_id,
			"name": self.name,
			"school": self.school,
			"grade": self.grade,
			"student_type": self.student_type,
			"scores": {key: getattr(self, f"score_{key}") for key in FACTOR_KEYS},
			"comments": {key: getattr(self, f"comment_{key}") for key in FACTOR_KEYS},
			"strengths": _loads(self.strengths),
			"weaknesses": _loads(self.weaknesses),
			"paradox": _loads(self.paradox),
			"solutions": _loads(self.solutions),
			"summary": self.summary,
			"final_assessment": self.final_assessment,
			"has_report": self.report_html is not None,
			"created_by": self.created_by,
			"created_at": self.created_at.isoformat() if self.created_at else None,
		}


class EnrollmentDocument(Base):
	__tablename__ = "enrollment_documents"
	id = Column(String(32), primary_key=True, default=new_id)
	analysis_id = Column(String(32), ForeignKey("assessments.id"), nullable=True)
	name = Column(String(128), nullable=False)
	report_html = Column(Text, nullable=False)
	created_by = Column(String(128), nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"analysis_id": self.analysis_id,
			"name": self.name,
			"created_by": self.created_by,
			"created_at": self.created_at.isoformat() if self.created_at else None,
		}


class ReportToken(Base):
	__tablename__ = "report_tokens"
	token = Column(String(64), primary_key=True)
	# "analysis" or "registration"
	report_type = Column(String(16), nullable=False)
	target_id = Column(String(32), nullable=False, index=True)
	name = Column(String(128), nullable=True)
	issued_at = Column(DateTime, default=utcnow, nullable=False)
	created_by = Column(String(128), nullable=True)
