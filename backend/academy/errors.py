from __future__ import annotations
from typing import Any, Optional


class AcademyError(Exception):
	"""Base class for errors raised by the survey-to-assessment pipeline."""


class ValidationError(AcademyError):
	"""Submitted data was malformed or out of range.

	Only the first offending field is reported; the message is safe to show
	to the person who submitted the form.
	"""

	def __init__(self, field: str, message: str) -> None:
		super().__init__(message)
		self.field = field
		self.message = message


class RateLimitExceeded(AcademyError):
	def __init__(self, key: str) -> None:
		super().__init__("too many requests, please try again later")
		self.key = key


class UpstreamUnavailable(AcademyError):
	"""The generator could not be reached or did not answer in time."""


class UpstreamStatusError(UpstreamUnavailable):
	def __init__(self, status_code: int, body: str = "") -> None:
		super().__init__(f"generator returned HTTP {status_code}")
		self.status_code = status_code
		self.body = body


class UpstreamEmptyResponse(UpstreamUnavailable):
	"""The generator answered 2xx but with no usable candidate text."""

	def __init__(self, finish_reason: Optional[str] = None) -> None:
		if finish_reason:
			message = f"generator returned no candidate text (finishReason={finish_reason})"
		else:
			message = "generator returned no candidates"
		super().__init__(message)
		self.finish_reason = finish_reason


class ExtractionFailed(AcademyError):
	"""Generator output could not be turned into an assessment.

	`failure` is the extractor's NoStructureFound / MalformedStructure result;
	`raw` is the untouched generator text so staff can fix things by hand.
	"""

	def __init__(self, failure: Any) -> None:
		super().__init__(failure.describe())
		self.failure = failure
		self.raw = failure.raw
		self.kind = type(failure).__name__


class StorageFailure(AcademyError):
	def __init__(self, message: str = "could not save the record, please try again") -> None:
		super().__init__(message)


class SurveyNotFound(AcademyError):
	def __init__(self, survey_id: str) -> None:
		super().__init__(f"survey {survey_id} not found")
		self.survey_id = survey_id


class AssessmentNotFound(AcademyError):
	def __init__(self, assessment_id: str) -> None:
		super().__init__(f"assessment {assessment_id} not found")
		self.assessment_id = assessment_id


class ReportTargetNotFound(AcademyError):
	def __init__(self, report_type: str, target_id: str) -> None:
		super().__init__(f"{report_type} report {target_id} not found")
		self.report_type = report_type
		self.target_id = target_id
