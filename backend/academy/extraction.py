"""Turn free-form generator text into a validated assessment payload.

The generator is asked for JSON but does not always comply: it may wrap the
object in a ```json fence, in an unlabeled fence, put commentary in front of
it, or leave trailing commas. `extract_assessment` works through a fixed
cascade of locating strategies, applies the trailing-comma repair, parses,
and validates. Malformed output is an expected outcome, so it comes back as a
result object rather than an exception.
"""
from __future__ import annotations
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .catalog import FACTOR_KEYS

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")
_COMMA_BEFORE_BRACE = re.compile(r",\s*}")
_COMMA_BEFORE_BRACKET = re.compile(r",\s*]")

# strict=False lets raw newlines/tabs through inside strings
_decoder = json.JSONDecoder(strict=False)


class FactorScores(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	attitude: float
	self_directed: float = Field(alias="selfDirected")
	assignment: float
	willingness: float
	social: float
	management: float
	emotion: Optional[float] = None


class FactorComments(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	attitude: str
	self_directed: str = Field(alias="selfDirected")
	assignment: str
	willingness: str
	social: str
	management: str
	emotion: Optional[str] = None


def _entry_list(value: Any) -> Any:
	# Lists are advisory; accept a lone entry or null instead of failing the assessment
	if value is None:
		return []
	if not isinstance(value, list):
		value = [value]
	return [item for item in value if item is not None]


class _Entry(BaseModel):
	# Unknown keys from the generator are kept with the stored entry
	model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class Finding(_Entry):
	title: str = ""
	description: str = ""

	@model_validator(mode="before")
	@classmethod
	def _plain_statement(cls, data: Any) -> Any:
		if isinstance(data, (str, int, float)):
			return {"title": str(data)}
		return data


class Paradox(Finding):
	label1: str = ""
	value1: Optional[Union[float, str]] = None
	label2: str = ""
	value2: Optional[Union[float, str]] = None


class Intervention(_Entry):
	step: Optional[Union[int, str]] = None
	weeks: str = ""
	goal: str = ""
	actions: List[str] = Field(default_factory=list)

	@model_validator(mode="before")
	@classmethod
	def _plain_goal(cls, data: Any) -> Any:
		if isinstance(data, str):
			return {"goal": data}
		return data

	@field_validator("actions", mode="before")
	@classmethod
	def _single_action(cls, value: Any) -> Any:
		if value is None:
			return []
		if isinstance(value, str):
			return [value]
		return value


class AssessmentPayload(BaseModel):
	model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

	student_type: str = Field(alias="studentType", min_length=1)
	scores: FactorScores
	score_comments: FactorComments = Field(alias="scoreComments")
	summary: str = Field(min_length=1)
	strengths: List[Finding] = Field(default_factory=list)
	weaknesses: List[Finding] = Field(default_factory=list)
	paradox: List[Paradox] = Field(default_factory=list)
	solutions: List[Intervention] = Field(default_factory=list)
	final_assessment: str = Field(alias="finalAssessment", min_length=1)

	@field_validator("strengths", "weaknesses", "paradox", "solutions", mode="before")
	@classmethod
	def _lenient_lists(cls, value: Any) -> Any:
		return _entry_list(value)

	def factor_columns(self) -> Dict[str, Any]:
		columns: Dict[str, Any] = {}
		for key in FACTOR_KEYS:
			columns[f"score_{key}"] = getattr(self.scores, key)
			columns[f"comment_{key}"] = getattr(self.score_comments, key)
		return columns


@dataclass(frozen=True)
class Extracted:
	assessment: AssessmentPayload
	strategy: str

	ok = True


@dataclass(frozen=True)
class NoStructureFound:
	raw: str

	ok = False

	def describe(self) -> str:
		return "no JSON object found in generator output"


@dataclass(frozen=True)
class MalformedStructure:
	raw: str
	reason: str
	candidate: str = ""

	ok = False

	def describe(self) -> str:
		return f"generator output is not a valid assessment: {self.reason}"


ExtractionResult = Union[Extracted, NoStructureFound, MalformedStructure]


def locate_candidate(text: str) -> Optional[Tuple[str, str]]:
	"""Return (strategy, candidate) for the first strategy that finds something."""
	match = _JSON_FENCE.search(text)
	if match:
		return "json_fence", match.group(1)
	for match in _ANY_FENCE.finditer(text):
		interior = match.group(1).strip()
		if interior.startswith("{"):
			return "fence", interior
	start = text.find("{")
	if start != -1:
		return "first_brace", text[start:]
	return None


def repair(candidate: str) -> str:
	candidate = _COMMA_BEFORE_BRACE.sub("}", candidate)
	return _COMMA_BEFORE_BRACKET.sub("]", candidate)


def parse_candidate(candidate: str) -> Any:
	"""Decode the first JSON value in `candidate`; anything after it is ignored."""
	value, _ = _decoder.raw_decode(candidate.strip())
	return value


def _first_error(exc: ValidationError) -> str:
	error = exc.errors()[0]
	location = ".".join(str(part) for part in error["loc"]) or "(root)"
	return f"{location}: {error['msg']}"


def extract_assessment(text: str) -> ExtractionResult:
	located = locate_candidate(text or "")
	if located is None:
		return NoStructureFound(raw=text)
	strategy, candidate = located
	candidate = repair(candidate)
	try:
		data = parse_candidate(candidate)
	except json.JSONDecodeError as exc:
		return MalformedStructure(raw=text, reason=f"invalid JSON ({exc.msg} at char {exc.pos})", candidate=candidate)
	if not isinstance(data, dict):
		return MalformedStructure(raw=text, reason=f"expected a JSON object, got {type(data).__name__}", candidate=candidate)
	try:
		payload = AssessmentPayload.model_validate(data)
	except ValidationError as exc:
		return MalformedStructure(raw=text, reason=_first_error(exc), candidate=candidate)
	return Extracted(assessment=payload, strategy=strategy)
