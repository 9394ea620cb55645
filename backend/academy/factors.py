from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Mapping, Optional, Union

from .catalog import FACTOR_MAPPING

# A factor is only reported when at least this share of its items was answered
MIN_COVERAGE = 0.6

_ONE_PLACE = Decimal("0.1")

ItemKey = Union[int, str]


def required_answers(item_count: int) -> int:
	# Decimal keeps ceil(0.6 * 5) at 3 instead of drifting on float error
	return math.ceil(Decimal(str(MIN_COVERAGE)) * item_count)


def average_one_place(values: Iterable[int]) -> float:
	"""Arithmetic mean rounded half-up to one decimal place."""
	values = list(values)
	mean = Decimal(sum(values)) / Decimal(len(values))
	return float(mean.quantize(_ONE_PLACE, rounding=ROUND_HALF_UP))


def _lookup(answers: Mapping[ItemKey, Optional[int]], number: int) -> Optional[int]:
	if number in answers:
		return answers[number]
	return answers.get(f"q{number}")


def compute_factors(
	answers: Mapping[ItemKey, Optional[int]],
	mapping: Mapping[str, Iterable[int]] = FACTOR_MAPPING,
) -> Dict[str, Optional[float]]:
	"""Aggregate raw item scores into composite factor scores.

	`answers` maps item number (1-30, or the "q<n>" column name) to a score
	or None. A factor is None when fewer than ceil(60%) of its items were
	answered, so "not enough data" never looks like a low score.
	"""
	factors: Dict[str, Optional[float]] = {}
	for key, numbers in mapping.items():
		numbers = list(numbers)
		present = [v for v in (_lookup(answers, n) for n in numbers) if v is not None]
		if present and len(present) >= required_answers(len(numbers)):
			factors[key] = average_one_place(present)
		else:
			factors[key] = None
	return factors
