from __future__ import annotations
from typing import Dict, List, Tuple

# Intake survey, answered on a 1-5 Likert scale. Order matters: item n is SURVEY_QUESTIONS[n - 1].
SURVEY_QUESTIONS: Tuple[str, ...] = (
	"I have an active and outgoing personality",
	"I adapt quickly to new environments",
	"I would like to have counselling sessions often",
	"I prefer an academy where I have many friends",
	"I can balance friendships and schoolwork well",
	"I concentrate well and follow the lesson closely",
	"I take notes in class so I don't miss the key points",
	"I never doze off during class",
	"I am never late for class",
	"I understand new material quickly in class",
	"I spend a lot of time studying on my own (not counting homework)",
	"I work hard on my homework",
	"I think both previewing and reviewing are important",
	"I make my own study plans",
	"I study hard wherever I am (home, library, academy)",
	"I always hand in homework on time",
	"I do my homework carefully and thoroughly",
	"When I don't know a problem, I think it through on my own",
	"I work on a problem for about 10 minutes before looking at a solution",
	"I like getting a lot of homework",
	"I really want to attend this academy",
	"I want an academy that makes me study even when it is hard",
	"I don't give up easily even when things are difficult",
	"I really want to do well in school",
	"I am planning to study really hard",
	"I like teachers who explain things clearly",
	"I like kind teachers",
	"I like teachers who offer a lot of counselling",
	"I like fun teachers",
	"I like teachers who make me study even if I don't want to",
)

SURVEY_ITEM_COUNT = len(SURVEY_QUESTIONS)

# Factor key -> survey item numbers (1-based) that feed it
FACTOR_MAPPING: Dict[str, List[int]] = {
	"attitude": [6, 7, 8, 9, 10],
	"self_directed": [11, 14, 15, 18, 19],
	"assignment": [12, 13, 16, 17],
	"willingness": [21, 22, 23, 24, 25],
	"social": [1, 2, 4, 5],
	"management": [3, 20, 28, 30],
	# No form item measures this; only the generator fills it in
	"emotion": [],
}

FACTOR_LABELS: Dict[str, str] = {
	"attitude": "Class attitude",
	"self_directed": "Self-directed learning",
	"assignment": "Assignment completion",
	"willingness": "Willingness to learn",
	"social": "Sociability",
	"management": "Management preference",
	"emotion": "Emotional confidence",
}

FACTOR_KEYS: Tuple[str, ...] = tuple(FACTOR_MAPPING)

# Free-text answers, in the order they are shown to the generator
FREE_TEXT_FIELDS: Tuple[Tuple[str, str], ...] = (
	("study_core", "What matters most in studying"),
	("problem_self", "My own study problems"),
	("dream", "Dream job"),
	("prefer_days", "Preferred class days"),
	("requests", "Requests for the academy"),
	("math_difficulty", "Hardest areas in math"),
	("english_difficulty", "Hardest areas in English"),
)


def item_column(number: int) -> str:
	return f"q{number}"


def factor_column(key: str) -> str:
	return f"factor_{key}"
