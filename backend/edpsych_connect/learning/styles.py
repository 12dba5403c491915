"""
VARK learning-style questionnaire and scorer.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel


class LearningStyle(str, Enum):
	VISUAL = "visual"
	AUDITORY = "auditory"
	READING_WRITING = "reading_writing"
	KINESTHETIC = "kinesthetic"
	MULTIMODAL = "multimodal"


class LearningPace(str, Enum):
	ACCELERATED = "accelerated"
	STANDARD = "standard"
	DELIBERATE = "deliberate"
	CUSTOM = "custom"


class DifficultyLevel(str, Enum):
	INTRODUCTORY = "introductory"
	BEGINNER = "beginner"
	INTERMEDIATE = "intermediate"
	ADVANCED = "advanced"
	EXPERT = "expert"


class InterestCategory(str, Enum):
	SCIENCE = "science"
	TECHNOLOGY = "technology"
	ENGINEERING = "engineering"
	ARTS = "arts"
	MATHEMATICS = "mathematics"
	HISTORY = "history"
	LITERATURE = "literature"
	MUSIC = "music"
	SPORTS = "sports"
	NATURE = "nature"
	EDUCATION = "education"


class LearningGoalType(str, Enum):
	KNOWLEDGE_ACQUISITION = "knowledge_acquisition"
	SKILL_DEVELOPMENT = "skill_development"
	PROBLEM_SOLVING = "problem_solving"
	CREATIVE_EXPRESSION = "creative_expression"
	CERTIFICATION = "certification"
	PERSONAL_GROWTH = "personal_growth"


class LearningActivityType(str, Enum):
	VIDEO = "video"
	READING = "reading"
	INTERACTIVE = "interactive"
	QUIZ = "quiz"
	DISCUSSION = "discussion"
	PROJECT = "project"
	GAME = "game"
	SIMULATION = "simulation"
	ASSESSMENT = "assessment"
	REFLECTION = "reflection"


class ProgressStatus(str, Enum):
	NOT_STARTED = "not_started"
	IN_PROGRESS = "in_progress"
	COMPLETED = "completed"
	MASTERED = "mastered"
	NEEDS_REVIEW = "needs_review"


# Scored styles in tie-break order
VARK_STYLES: List[LearningStyle] = [
	LearningStyle.VISUAL,
	LearningStyle.AUDITORY,
	LearningStyle.READING_WRITING,
	LearningStyle.KINESTHETIC,
]

SECONDARY_STYLE_MIN_SCORE = 20
MULTIMODAL_MARGIN = 10


class QuestionOption(BaseModel):
	text: str
	style: LearningStyle


class LearningStyleQuestion(BaseModel):
	id: str
	question: str
	options: List[QuestionOption]


class LearningStyleResult(BaseModel):
	visual: int
	auditory: int
	reading_writing: int
	kinesthetic: int
	primary_style: LearningStyle
	secondary_style: Optional[LearningStyle] = None
	is_multimodal: bool


def _q(qid: str, question: str, visual: str, auditory: str, reading_writing: str, kinesthetic: str) -> LearningStyleQuestion:
	return LearningStyleQuestion(
		id=qid,
		question=question,
		options=[
			QuestionOption(text=visual, style=LearningStyle.VISUAL),
			QuestionOption(text=auditory, style=LearningStyle.AUDITORY),
			QuestionOption(text=reading_writing, style=LearningStyle.READING_WRITING),
			QuestionOption(text=kinesthetic, style=LearningStyle.KINESTHETIC),
		],
	)


LEARNING_STYLE_QUESTIONS: List[LearningStyleQuestion] = [
	_q(
		"q1", "When learning a new skill, I prefer to:",
		"Watch a demonstration or video",
		"Listen to detailed instructions",
		"Read step-by-step instructions",
		"Try it out and learn through practise",
	),
	_q(
		"q2", "When trying to remember information, I most easily recall:",
		"Images, diagrams, and visual details",
		"Discussions, lectures, and what was said",
		"Written notes and text I've read",
		"Activities and experiences I've done",
	),
	_q(
		"q3", "When explaining a concept to someone else, I tend to:",
		"Draw a diagram or show images",
		"Explain verbally with emphasis on key points",
		"Write out an explanation or provide written materials",
		"Demonstrate through examples or hands-on activities",
	),
	_q(
		"q4", "When solving a problem, I prefer to:",
		"Visualise the problem and possible solutions",
		"Talk through the problem and solutions out loud",
		"Write down the problem and organise my thoughts in writing",
		"Use a trial-and-error approach and physical manipulation",
	),
	_q(
		"q5", "When attending a class or presentation, I get the most out of:",
		"Visual aids, charts, and demonstrations",
		"Listening to the speaker and verbal discussions",
		"Reading handouts and taking detailed notes",
		"Interactive activities and practical exercises",
	),
	_q(
		"q6", "When giving directions, I typically:",
		"Draw a map or show pictures",
		"Explain verbally with clear instructions",
		"Write down detailed directions",
		"Walk or drive with the person to show them",
	),
	_q(
		"q7", "When learning from a website or app, I prefer:",
		"Visual layouts with images, videos, and diagrams",
		"Audio explanations, podcasts, or narrated content",
		"Text-based content with clear written explanations",
		"Interactive elements that let me practise and apply concepts",
	),
	_q(
		"q8", "When remembering a past event, I most vividly recall:",
		"What I saw and how things looked",
		"What was said and the sounds I heard",
		"Notes I took or texts I read about it",
		"What I did and how it felt physically",
	),
]


def get_learning_style_questions() -> List[LearningStyleQuestion]:
	return [q.model_copy(deep=True) for q in LEARNING_STYLE_QUESTIONS]


def _percent(count: int, total: int) -> int:
	# Half-up rounding, not Python's banker's rounding
	return int(math.floor(count * 100 / total + 0.5))


def assess_learning_style(answers: Mapping[str, LearningStyle]) -> LearningStyleResult:
	"""Score a questionnaire given as ``{question_id: chosen style}``.

	Percentages are per VARK style. The primary style is the highest
	score; when the top two are within ``MULTIMODAL_MARGIN`` points the
	result is multimodal and the top style is reported as secondary.
	"""
	if not answers:
		raise ValueError("at least one answer is required")
	counts: Dict[LearningStyle, int] = {style: 0 for style in VARK_STYLES}
	for qid, style in answers.items():
		style = LearningStyle(style)
		if style not in counts:
			raise ValueError(f"answer to {qid} must be one of the VARK styles, not {style.value}")
		counts[style] += 1

	total = sum(counts.values())
	percentages = {style: _percent(counts[style], total) for style in VARK_STYLES}
	ranked = sorted(VARK_STYLES, key=lambda s: percentages[s], reverse=True)
	top, runner_up = ranked[0], ranked[1]

	is_multimodal = percentages[top] - percentages[runner_up] < MULTIMODAL_MARGIN
	if is_multimodal:
		primary, secondary = LearningStyle.MULTIMODAL, top
	else:
		primary = top
		secondary = runner_up if percentages[runner_up] > SECONDARY_STYLE_MIN_SCORE else None

	return LearningStyleResult(
		visual=percentages[LearningStyle.VISUAL],
		auditory=percentages[LearningStyle.AUDITORY],
		reading_writing=percentages[LearningStyle.READING_WRITING],
		kinesthetic=percentages[LearningStyle.KINESTHETIC],
		primary_style=primary,
		secondary_style=secondary,
		is_multimodal=is_multimodal,
	)
