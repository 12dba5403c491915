from __future__ import annotations

import html
import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..models import LearningStyleAssessment, ModuleProgressRecord
from .styles import (
	DifficultyLevel,
	InterestCategory,
	LearningActivityType,
	LearningGoalType,
	LearningStyle,
	ProgressStatus,
)

logger = logging.getLogger(__name__)

KNOWLEDGE_SEEKER_TARGET = 5


class ModuleActivity(BaseModel):
	id: str
	type: LearningActivityType
	title: str
	duration: int  # minutes
	optional: bool = False


class ModuleAssessment(BaseModel):
	id: str
	title: str
	passing_score: int


class LearningModule(BaseModel):
	id: str
	title: str
	description: str
	difficulty: DifficultyLevel
	estimated_duration: int  # minutes
	prerequisites: List[str] = Field(default_factory=list)
	related_interests: List[InterestCategory] = Field(default_factory=list)
	goals: List[LearningGoalType] = Field(default_factory=list)
	relevance_score: int
	recommendation_reason: str
	activities: List[ModuleActivity]
	assessments: List[ModuleAssessment]


class AssessmentResult(BaseModel):
	assessment_id: str
	score: float = Field(ge=0, le=100)
	passed: bool


class AssessmentRecord(BaseModel):
	assessment_id: str
	attempts: int
	best_score: float
	last_completion_date: datetime
	# Ever passed; completion follows last_passed
	passed: bool
	last_passed: bool


class ProgressAdaptations(BaseModel):
	content_style: LearningStyle = LearningStyle.MULTIMODAL
	pace_modifier: float = 1.0  # <1 faster, >1 slower
	difficulty_adjustment: int = 0  # negative easier, positive harder


class ModuleProgress(BaseModel):
	user_id: str
	module_id: str
	start_date: datetime
	last_access_date: datetime
	completed_activities: List[str] = Field(default_factory=list)
	assessment_results: List[AssessmentRecord] = Field(default_factory=list)
	time_spent: int = 0  # minutes
	completion_percentage: int = 0
	status: ProgressStatus = ProgressStatus.NOT_STARTED
	notes: str = ""
	adaptations: ProgressAdaptations = Field(default_factory=ProgressAdaptations)


class PrerequisiteStatus(BaseModel):
	module_id: str
	title: str
	completed: bool


class LearningRecommendation(BaseModel):
	module_id: str
	title: str
	description: str
	relevance_score: int
	reason_for_recommendation: str
	difficulty: DifficultyLevel
	estimated_duration: int
	matches_interests: List[InterestCategory]
	matches_goals: List[LearningGoalType]
	prerequisites: List[PrerequisiteStatus]


class Achievement(BaseModel):
	id: str
	title: str
	description: str
	icon_url: str
	criteria: str
	date_earned: Optional[datetime] = None
	progress: Optional[int] = None  # 0-100
	category: Literal["completion", "mastery", "engagement", "milestone", "special"]
	rarity: Literal["common", "uncommon", "rare", "epic", "legendary"]


def _activities(prefix: str, *items: tuple) -> List[ModuleActivity]:
	return [
		ModuleActivity(id=f"{prefix}-a{i}", type=kind, title=title, duration=minutes)
		for i, (kind, title, minutes) in enumerate(items, start=1)
	]


MODULE_CATALOG: Dict[str, LearningModule] = {
	m.id: m
	for m in [
		LearningModule(
			id="module1",
			title="Introduction to Educational Psychology",
			description="Learn the fundamental principles of educational psychology and their applications in learning environments.",
			difficulty=DifficultyLevel.BEGINNER,
			estimated_duration=120,
			related_interests=[InterestCategory.SCIENCE],
			goals=[LearningGoalType.KNOWLEDGE_ACQUISITION],
			relevance_score=95,
			recommendation_reason="Matches your interest in psychology and education",
			activities=_activities(
				"module1",
				(LearningActivityType.VIDEO, "What is educational psychology?", 20),
				(LearningActivityType.READING, "Key theories of learning", 30),
				(LearningActivityType.DISCUSSION, "Learning in your setting", 20),
				(LearningActivityType.QUIZ, "Check your understanding", 15),
				(LearningActivityType.REFLECTION, "Reflective journal", 15),
			),
			assessments=[ModuleAssessment(id="module1-final", title="Foundations assessment", passing_score=70)],
		),
		LearningModule(
			id="module2",
			title="Cognitive Development in Children",
			description="Explore how cognitive abilities develop throughout childhood and adolescence.",
			difficulty=DifficultyLevel.INTERMEDIATE,
			estimated_duration=180,
			prerequisites=["module1"],
			related_interests=[InterestCategory.SCIENCE],
			goals=[LearningGoalType.KNOWLEDGE_ACQUISITION],
			relevance_score=88,
			recommendation_reason="Builds on your completed modules about child development",
			activities=_activities(
				"module2",
				(LearningActivityType.READING, "Stages of cognitive development", 40),
				(LearningActivityType.VIDEO, "Observing children at play", 30),
				(LearningActivityType.SIMULATION, "Classroom scenario", 45),
				(LearningActivityType.PROJECT, "Case study write-up", 45),
			),
			assessments=[ModuleAssessment(id="module2-final", title="Development assessment", passing_score=70)],
		),
		LearningModule(
			id="module3",
			title="Learning Styles and Differentiated Instruction",
			description="Discover how to adapt teaching methods to different learning styles and needs.",
			difficulty=DifficultyLevel.INTERMEDIATE,
			estimated_duration=150,
			prerequisites=["module1"],
			related_interests=[InterestCategory.EDUCATION],
			goals=[LearningGoalType.SKILL_DEVELOPMENT],
			relevance_score=92,
			recommendation_reason="Aligns with your interest in personalised learning",
			activities=_activities(
				"module3",
				(LearningActivityType.INTERACTIVE, "VARK self-assessment", 15),
				(LearningActivityType.READING, "Differentiation strategies", 35),
				(LearningActivityType.GAME, "Match the strategy", 20),
				(LearningActivityType.PROJECT, "Plan a differentiated lesson", 50),
			),
			assessments=[ModuleAssessment(id="module3-final", title="Differentiation assessment", passing_score=75)],
		),
	]
}


def get_module(module_id: str) -> LearningModule:
	module = MODULE_CATALOG.get(module_id)
	if module is None:
		raise ValueError(f"unknown module: {module_id}")
	return module


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


def latest_learning_style(db: Session, user_id: str) -> Optional[LearningStyle]:
	row = (
		db.query(LearningStyleAssessment)
		.filter(LearningStyleAssessment.user_id == user_id)
		.order_by(LearningStyleAssessment.created_at.desc(), LearningStyleAssessment.id.desc())
		.first()
	)
	return LearningStyle(row.primary_style) if row else None


def _load_progress(db: Session, user_id: str) -> Dict[str, ModuleProgress]:
	rows = db.query(ModuleProgressRecord).filter(ModuleProgressRecord.user_id == user_id).all()
	return {row.module_id: ModuleProgress.model_validate_json(row.progress_json) for row in rows}


def _status_for(module: LearningModule, progress: ModuleProgress) -> ProgressStatus:
	if progress.completion_percentage >= 100:
		passed = {r.assessment_id for r in progress.assessment_results if r.last_passed}
		if all(a.id in passed for a in module.assessments):
			return ProgressStatus.COMPLETED
	if progress.completed_activities or progress.assessment_results or progress.time_spent:
		return ProgressStatus.IN_PROGRESS
	return ProgressStatus.NOT_STARTED


def track_module_progress(
	db: Session,
	user_id: str,
	module_id: str,
	activity_id: Optional[str] = None,
	assessment_result: Optional[AssessmentResult] = None,
	time_spent: Optional[int] = None,
) -> ModuleProgress:
	module = get_module(module_id)
	now = _utcnow()
	row = (
		db.query(ModuleProgressRecord)
		.filter(ModuleProgressRecord.user_id == user_id, ModuleProgressRecord.module_id == module_id)
		.first()
	)
	if row is not None:
		progress = ModuleProgress.model_validate_json(row.progress_json)
	else:
		progress = ModuleProgress(user_id=user_id, module_id=module_id, start_date=now, last_access_date=now)
		style = latest_learning_style(db, user_id)
		if style is not None:
			progress.adaptations.content_style = style

	progress.last_access_date = now

	if activity_id is not None:
		known = {a.id for a in module.activities}
		if activity_id not in known:
			raise ValueError(f"unknown activity {activity_id} for module {module_id}")
		if activity_id not in progress.completed_activities:
			progress.completed_activities.append(activity_id)
	progress.completion_percentage = min(100, round(len(progress.completed_activities) * 100 / len(module.activities)))

	if assessment_result is not None:
		if assessment_result.assessment_id not in {a.id for a in module.assessments}:
			raise ValueError(f"unknown assessment {assessment_result.assessment_id} for module {module_id}")
		for record in progress.assessment_results:
			if record.assessment_id == assessment_result.assessment_id:
				record.attempts += 1
				record.best_score = max(record.best_score, assessment_result.score)
				record.last_completion_date = now
				record.passed = record.passed or assessment_result.passed
				record.last_passed = assessment_result.passed
				break
		else:
			progress.assessment_results.append(AssessmentRecord(
				assessment_id=assessment_result.assessment_id,
				attempts=1,
				best_score=assessment_result.score,
				last_completion_date=now,
				passed=assessment_result.passed,
				last_passed=assessment_result.passed,
			))

	if time_spent:
		if time_spent < 0:
			raise ValueError("time_spent must not be negative")
		progress.time_spent += time_spent

	progress.status = _status_for(module, progress)

	if row is None:
		row = ModuleProgressRecord(user_id=user_id, module_id=module_id)
	row.status = progress.status.value
	row.progress_json = progress.model_dump_json()
	db.add(row)
	db.commit()
	logger.info("Progress for %s on %s: %s%% (%s)", user_id, module_id, progress.completion_percentage, progress.status.value)
	return progress


def _completed_modules(progress: Dict[str, ModuleProgress]) -> set:
	return {mid for mid, p in progress.items() if p.status in (ProgressStatus.COMPLETED, ProgressStatus.MASTERED)}


def get_learning_recommendations(db: Session, user_id: str, count: int = 3) -> List[LearningRecommendation]:
	if count < 1:
		raise ValueError("count must be at least 1")
	completed = _completed_modules(_load_progress(db, user_id))
	candidates = sorted(
		(m for m in MODULE_CATALOG.values() if m.id not in completed),
		key=lambda m: m.relevance_score,
		reverse=True,
	)
	return [
		LearningRecommendation(
			module_id=m.id,
			title=m.title,
			description=m.description,
			relevance_score=m.relevance_score,
			reason_for_recommendation=m.recommendation_reason,
			difficulty=m.difficulty,
			estimated_duration=m.estimated_duration,
			matches_interests=m.related_interests,
			matches_goals=m.goals,
			prerequisites=[
				PrerequisiteStatus(module_id=p, title=MODULE_CATALOG[p].title, completed=p in completed)
				for p in m.prerequisites
			],
		)
		for m in candidates[:count]
	]


def get_user_achievements(db: Session, user_id: str) -> List[Achievement]:
	progress = _load_progress(db, user_id)
	completed = [p for p in progress.values() if p.status in (ProgressStatus.COMPLETED, ProgressStatus.MASTERED)]
	first_completion = min((p.last_access_date for p in completed), default=None)
	perfect_dates = [
		r.last_completion_date
		for p in progress.values()
		for r in p.assessment_results
		if r.best_score >= 100
	]
	seeker_progress = min(100, round(len(completed) * 100 / KNOWLEDGE_SEEKER_TARGET))
	return [
		Achievement(
			id="first-steps",
			title="First Steps",
			description="Completed your first learning module",
			icon_url="/icons/achievements/first_steps.svg",
			criteria="Complete any learning module",
			date_earned=first_completion,
			progress=100 if completed else 0,
			category="completion",
			rarity="common",
		),
		Achievement(
			id="knowledge-seeker",
			title="Knowledge Seeker",
			description=f"Completed {KNOWLEDGE_SEEKER_TARGET} learning modules",
			icon_url="/icons/achievements/knowledge_seeker.svg",
			criteria=f"Complete {KNOWLEDGE_SEEKER_TARGET} learning modules",
			date_earned=max(p.last_access_date for p in completed) if len(completed) >= KNOWLEDGE_SEEKER_TARGET else None,
			progress=seeker_progress,
			category="milestone",
			rarity="uncommon",
		),
		Achievement(
			id="perfect-score",
			title="Perfect Score",
			description="Achieved 100% on an assessment",
			icon_url="/icons/achievements/perfect_score.svg",
			criteria="Score 100% on any assessment",
			date_earned=min(perfect_dates, default=None),
			progress=100 if perfect_dates else 0,
			category="mastery",
			rarity="rare",
		),
	]


_CONTENT_TEMPLATES: Dict[LearningStyle, str] = {
	LearningStyle.VISUAL: (
		'<div class="visual-content" data-activity="{activity_id}">'
		"<h2>Visual Representation of Key Concepts</h2>"
		'<img src="/images/modules/{module_id}/concept_map.svg" alt="Concept map" />'
		'<video controls><source src="/videos/modules/{module_id}/visual_explanation.mp4" type="video/mp4" /></video>'
		"</div>"
	),
	LearningStyle.AUDITORY: (
		'<div class="auditory-content" data-activity="{activity_id}">'
		"<h2>Audio Explanations of Key Concepts</h2>"
		'<audio controls><source src="/audio/modules/{module_id}/introduction.mp3" type="audio/mpeg" /></audio>'
		"<h3>Discussion Points</h3><p>Consider these questions as you listen.</p>"
		"</div>"
	),
	LearningStyle.READING_WRITING: (
		'<div class="reading-writing-content" data-activity="{activity_id}">'
		"<h2>Detailed Text Explanation of Key Concepts</h2>"
		'<article src="/texts/modules/{module_id}/overview.html"></article>'
		"<h3>Writing Prompts</h3><p>Summarise the key ideas in your own words.</p>"
		"</div>"
	),
	LearningStyle.KINESTHETIC: (
		'<div class="kinesthetic-content" data-activity="{activity_id}">'
		"<h2>Interactive Learning Activities</h2>"
		'<button class="start-activity" data-module="{module_id}">Start Hands-on Exercise</button>'
		"<h3>Role-Play Scenario</h3><p>Act out the scenario with a partner, then reflect.</p>"
		"</div>"
	),
	LearningStyle.MULTIMODAL: (
		'<div class="multimodal-content" data-activity="{activity_id}">'
		"<h2>Multimodal Learning Experience</h2>"
		'<img src="/images/modules/{module_id}/concept_map.svg" alt="Concept map" />'
		'<audio controls><source src="/audio/modules/{module_id}/introduction.mp3" type="audio/mpeg" /></audio>'
		'<button class="start-activity" data-module="{module_id}">Start Hands-on Exercise</button>'
		"</div>"
	),
}


def get_adapted_content(module_id: str, learning_style: LearningStyle | str, activity_id: str) -> str:
	get_module(module_id)
	try:
		style = LearningStyle(learning_style)
	except ValueError:
		style = LearningStyle.MULTIMODAL
	return _CONTENT_TEMPLATES[style].format(
		module_id=html.escape(module_id, quote=True),
		activity_id=html.escape(activity_id, quote=True),
	)


def save_assessment(db: Session, user_id: str, answers: Dict[str, LearningStyle], result) -> LearningStyleAssessment:
	row = LearningStyleAssessment(
		user_id=user_id,
		visual=result.visual,
		auditory=result.auditory,
		reading_writing=result.reading_writing,
		kinesthetic=result.kinesthetic,
		primary_style=result.primary_style.value,
		secondary_style=result.secondary_style.value if result.secondary_style else None,
		is_multimodal=result.is_multimodal,
		answers_json=json.dumps({k: LearningStyle(v).value for k, v in answers.items()}),
	)
	db.add(row)
	db.commit()
	db.refresh(row)
	return row
