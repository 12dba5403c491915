from __future__ import annotations
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..learning.progress import (
	Achievement,
	AssessmentResult,
	LearningRecommendation,
	ModuleProgress,
	get_adapted_content,
	get_learning_recommendations,
	get_user_achievements,
	save_assessment,
	track_module_progress,
)
from ..learning.styles import (
	LearningStyle,
	LearningStyleQuestion,
	LearningStyleResult,
	assess_learning_style,
	get_learning_style_questions,
)

router = APIRouter(prefix="/learning", tags=["learning"])


class AssessmentRequest(BaseModel):
	user_id: str = Field(min_length=1)
	answers: Dict[str, LearningStyle]


class AssessmentResponse(BaseModel):
	id: int
	result: LearningStyleResult


class ProgressRequest(BaseModel):
	user_id: str = Field(min_length=1)
	module_id: str
	activity_id: Optional[str] = None
	assessment_result: Optional[AssessmentResult] = None
	time_spent: Optional[int] = Field(default=None, ge=0)


@router.get("/questions", response_model=List[LearningStyleQuestion])
def questions():
	return get_learning_style_questions()


@router.post("/assessment", response_model=AssessmentResponse)
def assessment(req: AssessmentRequest, db: Session = Depends(get_db)):
	try:
		result = assess_learning_style(req.answers)
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))
	row = save_assessment(db, req.user_id, req.answers, result)
	return AssessmentResponse(id=row.id, result=result)


@router.post("/progress", response_model=ModuleProgress)
def progress(req: ProgressRequest, db: Session = Depends(get_db)):
	try:
		return track_module_progress(
			db,
			req.user_id,
			req.module_id,
			activity_id=req.activity_id,
			assessment_result=req.assessment_result,
			time_spent=req.time_spent,
		)
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))


@router.get("/recommendations/{user_id}", response_model=List[LearningRecommendation])
def recommendations(user_id: str, count: int = Query(default=3, ge=1, le=20), db: Session = Depends(get_db)):
	return get_learning_recommendations(db, user_id, count)


@router.get("/achievements/{user_id}", response_model=List[Achievement])
def achievements(user_id: str, db: Session = Depends(get_db)):
	return get_user_achievements(db, user_id)


@router.get("/content/{module_id}", response_class=HTMLResponse)
def content(module_id: str, style: str = "multimodal", activity_id: str = ""):
	try:
		return get_adapted_content(module_id, style, activity_id)
	except ValueError as e:
		raise HTTPException(status_code=404, detail=str(e))
