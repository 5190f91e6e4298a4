from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_prompt_service
from app.schemas import (
    FeedbackRequest,
    FeedbackResponse,
    InsightsResponse,
    LearningStatsResponse,
)
from app.security import require_api_key
from app.services.prompt_service import PromptService
from promptcore.learning.types import QueryFeedback

router = APIRouter(tags=["learning"])


@router.post(
    "/feedback",
    name="submit_feedback",
    dependencies=[Depends(require_api_key)],
    response_model=FeedbackResponse,
)
def submit_feedback(
    request: FeedbackRequest,
    svc: PromptService = Depends(get_prompt_service),
) -> FeedbackResponse:
    entry = svc.submit_feedback(
        request.original_prompt,
        request.generated_sql,
        QueryFeedback(feedback=request.feedback, comments=request.comments),
        request.user_id,
    )
    return FeedbackResponse(rating=entry.rating, pattern=entry.category)


@router.get("/insights", name="learning_insights", response_model=InsightsResponse)
def learning_insights(
    prompt: str = Query(..., description="Prompt or question to look up insights for"),
    sql: Optional[str] = Query(None, description="Generated SQL for confidence scoring"),
    base_confidence: Optional[float] = Query(None, ge=0.0, le=1.0),
    optimize: bool = False,
    svc: PromptService = Depends(get_prompt_service),
) -> InsightsResponse:
    view = svc.insights(
        prompt, generated_sql=sql, base_confidence=base_confidence, optimize=optimize
    )
    return InsightsResponse(
        **view.insights.__dict__,
        confidence=view.confidence,
        optimized_prompt=view.optimized_prompt,
    )


@router.get("/learning/stats", name="learning_stats", response_model=LearningStatsResponse)
def learning_stats(svc: PromptService = Depends(get_prompt_service)) -> LearningStatsResponse:
    return LearningStatsResponse(**svc.learning_statistics().__dict__)
