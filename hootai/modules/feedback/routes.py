from fastapi import APIRouter, Depends
from hootai.modules.feedback.schemas import FeedbackRequest, FeedbackResponse
from hootai.modules.feedback.service import FeedbackService

router = APIRouter(prefix="/feedback", tags=["feedback"])


def get_feedback_service() -> FeedbackService:
    return FeedbackService()


@router.post("", response_model=FeedbackResponse)
async def submit_feedback(
    feedback: FeedbackRequest,
    service: FeedbackService = Depends(get_feedback_service)
):
    """Accept an NPS score (0-10) with an optional comment"""
    service.submit(feedback)
    return FeedbackResponse(success=True)
