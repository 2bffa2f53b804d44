import logging

from hootai.modules.feedback.schemas import FeedbackRequest

logger = logging.getLogger(__name__)


def nps_category(score: float) -> str:
    if score >= 9:
        return "promoter"
    if score >= 7:
        return "passive"
    return "detractor"


class FeedbackService:
    """NPS feedback is logged only; there is no feedback table."""

    def submit(self, feedback: FeedbackRequest) -> None:
        logger.info(
            "Received NPS feedback: score=%s category=%s has_comment=%s",
            feedback.score,
            nps_category(feedback.score),
            bool(feedback.comment and feedback.comment.strip()),
        )
