from pydantic import BaseModel, Field
from typing import Optional


class FeedbackRequest(BaseModel):
    # strict: JSON numbers only, "7" and true are rejected
    score: float = Field(..., ge=0, le=10, strict=True)
    comment: Optional[str] = Field(None, max_length=2000)


class FeedbackResponse(BaseModel):
    success: bool = True
