from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

AnalysisType = Literal["url", "file"]


class AnalysisRequest(BaseModel):
    # Presence and value are checked by the service so both failures map to 400
    type: Optional[str] = None
    content: Optional[str] = None
    file_name: Optional[str] = Field(None, alias="fileName")

    model_config = ConfigDict(populate_by_name=True)


class Problem(BaseModel):
    title: str
    description: str
    error: Optional[List[str]] = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class Issue(BaseModel):
    id: int
    title: str
    observation: str = ""
    impact: str = ""
    suggestion: str = ""
    estimation: str = ""
    aptestplan: str = ""
    priority_list: str = Field("", alias="priorityList")

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class AnalysisResult(BaseModel):
    summary: str
    problems: List[Problem] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)
