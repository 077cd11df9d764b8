from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class AnalysisEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = "other"  # person / organization / location / date
    mentions: List[str] = Field(default_factory=list)


class TimelineEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: str
    event: str


class DocumentAnalysis(BaseModel):
    """
    Structured output expected from the analysis prompt.
    Keys mirror the JSON the model is asked to produce (camelCase aliases).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    summary: str = Field(min_length=1)
    entities: List[AnalysisEntity] = Field(default_factory=list)
    timeline: List[TimelineEvent] = Field(default_factory=list)
    key_insights: List[str] = Field(default_factory=list, alias="keyInsights")
    categories: List[str] = Field(default_factory=list)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
