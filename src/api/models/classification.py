# classification models: request/response schemas for /classify
# label values are the taxonomy enum values (e.g. "dosing", "rare_case")

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ClassifyRequest(BaseModel):
    text: Optional[str] = ""
    timestamp: Optional[datetime] = None


class ClassifyBatchRequest(BaseModel):
    texts: list[Optional[str]] = Field(default_factory=list)
    timestamp: Optional[datetime] = None


class LabelResult(BaseModel):
    primary_type: str = Field(..., alias="primaryType")
    secondary_types: list[str] = Field(default_factory=list, alias="secondaryTypes")
    confidence: float

    model_config = {"populate_by_name": True}


class IntentResponse(LabelResult):
    question_text: str = Field("", alias="questionText")


class DecisionPointResponse(LabelResult):
    context: str = ""
    urgency: str


class InformationGapResponse(LabelResult):
    topic_area: str = Field(..., alias="topicArea")
    severity: str


class WorkflowResponse(LabelResult):
    patient_context: str = Field(..., alias="patientContext")


class ClassificationResponse(BaseModel):
    """all four taxonomies for one question"""
    intent: IntentResponse
    decision_point: DecisionPointResponse = Field(..., alias="decisionPoint")
    information_gap: InformationGapResponse = Field(..., alias="informationGap")
    workflow: WorkflowResponse
    timestamp: Optional[str] = None
    text_length: int = Field(0, alias="textLength")
    anonymized_text: str = Field("", alias="anonymizedText")

    model_config = {"populate_by_name": True}


class ClassifyBatchResponse(BaseModel):
    results: list[ClassificationResponse] = Field(default_factory=list)
    count: int = 0
