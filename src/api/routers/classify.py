# classify router: rule-based classification of free-text clinical questions
# never fails on odd input: empty text comes back with default labels

import logging
from fastapi import APIRouter, Depends

from api.dependencies import get_classifier
from api.models.classification import (
    ClassificationResponse,
    ClassifyBatchRequest,
    ClassifyBatchResponse,
    ClassifyRequest,
)
from classification.intent_classifier import IntentClassifier

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/classify", tags=["classification"])


@router.post("", response_model=ClassificationResponse)
def classify_question(
    body: ClassifyRequest,
    classifier: IntentClassifier = Depends(get_classifier),
):
    analysis = classifier.analyze_comprehensive(body.text, body.timestamp)
    return ClassificationResponse.model_validate(analysis.to_dict())


@router.post("/batch", response_model=ClassifyBatchResponse)
def classify_batch(
    body: ClassifyBatchRequest,
    classifier: IntentClassifier = Depends(get_classifier),
):
    analyses = classifier.analyze_batch(body.texts, body.timestamp)
    results = [ClassificationResponse.model_validate(a.to_dict()) for a in analyses]
    return ClassifyBatchResponse(results=results, count=len(results))
