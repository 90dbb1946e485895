from .intent_classifier import IntentClassifier, calculate_confidence
from .question_analyzer import QuestionAnalyzer
from .rules import load_rules

__all__ = ["IntentClassifier", "QuestionAnalyzer", "calculate_confidence", "load_rules"]
