from .base_preprocessor import BasePreprocessor
from .question_preprocessor import QuestionPreprocessor

__all__ = [
    "BasePreprocessor",
    "QuestionPreprocessor",
]
