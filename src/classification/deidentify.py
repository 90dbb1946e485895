# best-effort de-identification of question text
# heuristic substitutions only, not a privacy guarantee

from typing import Iterable, Pattern, Tuple


def deidentify(text: str, substitutions: Iterable[Tuple[Pattern, str]]) -> str:
    """apply the ordered (pattern, placeholder) substitutions to the original text"""
    if not text:
        return ""
    anonymized = text
    for pattern, replacement in substitutions:
        anonymized = pattern.sub(replacement, anonymized)
    return anonymized
