# shared text cleanup for clinical question text
# keeps capitalization: the de-identification rules key off capitalized names

import logging
import re
import unicodedata

logger = logging.getLogger(__name__)


class BasePreprocessor:

    URL_PATTERN = re.compile(
        r'http[s]?://(?:[a-zA-Z]|[0-9]|[$-_@.&+]|[!*\\(\\),]|(?:%[0-9a-fA-F][0-9a-fA-F]))+'
    )
    EMAIL_PATTERN = re.compile(r'[\w\.-]+@[\w\.-]+\.\w+')
    WHITESPACE_PATTERN = re.compile(r'\s+')

    # curly quotes to straight quotes
    QUOTE_MAP = {
        '“': '"',
        '”': '"',
        '‘': "'",
        '’': "'",
        '«': '"',
        '»': '"',
    }

    def normalize_unicode(self, text: str) -> str:
        return unicodedata.normalize('NFC', text)

    def replace_urls(self, text: str) -> str:
        return self.URL_PATTERN.sub('<URL>', text)

    def replace_emails(self, text: str) -> str:
        return self.EMAIL_PATTERN.sub('<EMAIL>', text)

    def standardize_quotes(self, text: str) -> str:
        for fancy, standard in self.QUOTE_MAP.items():
            text = text.replace(fancy, standard)
        return text

    # questions are single paragraphs, so newlines collapse too
    def standardize_whitespace(self, text: str) -> str:
        return self.WHITESPACE_PATTERN.sub(' ', text).strip()

    def process(self, text: str) -> str:
        if not text or not isinstance(text, str):
            logger.debug("Skipping empty or non-string input")
            return ""

        original_len = len(text)
        text = self.normalize_unicode(text)
        text = self.replace_urls(text)
        text = self.replace_emails(text)
        text = self.standardize_quotes(text)
        text = self.standardize_whitespace(text)

        logger.debug("Preprocessed text: %d -> %d chars", original_len, len(text))
        return text
