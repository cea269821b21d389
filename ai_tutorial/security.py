"""Input sanitization and content filtering for model-bound text.

Provides:
- InputSanitizer: rejects prompt-injection phrasings and suspicious keywords,
  strips template/markup characters and normalizes whitespace.
- ContentFilter: blocks profanity, harmful and spam-like content, and redacts
  personal information (SSN, card, email, phone numbers) without blocking.

Both work purely with regex lists; rejections raise SecurityRejectionError.
"""
import enum
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from ai_tutorial.config import settings
from ai_tutorial.exceptions import SecurityRejectionError

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.DOTALL

INJECTION_PATTERNS: List[re.Pattern] = [
    re.compile(r"ignore\s+(previous|all)\s+(instructions?|prompts?)", _FLAGS),
    re.compile(r"forget\s+(everything|all|previous)", _FLAGS),
    re.compile(r"new\s+(instructions?|prompts?)\s*:", _FLAGS),
    re.compile(r"system\s*:\s*you\s+are", _FLAGS),
    re.compile(r"assistant\s*:\s*", _FLAGS),
    re.compile(r"user\s*:\s*", _FLAGS),
    re.compile(r"\[\s*system\s*\]", _FLAGS),
    re.compile(r"\{\{.*system.*\}\}", _FLAGS),
    re.compile(r"act\s+as\s+(a\s+)?different", _FLAGS),
    re.compile(r"pretend\s+(you\s+are|to\s+be)", _FLAGS),
    re.compile(r"jailbreak", _FLAGS),
    re.compile(r"roleplay\s+as", _FLAGS),
]

SUSPICIOUS_KEYWORDS = [
    "jailbreak", "dan mode", "developer mode", "god mode", "admin mode",
    "root access", "bypass", "override", "unrestricted", "uncensored",
]

SPECIAL_CHARS = re.compile(r"[{}\[\]<>$#@]")
WHITESPACE = re.compile(r"\s+")


class InputSanitizer:
    """Validates and cleans user input before it reaches a model."""

    def __init__(self, max_length: Optional[int] = None):
        self.max_length = max_length or settings.MAX_INPUT_LENGTH

    def sanitize(self, text: Optional[str]) -> str:
        """Validate and clean user input.

        Args:
            text: Raw user input; None is treated as empty.

        Returns:
            str: Input with special characters removed and whitespace collapsed.

        Raises:
            SecurityRejectionError: If the input is too long, matches an injection
                pattern or keyword, or is empty after cleaning.
        """
        if text is None:
            return ""
        logger.debug("Sanitizing input of length %d", len(text))

        if len(text) > self.max_length:
            logger.warning("Input exceeds maximum length: %d > %d", len(text), self.max_length)
            raise SecurityRejectionError(
                f"Input exceeds maximum allowed length of {self.max_length} characters"
            )

        pattern = self._matching_pattern(text)
        if pattern is not None:
            logger.warning("Potential prompt injection detected with pattern: %s", pattern.pattern)
            raise SecurityRejectionError("Input contains potentially dangerous injection patterns")

        keyword = self._matching_keyword(text)
        if keyword is not None:
            logger.warning("Suspicious keyword detected: %s", keyword)
            raise SecurityRejectionError("Input contains suspicious keywords that are not allowed")

        cleaned = SPECIAL_CHARS.sub("", text)
        cleaned = WHITESPACE.sub(" ", cleaned).strip()
        if not cleaned:
            raise SecurityRejectionError("Input cannot be empty after sanitization")
        return cleaned

    def is_safe(self, text: Optional[str]) -> bool:
        """Read-only check: True if sanitize() would accept the input unmodified in intent."""
        if text is None or not text.strip():
            return False
        if len(text) > self.max_length:
            return False
        return self._matching_pattern(text) is None and self._matching_keyword(text) is None

    @staticmethod
    def safe_log_string(text: Optional[str]) -> str:
        """Truncate input for log lines."""
        if text is None:
            return "null"
        if len(text) <= 50:
            return text
        return text[:47] + "..."

    @staticmethod
    def _matching_pattern(text: str) -> Optional[re.Pattern]:
        for pattern in INJECTION_PATTERNS:
            if pattern.search(text):
                return pattern
        return None

    @staticmethod
    def _matching_keyword(text: str) -> Optional[str]:
        lowered = text.lower()
        for keyword in SUSPICIOUS_KEYWORDS:
            if keyword in lowered:
                return keyword
        return None


class ViolationType(enum.Enum):
    PROFANITY = "Offensive language detected"
    HARMFUL_CONTENT = "Harmful content detected"
    PERSONAL_INFO = "Personal information detected"
    SPAM = "Spam-like content detected"
    NONE = "No violations detected"

    @property
    def description(self) -> str:
        return self.value


@dataclass
class FilterResult:
    """Outcome of ContentFilter.filter.

    Attributes:
        blocked: Whether the content must not be processed.
        reason: Short explanation; None when nothing was found.
        filtered_content: Content after masking/redaction.
        violation: Category of the first violation found.
    """
    blocked: bool
    reason: Optional[str]
    filtered_content: Optional[str]
    violation: ViolationType = ViolationType.NONE


PROFANITY_PATTERNS: List[re.Pattern] = [
    re.compile(r"\b(damn|hell|crap|stupid|idiot|moron)\b", re.IGNORECASE),
    re.compile(r"\b(hate|kill|die|murder|violence)\b", re.IGNORECASE),
    re.compile(r"\b(sex|porn|adult|explicit)\b", re.IGNORECASE),
]

HARMFUL_KEYWORDS = [
    "bomb", "weapon", "drug", "illegal", "hack", "exploit", "virus",
    "malware", "scam", "fraud", "steal", "piracy", "terrorism",
]

PII_PATTERNS: List[re.Pattern] = [
    re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),  # SSN
    re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b"),  # card number
    re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),  # email
    re.compile(r"\b\d{3}-\d{3}-\d{4}\b"),  # phone
]

SPAM_PATTERNS: List[re.Pattern] = [
    re.compile(r"\b(buy now|click here|free money|get rich|lottery|winner)\b", re.IGNORECASE),
    re.compile(r"\b(viagra|cialis|penis|enlargement)\b", re.IGNORECASE),
    re.compile(r"\b(urgent|limited time|act now|don't wait)\b", re.IGNORECASE),
]

REDACTED = "[REDACTED]"
MASK = "***"


class ContentFilter:
    """Detects inappropriate material in requests and model responses."""

    def filter(self, content: Optional[str]) -> FilterResult:
        """Run all checks in order: profanity, harmful, personal info, spam.

        The first blocking check wins. Personal information never blocks; it is
        redacted and the redacted text is what later checks and callers see.
        """
        if content is None or not content.strip():
            return FilterResult(False, "Content is empty", content, ViolationType.NONE)
        logger.debug("Filtering content of length %d", len(content))

        for check in (self._check_profanity, self._check_harmful):
            result = check(content)
            if result.blocked:
                return result

        redaction = self._check_personal_info(content)
        spam = self._check_spam(redaction.filtered_content)
        if spam.blocked:
            return spam
        if redaction.violation is ViolationType.PERSONAL_INFO:
            return redaction

        logger.debug("Content filtering completed - no violations detected")
        return FilterResult(False, "Content approved", content, ViolationType.NONE)

    def is_safe(self, content: Optional[str]) -> bool:
        if content is None or not content.strip():
            return True
        return not self.filter(content).blocked

    def describe(self) -> str:
        return (
            f"Content Filter - Patterns: Profanity={len(PROFANITY_PATTERNS)}, "
            f"Harmful={len(HARMFUL_KEYWORDS)}, PII={len(PII_PATTERNS)}, Spam={len(SPAM_PATTERNS)}"
        )

    @staticmethod
    def _check_profanity(content: str) -> FilterResult:
        for pattern in PROFANITY_PATTERNS:
            if pattern.search(content):
                logger.warning("Profanity detected in content")
                return FilterResult(
                    True,
                    "Content contains inappropriate language",
                    pattern.sub(MASK, content),
                    ViolationType.PROFANITY,
                )
        return FilterResult(False, None, content)

    @staticmethod
    def _check_harmful(content: str) -> FilterResult:
        lowered = content.lower()
        for keyword in HARMFUL_KEYWORDS:
            if keyword in lowered:
                logger.warning("Harmful content detected: %s", keyword)
                return FilterResult(
                    True,
                    f"Content contains potentially harmful material: {keyword}",
                    content,
                    ViolationType.HARMFUL_CONTENT,
                )
        return FilterResult(False, None, content)

    @staticmethod
    def _check_personal_info(content: str) -> FilterResult:
        filtered = content
        found = False
        for pattern in PII_PATTERNS:
            if pattern.search(filtered):
                filtered = pattern.sub(REDACTED, filtered)
                found = True
        if found:
            logger.warning("Personal information detected in content")
            return FilterResult(
                False,
                "Personal information redacted from content",
                filtered,
                ViolationType.PERSONAL_INFO,
            )
        return FilterResult(False, None, content)

    @staticmethod
    def _check_spam(content: str) -> FilterResult:
        for pattern in SPAM_PATTERNS:
            if pattern.search(content):
                logger.warning("Spam-like content detected")
                return FilterResult(
                    True,
                    "Content appears to be spam or promotional material",
                    content,
                    ViolationType.SPAM,
                )
        return FilterResult(False, None, content)
