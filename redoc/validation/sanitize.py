# redoc/validation/sanitize.py
"""
Input sanitization utilities.

Best-effort redaction of secrets before text is sent to a third-party model,
and normalization of branch names into filesystem-safe slugs.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

REDACTION = "[REDACTED]"


@dataclass(frozen=True)
class SanitizationResult:
    text: str
    redactions: int


def _redact_pem(match: re.Match) -> str:
    lines = match.group(0).split("\n")
    return f"{lines[0]}\n{REDACTION}\n{lines[-1]}"


# Conservative on purpose: only known token shapes and secret-like names,
# never a blanket key=value wipe.
_PATTERNS: list[tuple[re.Pattern, object]] = [
    (
        re.compile(r"-----BEGIN ([A-Z ]*?)PRIVATE KEY-----[\s\S]*?-----END \1PRIVATE KEY-----"),
        _redact_pem,
    ),
    (re.compile(r"\bghp_[A-Za-z0-9]{30,}\b"), REDACTION),
    (re.compile(r"\bgithub_pat_[A-Za-z0-9_]{50,}\b"), REDACTION),
    (re.compile(r"\bgsk_[A-Za-z0-9]{20,}\b"), REDACTION),
    (re.compile(r"\bsk-[A-Za-z0-9]{20,}\b"), REDACTION),
    (re.compile(r"\bxox[baprs]-[A-Za-z0-9-]{10,}\b"), REDACTION),
    (re.compile(r"\bAKIA[0-9A-Z]{16}\b"), REDACTION),
    (re.compile(r"\beyJ[A-Za-z0-9_\-]+=*\.[A-Za-z0-9_\-]+=*\.[A-Za-z0-9_\-]+=*"), REDACTION),
    (
        re.compile(r"Authorization:\s*Bearer\s+(?!\[REDACTED\])[^\s'\"]+", re.IGNORECASE),
        f"Authorization: Bearer {REDACTION}",
    ),
    (re.compile(r"Bearer\s+(?!\[REDACTED\])[^\s'\"]+", re.IGNORECASE), f"Bearer {REDACTION}"),
    (
        re.compile(
            r"\b([A-Z0-9_]*?(?:API|ACCESS|SECRET|TOKEN|KEY|PASSWORD)[A-Z0-9_]*?)"
            r"\s*=\s*(['\"]?)(?!\[REDACTED\])([^'\"\n]+)\2"
        ),
        lambda m: f"{m.group(1)}={m.group(2)}{REDACTION}{m.group(2)}",
    ),
]


def sanitize_for_ai(text: str, enabled: bool = True) -> SanitizationResult:
    """
    Redact common secret and token formats from text.

    Args:
        text: Commit messages, file lists, diffs or developer answers
        enabled: When False the text is returned untouched

    Returns:
        SanitizationResult with the redacted text and the number of redactions
    """
    if not text:
        return SanitizationResult(text="", redactions=0)
    if not enabled:
        return SanitizationResult(text=text, redactions=0)

    current = text
    redactions = 0
    for pattern, replacement in _PATTERNS:
        current, count = pattern.subn(replacement, current)
        redactions += count

    if redactions:
        logger.info(f"Redacted {redactions} secret(s) before sending to AI provider")
    return SanitizationResult(text=current, redactions=redactions)


def slugify_branch(branch: str, max_length: int = 80) -> str:
    """
    Turn a branch name into a single safe path component.

    'feature/Add-Login' -> 'feature-add-login'. Empty results become 'detached'.
    """
    slug = re.sub(r"[^a-z0-9_-]+", "-", branch.strip().lower())
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    if not slug:
        return "detached"
    return slug[:max_length].rstrip("-")
