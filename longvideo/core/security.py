"""
Security Utilities
==================

Input sanitization and secret redaction for prompts, file names and logs.
"""

import re
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Sanitize a filename by removing dangerous characters.

    Args:
        filename: Original filename
        max_length: Maximum allowed length

    Returns:
        Sanitized filename safe for filesystem operations
    """
    if not filename:
        return "unnamed"

    # Keep: alphanumeric, underscore, hyphen, dot, space
    sanitized = re.sub(r"[^\w\-. ]", "_", filename)
    sanitized = re.sub(r"[_\s]+", "_", sanitized)
    sanitized = sanitized.strip("._- ")

    # Prevent hidden files
    if sanitized.startswith("."):
        sanitized = "_" + sanitized

    # Truncate if too long (preserve extension)
    if len(sanitized) > max_length:
        name = Path(sanitized).stem
        ext = Path(sanitized).suffix
        max_name_len = max_length - len(ext)
        sanitized = name[:max_name_len] + ext

    if not sanitized or sanitized in (".", ".."):
        sanitized = "unnamed"

    return sanitized


def sanitize_prompt(prompt: str, max_length: int = 2000) -> str:
    """
    Sanitize a prompt string before it is sent to a backend.

    Args:
        prompt: Composed scene prompt
        max_length: Maximum allowed length

    Returns:
        Sanitized prompt string
    """
    if not prompt:
        return ""

    # Remove control characters
    sanitized = "".join(char for char in prompt if char.isprintable() or char in "\n\t")

    injection_patterns = [
        r"ignore previous instructions",
        r"disregard above",
        r"system prompt",
        r"\[INST\]",
        r"\[/INST\]",
        r"<\|im_start\|>",
        r"<\|im_end\|>",
    ]

    for pattern in injection_patterns:
        sanitized = re.sub(pattern, "", sanitized, flags=re.IGNORECASE)

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]
        logger.warning(f"Prompt truncated from {len(prompt)} to {max_length} characters")

    return sanitized.strip()


def redact_api_key(text: str) -> str:
    """
    Redact bearer tokens and API keys from text.

    Args:
        text: Text that might contain credentials

    Returns:
        Text with credentials redacted
    """
    if not text:
        return text

    patterns = [
        (r"Bearer\s+[A-Za-z0-9_\-\.]+", "Bearer ***REDACTED***"),
        (r"(HUGGINGFACE_TOKEN|HF_TOKEN)=[^\s]+", r"\1=***REDACTED***"),
        # Hugging Face tokens
        (r"\bhf_[A-Za-z0-9]{8,}", "hf_***REDACTED***"),
        (r"api[_-]?key['\"]?\s*[:=]\s*['\"]?[A-Za-z0-9_\-]+", "api_key: ***REDACTED***"),
    ]

    result = text
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)

    return result
