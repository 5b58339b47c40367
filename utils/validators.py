"""
Input validation utilities for the analytics API
"""
from typing import Dict, List, Any, Tuple
import re

from utils.error_handler import ValidationError

MAX_HINT_LENGTH = 100
MAX_USER_ID_LENGTH = 64

# ObjectIds and opaque ids issued by the auth service
_USER_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')


def validate_user_id(user_id: Any) -> str:
    """
    Validate the caller id supplied by the upstream auth layer

    Args:
        user_id: Raw header value

    Returns:
        The stripped user id

    Raises:
        ValidationError: If the id is missing or malformed
    """
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError(
            message="User id required",
            details={'expected_header': 'X-User-Id'}
        )

    user_id = user_id.strip()
    if len(user_id) > MAX_USER_ID_LENGTH or not _USER_ID_PATTERN.match(user_id):
        raise ValidationError(
            message="Invalid user id",
            details={'expected_header': 'X-User-Id'}
        )

    return user_id


def validate_analytics_query(args: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate query-string hints for the analytics endpoints

    Args:
        args: Mapping of query parameters

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    for field in ('careerId', 'career', 'role'):
        value = args.get(field)
        if value is None:
            continue
        if not isinstance(value, str):
            errors.append(f"{field} must be a string")
        elif len(value) > MAX_HINT_LENGTH:
            errors.append(f"{field} exceeds maximum length of {MAX_HINT_LENGTH} characters")

    is_valid = len(errors) == 0
    return is_valid, errors


def sanitize_text_input(text: str, max_length: int = MAX_HINT_LENGTH) -> str:
    """
    Sanitize text input by removing excessive whitespace and limiting length

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not isinstance(text, str):
        return ""

    text = re.sub(r'\s+', ' ', text.strip())

    if len(text) > max_length:
        text = text[:max_length]

    return text
