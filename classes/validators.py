# validators.py
import re
from urllib.parse import urlparse

import bleach

from classes.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_length(field_name, value, max_length):
    if len(value) > max_length:
        raise ValidationError(f"{field_name} must be {max_length} characters or fewer.")


def validate_email(email):
    return isinstance(email, str) and EMAIL_PATTERN.match(email) is not None


def validate_password(password, min_length=8):
    """Returns (valid, message) for a candidate password."""
    if not isinstance(password, str):
        return False, "Password must be a string"
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters long"
    if not re.search(r"[A-Z]", password):
        return False, "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", password):
        return False, "Password must contain at least one lowercase letter"
    if not re.search(r"\d", password):
        return False, "Password must contain at least one number"
    return True, None


def validate_url(url):
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def sanitize_input(value):
    """Strips markup and surrounding whitespace from user supplied text."""
    if value is None:
        return None
    return bleach.clean(str(value), tags=[], strip=True).strip()
