"""Form validation for the view layer.

Each ``validate_*`` function returns a mapping of field name to message. An
empty mapping means the input may be handed to the entity store or session.
Fields are checked independently, so several messages can come back at once.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from abvote.service_layer.entity_store import MIN_PASSWORD_LENGTH

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_TITLE_LENGTH = 3
DATA_IMAGE_PREFIX = "data:image/"

FieldErrors = dict[str, str]


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def is_valid_image_ref(ref: str) -> bool:
    """Accept ``data:image/...`` URLs and absolute URLs with a scheme."""
    if not ref:
        return False
    if ref.startswith(DATA_IMAGE_PREFIX):
        return True
    try:
        parts = urlsplit(ref)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


def _check_email(email: str, problems: FieldErrors) -> None:
    if not email:
        problems["email"] = "Email is required"
    elif not is_valid_email(email):
        problems["email"] = "Please enter a valid email"


def validate_login(email: str, password: str) -> FieldErrors:
    problems: FieldErrors = {}
    _check_email(email.strip(), problems)
    if not password:
        problems["password"] = "Password is required"
    return problems


def validate_registration(
    email: str, password: str, password_confirm: str
) -> FieldErrors:
    """Check the sign-up form, including that both passwords agree."""
    problems: FieldErrors = {}
    _check_email(email.strip(), problems)

    if not password:
        problems["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        problems["password"] = (
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if not password_confirm:
        problems["password_confirm"] = "Please confirm your password"
    elif password != password_confirm:
        problems["password_confirm"] = "Passwords do not match"
    return problems


def validate_test_form(title: str, image_a: str, image_b: str) -> FieldErrors:
    """Check the create-test form. Values are trimmed before checking."""
    problems: FieldErrors = {}
    title = title.strip()
    if not title:
        problems["title"] = "Title is required"
    elif len(title) < MIN_TITLE_LENGTH:
        problems["title"] = f"Title must be at least {MIN_TITLE_LENGTH} characters"

    for field, label, value in (
        ("image_a", "Image A", image_a.strip()),
        ("image_b", "Image B", image_b.strip()),
    ):
        if not value:
            problems[field] = f"{label} is required (URL or file)"
        elif not is_valid_image_ref(value):
            problems[field] = "Please enter a valid URL or upload an image file"
    return problems
