"""Validation utilities"""

import re
from datetime import timedelta
from typing import Annotated

from pydantic import AfterValidator
from pydantic_core import PydanticCustomError

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9]([-_']?[a-zA-Z0-9])+$")
SLUG_PATTERN = re.compile(r"^[a-zA-Z0-9\-_]*$")

USERNAME_MIN_LENGTH = 2
USERNAME_MAX_LENGTH = 25
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 80
SLUG_MIN_LENGTH = 2
SLUG_MAX_LENGTH = 80

# Largest value a BIGINT column holds
BIGINT_MAX = 2**63 - 1


def is_valid_username(username: str) -> bool:
    """Letters and digits, optionally separated by single - _ or ' characters"""
    return (
        USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH
        and USERNAME_PATTERN.match(username) is not None
    )


def is_valid_password(password: str) -> bool:
    """Length bounds plus at least one lowercase, one uppercase and one digit"""
    return (
        PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH
        and any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(c.isdigit() for c in password)
    )


def is_valid_slug(slug: str) -> bool:
    return (
        SLUG_MIN_LENGTH <= len(slug) <= SLUG_MAX_LENGTH
        and SLUG_PATTERN.match(slug) is not None
    )


def validate_username(username: str) -> str:
    if not is_valid_username(username):
        raise PydanticCustomError(
            "username_format",
            "Username must be {min}-{max} letters or digits, optionally separated by - _ or '",
            {"min": USERNAME_MIN_LENGTH, "max": USERNAME_MAX_LENGTH},
        )
    return username


def validate_password(password: str) -> str:
    if not is_valid_password(password):
        raise PydanticCustomError(
            "password_format",
            "Password must be {min}-{max} characters and contain a lowercase letter, "
            "an uppercase letter and a digit",
            {"min": PASSWORD_MIN_LENGTH, "max": PASSWORD_MAX_LENGTH},
        )
    return password


def validate_duration(value: timedelta) -> timedelta:
    if value < timedelta(0):
        raise PydanticCustomError("duration_negative", "Time must not be negative")
    return value


def validate_slug(slug: str) -> str:
    if not is_valid_slug(slug):
        raise PydanticCustomError(
            "slug_format",
            "Slug must be {min}-{max} characters of letters, digits, - or _",
            {"min": SLUG_MIN_LENGTH, "max": SLUG_MAX_LENGTH},
        )
    return slug


Username = Annotated[str, AfterValidator(validate_username)]
Password = Annotated[str, AfterValidator(validate_password)]
Slug = Annotated[str, AfterValidator(validate_slug)]
Duration = Annotated[timedelta, AfterValidator(validate_duration)]
