"""
Payload validation as ordered rule chains.

A rule is a plain predicate paired with the message reported when it
fails. `check` walks a chain and stops at the first failing rule, so the
caller only ever sees one message, and rules later in a chain may assume
the earlier ones held (e.g. the length rules run after the type rule).
"""
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

EXPENSE_CATEGORIES = ("shopping", "health", "travel", "food", "entertainment")
MAX_AMOUNT = 1_000_000

Rule = Tuple[Callable[[Any], bool], str]

_NAME_RE = re.compile(r"^[a-zA-Z\s]+$", re.ASCII)
_PASSWORD_RE = re.compile(r"^(?=.*[A-Z])(?=.*[a-z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$", re.ASCII)
_DESCRIPTION_RE = re.compile(r"^[a-zA-Z0-9\s\-_.,!?@#$%^&*()]+$", re.ASCII)
_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    message: Optional[str] = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, message: str) -> "ValidationResult":
        return cls(ok=False, message=message)


def check(value: Any, rules: Iterable[Rule]) -> ValidationResult:
    for predicate, message in rules:
        if not predicate(value):
            return ValidationResult.failure(message)
    return ValidationResult.success()


def check_fields(payload: Dict[str, Any], chains: Dict[str, Iterable[Rule]]) -> ValidationResult:
    """Run each field's chain in declaration order; the first failure wins."""
    for field, rules in chains.items():
        result = check(payload.get(field), rules)
        if not result.ok:
            return result
    return ValidationResult.success()


# Predicates

def is_string(value: Any) -> bool:
    return isinstance(value, str)


def min_length(n: int) -> Callable[[str], bool]:
    return lambda value: len(value) >= n


def max_length(n: int) -> Callable[[str], bool]:
    return lambda value: len(value) <= n


def matches(pattern: "re.Pattern") -> Callable[[str], bool]:
    return lambda value: pattern.fullmatch(value) is not None


def is_email(value: str) -> bool:
    try:
        # test_environment also admits reserved *.test domains
        validate_email(value, check_deliverability=False, test_environment=True)
    except EmailNotValidError:
        return False
    return True


def has_no_spaces(value: str) -> bool:
    return " " not in value


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def is_positive(value: float) -> bool:
    return value > 0


def at_most(limit: float) -> Callable[[float], bool]:
    return lambda value: value <= limit


def is_known_category(value: str) -> bool:
    return value.lower() in EXPENSE_CATEGORIES


def is_not_blank(value: str) -> bool:
    return len(value.strip()) > 0


def is_not_numeric(value: str) -> bool:
    # plain decimal notation only; words like "nan" or "Infinity" are text
    return _NUMBER_RE.fullmatch(value.strip()) is None


# Chains

NAME_RULES = [
    (is_string, "Name must be a string"),
    (min_length(2), "Name must be at least 2 characters"),
    (max_length(50), "Name too long"),
    (matches(_NAME_RE), "Name can only contain letters and spaces"),
]

EMAIL_RULES = [
    (is_string, "Invalid email format"),
    (is_email, "Invalid email format"),
    (max_length(100), "Email too long"),
    (has_no_spaces, "Email cannot contain spaces"),
]

SIGNIN_PASSWORD_RULES = [
    (is_string, "Password must be a string"),
    (min_length(8), "Password must be at least 8 characters"),
    (max_length(14), "Password cannot exceed 14 characters"),
]

SIGNUP_PASSWORD_RULES = SIGNIN_PASSWORD_RULES + [
    (
        matches(_PASSWORD_RE),
        "Password must contain uppercase, lowercase, number and special character",
    ),
]

AMOUNT_RULES = [
    (is_number, "Amount must be a valid number"),
    (is_positive, "Amount must be positive"),
    (at_most(MAX_AMOUNT), "Amount cannot exceed 1,000,000"),
]

CATEGORY_RULES = [
    (is_string, "Category is required"),
    (min_length(1), "Category is required"),
    (max_length(20), "Category name too long"),
    (is_known_category, "Invalid category"),
]

DESCRIPTION_RULES = [
    (is_string, "Description is required"),
    (min_length(1), "Description is required"),
    (max_length(100), "Description too long"),
    (is_not_blank, "Description cannot be empty"),
    (is_not_numeric, "Description cannot be a number"),
    (matches(_DESCRIPTION_RE), "Description contains invalid characters"),
]


def validate_signup(payload: Dict[str, Any]) -> ValidationResult:
    return check_fields(
        payload,
        {"name": NAME_RULES, "email": EMAIL_RULES, "password": SIGNUP_PASSWORD_RULES},
    )


def validate_signin(payload: Dict[str, Any]) -> ValidationResult:
    return check_fields(payload, {"email": EMAIL_RULES, "password": SIGNIN_PASSWORD_RULES})


def validate_expense(payload: Dict[str, Any]) -> ValidationResult:
    return check_fields(
        payload,
        {"amount": AMOUNT_RULES, "category": CATEGORY_RULES, "description": DESCRIPTION_RULES},
    )
