import pytest

from app.core.validation import (
    ValidationResult,
    check,
    min_length,
    validate_expense,
    validate_signin,
    validate_signup,
)

VALID_SIGNUP = {"name": "Asha Rao", "email": "asha@example.com", "password": "Secret@123"}
VALID_EXPENSE = {"amount": 250.5, "category": "Food", "description": "Weekly groceries"}


def test_check_stops_at_first_failure():
    rules = [(min_length(3), "too short"), (lambda v: False, "never reached")]
    assert check("ab", rules) == ValidationResult(ok=False, message="too short")
    assert check("abc", rules[:1]).ok


def test_valid_payloads_pass():
    assert validate_signup(VALID_SIGNUP).ok
    assert validate_signin({"email": "asha@example.com", "password": "whatever1"}).ok
    assert validate_expense(VALID_EXPENSE).ok


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("name", "A", "Name must be at least 2 characters"),
        ("name", "A" * 51, "Name too long"),
        ("name", "R2D2", "Name can only contain letters and spaces"),
        ("email", "not-an-email", "Invalid email format"),
        ("email", ("a" * 60) + "@" + ("b" * 40) + ".com", "Email too long"),
        ("password", "Ab@1", "Password must be at least 8 characters"),
        ("password", "Abcdefgh@12345678", "Password cannot exceed 14 characters"),
        ("password", "secret@123", "Password must contain uppercase, lowercase, number and special character"),
        ("password", "Secret 123@", "Password must contain uppercase, lowercase, number and special character"),
    ],
)
def test_signup_rules(field, value, message):
    result = validate_signup({**VALID_SIGNUP, field: value})
    assert not result.ok
    assert result.message == message


def test_signup_reports_earliest_field_first():
    result = validate_signup({"name": "A", "email": "bad", "password": "x"})
    assert result.message == "Name must be at least 2 characters"


def test_signin_password_has_no_complexity_rule():
    assert validate_signin({"email": "asha@example.com", "password": "lowercase"}).ok


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("amount", "100", "Amount must be a valid number"),
        ("amount", True, "Amount must be a valid number"),
        ("amount", 0, "Amount must be positive"),
        ("amount", -5, "Amount must be positive"),
        ("amount", 1_000_000.01, "Amount cannot exceed 1,000,000"),
        ("category", "", "Category is required"),
        ("category", "x" * 21, "Category name too long"),
        ("category", "rent", "Invalid category"),
        ("description", "", "Description is required"),
        ("description", "d" * 101, "Description too long"),
        ("description", "   ", "Description cannot be empty"),
        ("description", "1234", "Description cannot be a number"),
        ("description", "12.5", "Description cannot be a number"),
        ("description", "coffee <script>", "Description contains invalid characters"),
    ],
)
def test_expense_rules(field, value, message):
    result = validate_expense({**VALID_EXPENSE, field: value})
    assert result == ValidationResult(ok=False, message=message)


def test_expense_boundaries():
    assert validate_expense({**VALID_EXPENSE, "amount": 1_000_000}).ok
    assert validate_expense({**VALID_EXPENSE, "category": "ENTERTAINMENT"}).ok
    assert validate_expense({**VALID_EXPENSE, "description": "Taxi #42, airport (late!)"}).ok


@pytest.mark.parametrize("description", ["nan", "NaN", "inf", "Infinity", "-Infinity"])
def test_number_like_words_are_valid_descriptions(description):
    assert validate_expense({**VALID_EXPENSE, "description": description}).ok


@pytest.mark.parametrize("description", ["+3", "1e5", ".5", " 7. "])
def test_decimal_notation_is_rejected_as_description(description):
    result = validate_expense({**VALID_EXPENSE, "description": description})
    assert result.message == "Description cannot be a number"


def test_non_ascii_digits_and_spaces_are_rejected():
    password = validate_signup({**VALID_SIGNUP, "password": "Secret@٣٤"})
    assert password.message == "Password must contain uppercase, lowercase, number and special character"
    name = validate_signup({**VALID_SIGNUP, "name": "Asha\u00a0Rao"})
    assert name.message == "Name can only contain letters and spaces"
    description = validate_expense({**VALID_EXPENSE, "description": "Lunch\u2003out"})
    assert description.message == "Description contains invalid characters"


def test_reserved_test_domain_is_a_valid_email():
    assert validate_signin({"email": "dev@corp.test", "password": "whatever1"}).ok
