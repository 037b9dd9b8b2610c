from src.app.services.password_policy import PasswordPolicyValidator, UserInfo
from src.app.services.security_config import PasswordPolicyConfig

ALICE = UserInfo(username="alice")


def test_common_password_without_special_char_is_invalid():
    result = PasswordPolicyValidator().validate("password1")

    assert not result.is_valid
    assert "This password is too common. Please choose a more unique password" in result.feedback
    assert "Password must contain at least one special character" in result.feedback
    assert "Password must contain at least one uppercase letter" in result.feedback


def test_strong_password_is_valid():
    result = PasswordPolicyValidator().validate("Tr0ub4dor&3xyz!", ALICE)

    assert result.is_valid
    assert result.feedback == []
    assert result.score == 100
    assert result.warnings == ["Password is strong"]


def test_password_containing_username_is_invalid():
    result = PasswordPolicyValidator().validate("alice123!", ALICE)

    assert not result.is_valid
    assert "Password should not contain personal information" in result.feedback
    assert "Contains username" in result.warnings


def test_email_local_part_and_names_are_checked_case_insensitively():
    user_info = UserInfo(email="Maria.Lopez@quizschool.com", first_name="Maria", last_name="Lopez")

    result = PasswordPolicyValidator().validate("XMARIA.LOPEZx9!", user_info)

    assert not result.is_valid
    assert {"Contains email address", "Contains first name", "Contains last name"} <= set(
        result.warnings
    )


def test_length_bounds():
    validator = PasswordPolicyValidator()

    short = validator.validate("Ab1!")
    long = validator.validate("Ab1!" + "x" * 125)

    assert "Password must be at least 8 characters long" in short.feedback
    assert "Password must not exceed 128 characters" in long.feedback
    assert not long.is_valid


def test_score_without_user_info():
    result = PasswordPolicyValidator().validate("Zebra#42")

    assert result.is_valid
    assert result.score == 98


def test_keyboard_pattern_lowers_score():
    result = PasswordPolicyValidator().validate("Qwerty#42xx")

    assert result.is_valid
    assert result.score == 93


def test_weak_password_label():
    result = PasswordPolicyValidator().validate("abc")

    assert not result.is_valid
    assert result.score == 22
    assert result.warnings[-1] == "Password is very weak"


def test_disabled_checks_do_not_gate():
    config = PasswordPolicyConfig(
        require_special_chars=False,
        prevent_common_passwords=False,
        prevent_user_info=False,
    )

    result = PasswordPolicyValidator(config).validate("Password1", UserInfo(username="password"))

    assert result.is_valid
