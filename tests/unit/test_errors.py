"""Unit tests for identity failure kinds and result types."""

import importlib

import pytest

from jobportal.kernel.identity.errors import AuthError, AuthErrorKind, AuthResult, DuplicateKeyError


@pytest.mark.parametrize(
    "module",
    [
        "jobportal.kernel.identity",
        "jobportal.kernel.identity.errors",
        "jobportal.notifications",
        "jobportal.api.deps",
        "jobportal.main",
    ],
)
def test_packages_import(module):
    assert importlib.import_module(module) is not None


def test_async_engine_support_installed():
    # sqlalchemy[asyncio] pulls in greenlet, which AsyncSession needs
    assert importlib.import_module("greenlet") is not None


def test_auth_error_defaults():
    error = AuthError(kind=AuthErrorKind.NOT_FOUND, message="User not found")

    assert error.field is None
    assert error.field_errors == {}


def test_field_errors_are_not_shared_between_instances():
    first = AuthError(kind=AuthErrorKind.VALIDATION_FAILED, message="a")
    second = AuthError(kind=AuthErrorKind.VALIDATION_FAILED, message="b")

    assert first.field_errors is not second.field_errors


def test_failure_copies_field_errors():
    errors = {"email": "Email is required"}
    result = AuthResult.failure(AuthErrorKind.VALIDATION_FAILED, "bad", field_errors=errors)
    errors["password"] = "added later"

    assert not result.ok
    assert result.error.field_errors == {"email": "Email is required"}


def test_success_result():
    result = AuthResult.success(42)

    assert result.ok
    assert result.value == 42
    assert result.error is None


def test_duplicate_key_error_names_field():
    exc = DuplicateKeyError("username")

    assert exc.field == "username"
    assert exc.kind is AuthErrorKind.DUPLICATE_KEY
