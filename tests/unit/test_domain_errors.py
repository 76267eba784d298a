from __future__ import annotations

import pytest

from recipe_box.app.domain.errors import (
    AuthError,
    EmailNotConfirmedError,
    InvalidCredentialsError,
    NotFoundError,
    ProfileNotFoundError,
    RecipeBoxError,
    RecipeNotFoundError,
    StorageError,
    StorageUploadError,
    StoreError,
    UnauthorizedError,
    ValidationError,
    WeakPasswordError,
)


class TestRecipeBoxError:
    def test_base_exception(self) -> None:
        error = RecipeBoxError("Base error")
        assert str(error) == "Base error"
        assert isinstance(error, Exception)


class TestValidationError:
    def test_includes_field_and_message(self) -> None:
        error = ValidationError("title", "title is required")
        assert "title" in str(error)
        assert error.field == "title"
        assert error.message == "title is required"
        assert isinstance(error, RecipeBoxError)


class TestUnauthorizedError:
    def test_includes_actor_and_recipe(self) -> None:
        error = UnauthorizedError("user-b", "recipe-1", "delete")
        assert "user-b" in str(error)
        assert "recipe-1" in str(error)
        assert "delete" in str(error)
        assert error.actor_id == "user-b"
        assert error.recipe_id == "recipe-1"

    def test_default_action(self) -> None:
        assert UnauthorizedError("u", "r").action == "modify"


class TestNotFoundErrors:
    def test_recipe_not_found(self) -> None:
        error = RecipeNotFoundError("abc-123")
        assert "abc-123" in str(error)
        assert error.recipe_id == "abc-123"
        assert isinstance(error, NotFoundError)

    def test_profile_not_found(self) -> None:
        error = ProfileNotFoundError("user-1")
        assert "user-1" in str(error)
        assert error.user_id == "user-1"
        assert isinstance(error, NotFoundError)


class TestStoreError:
    def test_includes_operation_and_reason(self) -> None:
        error = StoreError("insert_recipe", "connection reset")
        assert "insert_recipe" in str(error)
        assert "connection reset" in str(error)
        assert error.operation == "insert_recipe"
        assert error.reason == "connection reset"


class TestStorageUploadError:
    def test_lists_attempts(self) -> None:
        error = StorageUploadError(["user-folder: denied", "r2: timeout"])
        assert "user-folder: denied" in str(error)
        assert "r2: timeout" in str(error)
        assert isinstance(error, StorageError)

    def test_no_strategies(self) -> None:
        assert "no strategies configured" in str(StorageUploadError([]))


class TestAuthErrors:
    def test_generic_has_user_message(self) -> None:
        error = AuthError()
        assert str(error) == "Authentication failed"
        assert error.user_message

    @pytest.mark.parametrize(
        "error_cls, fragment",
        [
            (EmailNotConfirmedError, "not confirmed"),
            (InvalidCredentialsError, "Wrong email or password"),
        ],
    )
    def test_specific_user_messages(self, error_cls: type[AuthError], fragment: str) -> None:
        error = error_cls()
        assert fragment in error.user_message
        assert isinstance(error, AuthError)

    def test_weak_password_keeps_reasons(self) -> None:
        error = WeakPasswordError(["an uppercase letter", "a number"])
        assert error.reasons == ["an uppercase letter", "a number"]
        assert "uppercase" in str(error)
