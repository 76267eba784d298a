from __future__ import annotations


class RecipeBoxError(Exception):
    pass


class ValidationError(RecipeBoxError):
    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid {field}: {message}")
        self.field = field
        self.message = message


class UnauthorizedError(RecipeBoxError):
    def __init__(self, actor_id: str, recipe_id: str, action: str = "modify"):
        super().__init__(f"User {actor_id} is not allowed to {action} recipe {recipe_id}")
        self.actor_id = actor_id
        self.recipe_id = recipe_id
        self.action = action


class NotFoundError(RecipeBoxError):
    pass


class RecipeNotFoundError(NotFoundError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class ProfileNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__(f"Profile not found for user: {user_id}")
        self.user_id = user_id


class StoreError(RecipeBoxError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Store error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class StorageError(RecipeBoxError):
    pass


class StorageUploadError(StorageError):
    def __init__(self, attempts: list[str]):
        super().__init__(f"All upload strategies failed: {'; '.join(attempts) or 'no strategies configured'}")
        self.attempts = attempts


class AuthError(RecipeBoxError):
    def __init__(
        self,
        message: str = "Authentication failed",
        user_message: str = "Something went wrong while signing in. Please try again.",
    ):
        super().__init__(message)
        self.user_message = user_message


class EmailNotConfirmedError(AuthError):
    def __init__(self, message: str = "Email not confirmed"):
        super().__init__(
            message,
            user_message="Your email is not confirmed yet. Check your inbox for the confirmation link.",
        )


class InvalidCredentialsError(AuthError):
    def __init__(self, message: str = "Invalid login credentials"):
        super().__init__(
            message,
            user_message="Wrong email or password. Please try again.",
        )


class WeakPasswordError(AuthError):
    def __init__(self, reasons: list[str]):
        super().__init__(
            f"Weak password: {', '.join(reasons)}",
            user_message="Password must have at least 8 characters, an uppercase letter, a number and a special character.",
        )
        self.reasons = reasons
