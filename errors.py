"""Exceptions raised by the storage, identity and post layers.

Every error carries a ``message`` that is safe to show to the visitor.
"""


class BlogError(Exception):
    message = "Something went wrong"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(BlogError):
    message = "Please fill out all required fields before submitting."


class DuplicateUsername(BlogError):
    message = "Username already taken"


class DuplicateEmail(BlogError):
    message = "Email already in use"


class PasswordMismatch(BlogError):
    message = "Passwords do not match"


class InvalidCredentials(BlogError):
    message = "Invalid username/email or password"


class NotFound(BlogError):
    message = "Post not found"


class StorageError(BlogError):
    message = "Stored data could not be read"


class ConfigError(BlogError):
    message = "Invalid configuration"
