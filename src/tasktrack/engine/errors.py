"""TaskTrack errors."""


class TaskTrackError(Exception):
    """Base error for TaskTrack operations."""

    def __init__(self, message: str, code: str = "TASKTRACK_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(TaskTrackError):
    """Malformed input or a reference to something that does not exist."""

    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR")


class NotFoundError(TaskTrackError):
    """Referenced record does not exist."""

    def __init__(self, message: str):
        super().__init__(message, "NOT_FOUND")


class TaskNotFound(NotFoundError):
    """Task does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class UserNotFound(NotFoundError):
    """User does not exist."""

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class AuthError(TaskTrackError):
    """Missing or rejected credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)
        self.code = "UNAUTHORIZED"


class InvalidToken(AuthError):
    """Identity token is missing, malformed, expired or forged."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class InvalidCredentials(AuthError):
    """Email/password pair did not match."""

    def __init__(self):
        super().__init__("Invalid credentials")
