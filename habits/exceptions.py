class HabitTrackerError(Exception):
    """Base class for caller-visible failures raised by the habit services."""

    code = "error"
    default_message = "Habit tracker error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class InvalidArgument(HabitTrackerError):
    code = "invalid_argument"
    default_message = "Invalid argument"


class NotFound(HabitTrackerError):
    code = "not_found"
    default_message = "Not found"


class DuplicateCompletion(HabitTrackerError):
    code = "duplicate_completion"
    default_message = "Habit already completed for this date"


class DuplicateHabit(HabitTrackerError):
    code = "duplicate_habit"
    default_message = "You already have an active habit with this name"


class DuplicateFollow(HabitTrackerError):
    code = "duplicate_follow"
    default_message = "You are already following this user"


class SelfFollow(HabitTrackerError):
    code = "self_follow"
    default_message = "You cannot follow yourself"


class InvalidWindow(HabitTrackerError):
    code = "invalid_window"
    default_message = "Unknown leaderboard window"


class AuthenticationRequired(HabitTrackerError):
    code = "authentication_required"
    default_message = "Authentication required"
