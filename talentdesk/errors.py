"""
Error types shared by the scheduling, assignment and backend layers.

ValidationError is raised before anything is sent to the backend.
HttpError and NetworkError come from the backend client and are shown
to the user the same way.
"""
from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Error codes understood by the frontend."""

    # Date validation errors
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    DATE_OUT_OF_RANGE = "DATE_OUT_OF_RANGE"
    DUPLICATE_DATES = "DUPLICATE_DATES"

    # Assignment errors
    ESCORT_DOUBLE_BOOKING = "ESCORT_DOUBLE_BOOKING"
    TALENT_NOT_SCHEDULED = "TALENT_NOT_SCHEDULED"
    MAX_ESCORTS_EXCEEDED = "MAX_ESCORTS_EXCEEDED"
    SLOT_NOT_FOUND = "SLOT_NOT_FOUND"
    SLOT_NOT_REMOVABLE = "SLOT_NOT_REMOVABLE"
    FIELD_BUSY = "FIELD_BUSY"

    # Group errors
    DUPLICATE_MEMBER_NAMES = "DUPLICATE_MEMBER_NAMES"
    INVALID_MEMBER_DATA = "INVALID_MEMBER_DATA"
    GROUP_SIZE_EXCEEDED = "GROUP_SIZE_EXCEEDED"

    # Network and system errors
    NETWORK_ERROR = "NETWORK_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"


USER_MESSAGES = {
    ErrorCode.INVALID_DATE_FORMAT: "Please enter a valid date in the correct format.",
    ErrorCode.INVALID_DATE_RANGE: "The project end date must not be before its start date.",
    ErrorCode.DATE_OUT_OF_RANGE: (
        "The selected date is outside the project date range. "
        "Please choose a date within the project timeline."
    ),
    ErrorCode.DUPLICATE_DATES: "You have selected the same date multiple times. Please remove duplicate dates.",
    ErrorCode.ESCORT_DOUBLE_BOOKING: (
        "This escort is already assigned to another talent or group on this day. "
        "Please choose a different escort or remove the existing assignment."
    ),
    ErrorCode.TALENT_NOT_SCHEDULED: (
        "Cannot assign an escort to talent who is not scheduled for this day. "
        "Please schedule the talent first."
    ),
    ErrorCode.MAX_ESCORTS_EXCEEDED: "You have exceeded the maximum number of escorts allowed for this assignment.",
    ErrorCode.SLOT_NOT_FOUND: "That assignment no longer exists. Please refresh and try again.",
    ErrorCode.SLOT_NOT_REMOVABLE: "The primary escort assignment cannot be removed.",
    ErrorCode.FIELD_BUSY: "Changes are being saved. Please wait a moment.",
    ErrorCode.DUPLICATE_MEMBER_NAMES: (
        "Group members must have unique names. Please ensure all member names are different."
    ),
    ErrorCode.INVALID_MEMBER_DATA: "Some group member information is invalid. Please check names and roles.",
    ErrorCode.GROUP_SIZE_EXCEEDED: "Groups cannot have more than 20 members. Please reduce the number of members.",
    ErrorCode.NETWORK_ERROR: (
        "Unable to connect to the server. Please check your internet connection and try again."
    ),
    ErrorCode.UNAUTHORIZED: (
        "You don't have permission to perform this action. Please contact your administrator."
    ),
    ErrorCode.PROJECT_NOT_FOUND: (
        "The project could not be found. It may have been deleted or you may not have access to it."
    ),
    ErrorCode.VALIDATION_ERROR: "Some information is invalid. Please check your entries and try again.",
}

SEVERITY = {
    ErrorCode.INVALID_DATE_FORMAT: "low",
    ErrorCode.DUPLICATE_DATES: "low",
    ErrorCode.DUPLICATE_MEMBER_NAMES: "low",
    ErrorCode.INVALID_MEMBER_DATA: "low",
    ErrorCode.FIELD_BUSY: "low",
    ErrorCode.DATE_OUT_OF_RANGE: "medium",
    ErrorCode.ESCORT_DOUBLE_BOOKING: "medium",
    ErrorCode.TALENT_NOT_SCHEDULED: "medium",
    ErrorCode.SLOT_NOT_FOUND: "medium",
    ErrorCode.SLOT_NOT_REMOVABLE: "medium",
    ErrorCode.INVALID_DATE_RANGE: "high",
    ErrorCode.MAX_ESCORTS_EXCEEDED: "high",
    ErrorCode.GROUP_SIZE_EXCEEDED: "high",
    ErrorCode.VALIDATION_ERROR: "high",
    ErrorCode.NETWORK_ERROR: "critical",
    ErrorCode.HTTP_ERROR: "critical",
    ErrorCode.UNAUTHORIZED: "critical",
    ErrorCode.PROJECT_NOT_FOUND: "critical",
}

GENERIC_MESSAGE = "An unexpected error occurred. Please try again."


class TalentDeskError(Exception):
    """Base error with a code and a user-safe message."""

    def __init__(self, code: ErrorCode, message: str, field: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.field = field
        self.details = details

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code) or self.message or GENERIC_MESSAGE

    @property
    def severity(self) -> str:
        return SEVERITY.get(self.code, "medium")

    def to_dict(self) -> dict:
        payload = {
            "error": self.message,
            "code": self.code.value,
            "message": self.user_message,
        }
        if self.field:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(TalentDeskError):
    """Client-side validation failure; nothing was sent to the backend."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR,
                 field: Optional[str] = None, details: Any = None):
        super().__init__(code=code, message=message, field=field, details=details)


class InvalidRangeError(ValidationError):
    """Raised when a project's end date is before its start date."""

    def __init__(self, start_date, end_date):
        super().__init__(
            f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}",
            code=ErrorCode.INVALID_DATE_RANGE,
        )
        self.start_date = start_date
        self.end_date = end_date


class HttpError(TalentDeskError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, status_code: int, message: Optional[str] = None, code: Optional[ErrorCode] = None,
                 details: Any = None):
        if code is None:
            if status_code in (401, 403):
                code = ErrorCode.UNAUTHORIZED
            elif status_code == 404:
                code = ErrorCode.PROJECT_NOT_FOUND
            else:
                code = ErrorCode.HTTP_ERROR
        super().__init__(code=code, message=message or GENERIC_MESSAGE, details=details)
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        # A message supplied by the server wins over the canned text
        return self.message or GENERIC_MESSAGE


class NetworkError(TalentDeskError):
    """Raised when a request never completed (connection refused, timeout, ...)."""

    def __init__(self, message: str = "Request did not complete"):
        super().__init__(code=ErrorCode.NETWORK_ERROR, message=message)
