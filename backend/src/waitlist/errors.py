"""Exceptions raised across the waitlist package."""


class WaitlistError(Exception):
    """Base class for waitlist errors."""


class SubmissionFetchError(WaitlistError):
    """Reading submissions from the form service failed.

    Raised for network errors, timeouts, non-2xx responses, bodies that are
    not JSON, and envelopes whose status is not "success".
    """

    def __init__(self, message: str, status_code: int = None, error_code: str = None):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class SubmissionWriteError(WaitlistError):
    """Posting a signup to the hosted form endpoint failed."""

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DuplicateEmailError(WaitlistError):
    """The email has already joined the waitlist."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("This email has already joined the waitlist.")
