"""Error types raised by the site access review tooling."""

from typing import Optional


class SiteReviewError(Exception):
    """Base class for every error the run can report."""


class PrivilegeError(SiteReviewError):
    pass


class ModuleError(SiteReviewError):
    pass


class AdminConnectionError(SiteReviewError):
    pass


class InputError(SiteReviewError):
    pass


class AdminAPIError(SiteReviewError):
    """A call against the admin endpoint failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(AdminAPIError):
    """Starting a review for one site failed. Never aborts a run."""
