"""Shared fixtures and fakes for the site access review tests."""

import pytest

from m365.sharepoint.errors import ModuleError, PrivilegeError, SubmissionError
from m365.sharepoint.spo_admin import SiteReviewStatus


class FakeEnvironment:
    def __init__(self, elevated=True, module_error=None):
        self.elevated = elevated
        self.module_error = module_error
        self.ensured = []

    def is_elevated(self):
        return self.elevated

    def require_elevated(self):
        if not self.elevated:
            raise PrivilegeError("This script must be run with administrator privileges.")

    def ensure_modules(self, modules=None):
        if self.module_error:
            raise ModuleError(self.module_error)
        self.ensured.append(modules)


class FakeAdminClient:
    def __init__(self, fail_for=(), reviews=None, list_error=None, connect_error=None, raise_for=None):
        self.fail_for = set(fail_for)
        self.raise_for = raise_for or {}
        self.reviews = reviews or []
        self.list_error = list_error
        self.connect_error = connect_error
        self.submitted = []
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.list_calls = 0

    def connect(self):
        self.connect_calls += 1
        if self.connect_error:
            raise self.connect_error

    def disconnect(self):
        self.disconnect_calls += 1

    def start_site_review(self, report_id, site_id, comment):
        self.submitted.append((report_id, site_id, comment))
        if site_id in self.raise_for:
            raise self.raise_for[site_id]
        if site_id in self.fail_for:
            raise SubmissionError(f"Start site review for {site_id} failed (400): bad site")

    def list_site_reviews(self):
        self.list_calls += 1
        if self.list_error:
            raise self.list_error
        return list(self.reviews)


@pytest.fixture
def fake_env():
    return FakeEnvironment()


@pytest.fixture
def fake_client():
    return FakeAdminClient()


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def sample_review():
    return SiteReviewStatus(
        review_id="rev-1",
        site_id="s1",
        initiated_at="2026-10-19T08:00:00Z",
        status="InProgress",
        admin_comment="Quarterly review",
        site_name="Finance",
        report_entity="PermissionedUsers",
    )


@pytest.fixture
def read_log(log_dir):
    def _read(filename="SiteAccessReview.log"):
        return (log_dir / filename).read_text(encoding="utf-8").splitlines()
    return _read
