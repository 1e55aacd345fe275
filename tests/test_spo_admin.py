"""Tests for spo_admin.py: connect / submit / list against a mocked requests.Session."""

from unittest.mock import MagicMock

import pytest
import requests

from m365.sharepoint.errors import AdminAPIError, AdminConnectionError, SubmissionError
from m365.sharepoint.spo_admin import SiteReviewStatus, SPOAdminClient, build_session

ADMIN_URL = "https://contoso-admin.sharepoint.com"


def _response(status_code=200, json_data=None, text=""):
    r = MagicMock(spec=requests.Response)
    r.status_code = status_code
    r.text = text
    if isinstance(json_data, Exception):
        r.json.side_effect = json_data
    else:
        r.json.return_value = json_data
    return r


def _client(session=None, token="tok"):
    session = session or MagicMock(spec=requests.Session)
    session.headers = {}
    return SPOAdminClient(ADMIN_URL + "/", token, session=session), session


def _connected_client():
    client, session = _client()
    session.post.return_value = _response(json_data={"FormDigestValue": "0xDIGEST"})
    client.connect()
    session.post.reset_mock()
    return client, session


class TestBuildSession:
    def test_bearer_headers(self):
        s = build_session("abc")
        assert s.headers["Authorization"] == "Bearer abc"
        assert s.headers["Accept"].startswith("application/json")
        assert s.verify is True

    def test_no_retries(self):
        s = build_session("abc")
        assert s.get_adapter("https://x").max_retries.total == 0

    def test_verify_off(self):
        assert build_session("abc", verify_ssl=False).verify is False


class TestConnect:
    def test_stores_digest(self):
        client, session = _client()
        session.post.return_value = _response(json_data={"FormDigestValue": "0xDIGEST"})
        client.connect()

        session.post.assert_called_once_with(f"{ADMIN_URL}/_api/contextinfo", timeout=60)
        assert client.form_digest == "0xDIGEST"
        assert session.headers["X-RequestDigest"] == "0xDIGEST"
        assert client.connected

    def test_missing_token(self):
        client, session = _client(token="")
        with pytest.raises(AdminConnectionError, match="access token"):
            client.connect()
        session.post.assert_not_called()

    def test_unauthorized(self):
        client, session = _client()
        session.post.return_value = _response(401, text="Unauthorized")
        with pytest.raises(AdminConnectionError, match="401"):
            client.connect()

    def test_network_error(self):
        client, session = _client()
        session.post.side_effect = requests.ConnectionError("name resolution failed")
        with pytest.raises(AdminConnectionError, match="name resolution failed"):
            client.connect()

    def test_no_digest(self):
        client, session = _client()
        session.post.return_value = _response(json_data={})
        with pytest.raises(AdminConnectionError, match="digest"):
            client.connect()

    def test_non_json(self):
        client, session = _client()
        session.post.return_value = _response(json_data=ValueError("no json"))
        with pytest.raises(AdminConnectionError):
            client.connect()


class TestDisconnect:
    def test_closes_session(self):
        client, session = _connected_client()
        client.disconnect()
        session.close.assert_called_once()
        assert not client.connected
        assert client.session is None


class TestStartSiteReview:
    def test_posts_payload(self):
        client, session = _connected_client()
        session.post.return_value = _response(201)
        client.start_site_review("rep-1", "site-1", "please review")

        session.post.assert_called_once_with(
            f"{ADMIN_URL}/_api/SPO.Tenant/DataAccessGovernance/SiteReviews",
            json={"reportId": "rep-1", "siteId": "site-1", "comment": "please review"},
            timeout=60,
        )

    def test_http_error(self):
        client, session = _connected_client()
        session.post.return_value = _response(400, text="Invalid site id")
        with pytest.raises(SubmissionError, match="Invalid site id") as exc:
            client.start_site_review("rep-1", "bad", "c")
        assert exc.value.status_code == 400

    def test_request_exception(self):
        client, session = _connected_client()
        session.post.side_effect = requests.Timeout("read timed out")
        with pytest.raises(SubmissionError, match="read timed out"):
            client.start_site_review("rep-1", "s", "c")

    def test_not_connected(self):
        client = SPOAdminClient(ADMIN_URL, "tok")
        with pytest.raises(SubmissionError, match="Not connected"):
            client.start_site_review("rep-1", "s", "c")

    def test_custom_review_path(self):
        session = MagicMock(spec=requests.Session)
        session.post.return_value = _response(200)
        client = SPOAdminClient(ADMIN_URL, "tok", review_path="custom/reviews", session=session)
        client.start_site_review("r", "s", "c")
        assert session.post.call_args[0][0] == f"{ADMIN_URL}/custom/reviews"


class TestListSiteReviews:
    def test_odata_value(self):
        client, session = _connected_client()
        session.get.return_value = _response(json_data={"value": [{
            "ReviewId": "rev-1",
            "SiteId": "s1",
            "ReviewInitiatedDateTime": "2026-10-19T08:00:00Z",
            "Status": "InProgress",
            "AdminComment": "c",
            "SiteName": "Finance",
            "ReportEntity": "PermissionedUsers",
        }]})
        reviews = client.list_site_reviews()
        assert reviews == [SiteReviewStatus("rev-1", "s1", "2026-10-19T08:00:00Z", "InProgress",
                                            "c", "Finance", "PermissionedUsers")]

    def test_bare_list_and_camel_case(self):
        client, session = _connected_client()
        session.get.return_value = _response(json_data=[{"reviewId": 7, "siteId": "s2", "status": "Completed"}])
        (review,) = client.list_site_reviews()
        assert review.review_id == "7"
        assert review.site_id == "s2"
        assert review.status == "Completed"
        assert review.site_name == ""

    def test_http_error(self):
        client, session = _connected_client()
        session.get.return_value = _response(503, text="Service Unavailable")
        with pytest.raises(AdminAPIError, match="503"):
            client.list_site_reviews()


class TestSiteReviewStatus:
    def test_summary(self, sample_review):
        line = sample_review.summary()
        assert "Finance" in line
        assert "s1" in line
        assert "rev-1" in line
        assert "InProgress" in line
        assert "PermissionedUsers" in line
