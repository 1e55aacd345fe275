#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
spo_admin.py

Thin client for the SharePoint Online admin endpoint
(https://<tenant>-admin.sharepoint.com), covering what the site access
review scripts need:

    connect()            POST /_api/contextinfo (auth check + form digest)
    start_site_review()  POST <review_path>  {"reportId", "siteId", "comment"}
    list_site_reviews()  GET  <review_path>
    disconnect()         close the HTTP session

Auth is a bearer token (see spo_config.py). No retries: a failed call is
reported once and the caller decides what to do with it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter

from .errors import AdminAPIError, AdminConnectionError, SubmissionError
from .spo_config import DEFAULT_REVIEW_PATH, DEFAULT_TIMEOUT, TenantSettings

logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json;odata=nometadata"


def _pick(entry: Dict[str, Any], *names: str) -> Any:
    """Case-insensitive lookup over the first matching key name."""
    lowered = {str(k).lower(): v for k, v in entry.items()}
    for name in names:
        if name.lower() in lowered:
            return lowered[name.lower()]
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class SiteReviewStatus:
    review_id: str
    site_id: str
    initiated_at: str
    status: str
    admin_comment: str
    site_name: str
    report_entity: str

    @classmethod
    def from_api(cls, entry: Dict[str, Any]) -> "SiteReviewStatus":
        return cls(
            review_id=_text(_pick(entry, "ReviewId", "Id")),
            site_id=_text(_pick(entry, "SiteId")),
            initiated_at=_text(_pick(entry, "ReviewInitiatedDateTime", "InitiatedAt")),
            status=_text(_pick(entry, "Status")),
            admin_comment=_text(_pick(entry, "AdminComment", "Comment")),
            site_name=_text(_pick(entry, "SiteName", "Title")),
            report_entity=_text(_pick(entry, "ReportEntity")),
        )

    def summary(self) -> str:
        return (f"Site: {self.site_name} | SiteId: {self.site_id} | ReviewId: {self.review_id} "
                f"| Status: {self.status} | Report: {self.report_entity}")


def build_session(access_token: str, verify_ssl: bool = True) -> requests.Session:
    session = requests.Session()
    # Single attempt per call.
    adapter = HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({
        "Authorization": f"Bearer {access_token}",
        "Accept": JSON_ACCEPT,
        "Content-Type": "application/json",
    })
    session.verify = verify_ssl
    if not verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return session


def _raise_for_status(r: requests.Response, what: str, error_cls=AdminAPIError) -> None:
    if r.status_code < 400:
        return
    message = f"{what} failed ({r.status_code}): {r.text[:300]}"
    if issubclass(error_cls, AdminAPIError):
        raise error_cls(message, status_code=r.status_code)
    raise error_cls(message)


class SPOAdminClient:
    def __init__(self, admin_url: str, access_token: str,
                 verify_ssl: bool = True,
                 timeout: float = DEFAULT_TIMEOUT,
                 review_path: str = DEFAULT_REVIEW_PATH,
                 session: Optional[requests.Session] = None):
        self.admin_url = admin_url.rstrip("/")
        self.access_token = access_token
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.review_path = "/" + review_path.lstrip("/")
        self.session = session
        self.form_digest: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: TenantSettings) -> "SPOAdminClient":
        return cls(settings.admin_url, settings.access_token,
                   verify_ssl=settings.verify_ssl,
                   timeout=settings.timeout,
                   review_path=settings.review_path)

    @property
    def reviews_url(self) -> str:
        return f"{self.admin_url}{self.review_path}"

    @property
    def connected(self) -> bool:
        return self.session is not None and self.form_digest is not None

    def connect(self) -> None:
        if not self.access_token:
            raise AdminConnectionError(
                f"No access token for {self.admin_url}. Set access_token in the "
                f"tenant's section of the config file or SPO_ACCESS_TOKEN."
            )
        if self.session is None:
            self.session = build_session(self.access_token, self.verify_ssl)

        url = f"{self.admin_url}/_api/contextinfo"
        try:
            r = self.session.post(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise AdminConnectionError(f"Error connecting to {self.admin_url}: {e}") from e
        _raise_for_status(r, f"Connect to {self.admin_url}", AdminConnectionError)

        try:
            data = r.json()
        except ValueError as e:
            raise AdminConnectionError(f"Unexpected contextinfo response from {self.admin_url}: {e}") from e
        digest = _pick(data, "FormDigestValue") if isinstance(data, dict) else None
        if not digest:
            raise AdminConnectionError(f"No form digest returned by {self.admin_url}.")
        self.form_digest = digest
        self.session.headers["X-RequestDigest"] = digest
        logger.debug(f"Connected to {self.admin_url}.")

    def disconnect(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None
        self.form_digest = None

    def _require_session(self) -> requests.Session:
        if self.session is None:
            raise AdminAPIError(f"Not connected to {self.admin_url}. Call connect() first.")
        return self.session

    def start_site_review(self, report_id: str, site_id: str, comment: str) -> None:
        payload = {"reportId": report_id, "siteId": site_id, "comment": comment}
        try:
            r = self._require_session().post(self.reviews_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise SubmissionError(f"Start site review for {site_id} failed: {e}") from e
        except AdminAPIError as e:
            raise SubmissionError(str(e)) from e
        _raise_for_status(r, f"Start site review for {site_id}", SubmissionError)

    def list_site_reviews(self) -> List[SiteReviewStatus]:
        try:
            r = self._require_session().get(self.reviews_url, timeout=self.timeout)
        except requests.RequestException as e:
            raise AdminAPIError(f"List site reviews failed: {e}") from e
        _raise_for_status(r, "List site reviews")

        try:
            data = r.json()
        except ValueError as e:
            raise AdminAPIError(f"Unexpected site review listing response: {e}") from e
        entries = data.get("value", []) if isinstance(data, dict) else data
        return [SiteReviewStatus.from_api(e) for e in (entries or []) if isinstance(e, dict)]
