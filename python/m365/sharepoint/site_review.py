#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
site_review.py

Bulk start SharePoint Online site access reviews (Data Access Governance)
for a list of sites.

WHAT THE SCRIPT DOES
--------------------
1. Checks it runs elevated (administrator / root) and that the Python modules
   it needs are installed; installs them with pip if they are not.
2. Connects to https://<tenant>-admin.sharepoint.com (or --admin-url) with
   the bearer token from spo_config.ini / SPO_ACCESS_TOKEN.
3. Reads site ids from --input-file:
       .txt  one site id per line
       .csv  must have a 'SiteID' column
4. Starts one site access review per site id using --report-id. Blank entries
   are skipped. A failed request is noted but never stops the batch.
5. Lists the reviews known to the tenant and logs one line per review.
6. Always ends with a summary (started / skipped), and disconnects when
   --disconnect is given.

Everything is echoed to the console and appended to --log-dir/--log-file.

Examples
  spo-site-review --tenant contoso --report-id 1b2c... --input-file sites.csv
  python -m m365.sharepoint.site_review --tenant contoso --report-id 1b2c... \\
      --input-file sites.txt --disconnect
"""

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .environment import REQUIRED_MODULES, LocalEnvironment
from .errors import AdminAPIError, SiteReviewError, SubmissionError
from .run_log import attach_run_log, detach_run_log
from .spo_config import (DEFAULT_LOG_DIR, DEFAULT_LOG_FILE, REVIEW_COMMENT,
                         load_tenant_settings)

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 60


@dataclass
class SubmissionResult:
    started: int = 0
    skipped: int = 0
    # site ids whose request raised; still counted in `started`
    failed: List[str] = field(default_factory=list)


# ---------------------- Batch submission ---------------------- #

def submit_site_reviews(client, report_id: str, site_ids: Sequence[str],
                        comment: str = REVIEW_COMMENT,
                        result: Optional[SubmissionResult] = None) -> SubmissionResult:
    """
    Start one review per site id, in order.

    `started` counts attempts: a request the endpoint rejected still counts,
    its site id is recorded in `failed` instead. Counters are updated on
    `result` as the loop goes, so a caller holding it sees the attempts made
    before an unexpected error.
    """
    result = SubmissionResult() if result is None else result

    for idx, raw in enumerate(site_ids, start=1):
        site_id = (raw or "").strip()
        if not site_id:
            logger.info(f"[{idx}/{len(site_ids)}] Skipping empty site ID entry.")
            result.skipped += 1
            continue

        result.started += 1
        try:
            client.start_site_review(report_id, site_id, comment)
            logger.info(f"[{idx}/{len(site_ids)}] Requested site access review for site {site_id}.")
        except SubmissionError as e:
            result.failed.append(site_id)
            logger.debug(f"[{idx}/{len(site_ids)}] Site access review request for {site_id} reported: {e}")

    return result


def log_review_statuses(client) -> int:
    reviews = client.list_site_reviews()
    logger.info(f"Site access reviews reported by the tenant: {len(reviews)}")
    for review in reviews:
        logger.info(review.summary())
    return len(reviews)


# ---------------------- Run ---------------------- #

def _connect(tenant: str, admin_url: Optional[str], config_path):
    from .spo_admin import SPOAdminClient

    settings = load_tenant_settings(tenant, admin_url=admin_url, config_path=config_path)
    logger.debug(f"Connecting to {settings.admin_url}...")
    client = SPOAdminClient.from_settings(settings)
    client.connect()
    return client


def _finalize(client, result: SubmissionResult, disconnect: bool, log_path: Path) -> None:
    logger.info(SEPARATOR)
    if disconnect:
        client.disconnect()
        logger.info("Disconnected from the SharePoint Online admin endpoint.")
    else:
        logger.info("Not disconnecting from the SharePoint Online admin endpoint.")
    logger.info(f"Site access reviews started: {result.started}")
    logger.info(f"Entries skipped: {result.skipped}")
    if result.failed:
        logger.warning(f"Requests that reported an error: {len(result.failed)} "
                       f"({', '.join(result.failed)})")
    logger.info(f"Log file: {log_path}")
    logger.info("Site access review run complete.")


def run(tenant: str,
        report_id: str,
        input_file: Union[str, Path],
        log_dir: Union[str, Path] = DEFAULT_LOG_DIR,
        log_file: str = DEFAULT_LOG_FILE,
        disconnect: bool = False,
        admin_url: Optional[str] = None,
        environment=None,
        client=None,
        config_path=None) -> Optional[SubmissionResult]:
    """
    Run one batch. Returns the counters, or None when a preflight step
    (privileges, modules, connection, input file) aborted the run.
    """
    handler = attach_run_log(log_dir, log_file)
    try:
        return _run(tenant, report_id, Path(input_file), handler.path, disconnect,
                    admin_url, environment or LocalEnvironment(), client, config_path)
    finally:
        detach_run_log(handler)


def _run(tenant, report_id, input_file: Path, log_path: Path, disconnect: bool,
         admin_url, environment, client, config_path) -> Optional[SubmissionResult]:
    try:
        environment.require_elevated()
        environment.ensure_modules(REQUIRED_MODULES)
        if client is None:
            client = _connect(tenant, admin_url, config_path)
        else:
            client.connect()

        from .site_ids import read_site_ids
        site_ids = read_site_ids(input_file)
    except SiteReviewError as e:
        logger.error(str(e))
        return None

    logger.info(f"Loaded {len(site_ids)} entries from {input_file}")
    result = SubmissionResult()
    try:
        submit_site_reviews(client, report_id, site_ids, result=result)
        log_review_statuses(client)
    except AdminAPIError as e:
        logger.error(f"Failed to retrieve site access review status: {e}")
    finally:
        _finalize(client, result, disconnect, log_path)
    return result


# ---------------------- Main ---------------------- #

def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Start SharePoint Online site access reviews for a list of sites."
    )
    p.add_argument("--tenant", required=True,
                   help="Tenant name, e.g. 'contoso' for contoso-admin.sharepoint.com.")
    p.add_argument("--report-id", required=True,
                   help="Data Access Governance report id to start each review from.")
    p.add_argument("--input-file", required=True,
                   help="Path to a .txt (one site id per line) or .csv (SiteID column) file.")
    p.add_argument("--log-dir", default=str(DEFAULT_LOG_DIR),
                   help=f"Directory for the run log (default: {DEFAULT_LOG_DIR}).")
    p.add_argument("--log-file", default=DEFAULT_LOG_FILE,
                   help=f"Run log file name (default: {DEFAULT_LOG_FILE}).")
    p.add_argument("--disconnect", action="store_true",
                   help="Disconnect from the admin endpoint when done.")
    p.add_argument("--admin-url",
                   help="Admin endpoint URL; derived from --tenant when omitted.")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        run(
            tenant=args.tenant,
            report_id=args.report_id,
            input_file=args.input_file,
            log_dir=args.log_dir,
            log_file=args.log_file,
            disconnect=args.disconnect,
            admin_url=args.admin_url,
        )
    except KeyboardInterrupt:
        print("\nCancelled by user.")


if __name__ == "__main__":
    main()
