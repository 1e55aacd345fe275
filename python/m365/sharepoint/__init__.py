"""
SharePoint Online admin tooling.

- site_review.py: bulk start Data Access Governance site access reviews
- spo_admin.py:   SharePoint Online admin endpoint client (requests)
- site_ids.py:    .txt / .csv site id readers
- run_log.py:     timestamped append-only run log
"""

__version__ = "1.0.0"
