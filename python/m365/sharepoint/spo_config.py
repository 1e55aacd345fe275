#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
spo_config.py

Settings for the SharePoint Online admin scripts.

Credentials live in spo_config.ini (or the file named by SPO_CONFIG_FILE),
one section per tenant:

    [contoso]
    access_token = eyJ0eXAiOi...
    # optional
    admin_url    = https://contoso-admin.sharepoint.com
    verify_ssl   = true
    timeout      = 60
    review_path  = /_api/SPO.Tenant/DataAccessGovernance/SiteReviews

SPO_ACCESS_TOKEN, when set, wins over the INI token.
"""

import configparser
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

CONFIG_FILE = "spo_config.ini"
CONFIG_ENV_VAR = "SPO_CONFIG_FILE"
TOKEN_ENV_VAR = "SPO_ACCESS_TOKEN"

PLATFORM_DOMAIN = "sharepoint.com"
DEFAULT_REVIEW_PATH = "/_api/SPO.Tenant/DataAccessGovernance/SiteReviews"
DEFAULT_TIMEOUT = 60

REVIEW_COMMENT = "Site access review initiated by bulk site access review script."
DEFAULT_LOG_DIR = Path.home() / "Documents" / "SiteAccessReviewLogs"
DEFAULT_LOG_FILE = "SiteAccessReview.log"

_ZW_CHARS = "".join([
    "\ufeff",  # BOM
    "\u200b",  # ZERO WIDTH SPACE
    "\u200c",  # ZERO WIDTH NON-JOINER
    "\u200d",  # ZERO WIDTH JOINER
    "\u2060",  # WORD JOINER
])


def strip_invisibles(s: Optional[str]) -> str:
    if s is None:
        return ""
    return s.translate({ord(c): None for c in _ZW_CHARS}).strip()


def norm_section_key(s: str) -> str:
    return re.sub(r"\s+", " ", strip_invisibles(s)).lower()


def admin_url_for(tenant: str) -> str:
    """'contoso' -> 'https://contoso-admin.sharepoint.com'"""
    return f"https://{strip_invisibles(tenant).lower()}-admin.{PLATFORM_DOMAIN}"


@dataclass
class TenantSettings:
    tenant: str
    admin_url: str
    access_token: str = ""
    verify_ssl: bool = True
    timeout: float = DEFAULT_TIMEOUT
    review_path: str = DEFAULT_REVIEW_PATH


def read_config(path: Union[str, Path]) -> configparser.ConfigParser:
    cfg = configparser.ConfigParser()
    path = Path(path)
    if path.is_file():
        raw = path.read_text(encoding="utf-8", errors="replace")
        cfg.read_string(strip_invisibles(raw))
    return cfg


def find_section(cfg: configparser.ConfigParser, tenant: str) -> Optional[str]:
    wanted = norm_section_key(tenant)
    for section in cfg.sections():
        if norm_section_key(section) == wanted:
            return section
    return None


def load_tenant_settings(tenant: str,
                         admin_url: Optional[str] = None,
                         config_path: Optional[Union[str, Path]] = None) -> TenantSettings:
    """
    Resolve endpoint + credentials for a tenant.

    Order for the endpoint: explicit admin_url, INI admin_url, derived URL.
    A missing file or section is fine here; the client complains about a
    missing token when it connects.
    """
    config_path = config_path or os.environ.get(CONFIG_ENV_VAR) or CONFIG_FILE
    cfg = read_config(config_path)
    section = find_section(cfg, tenant)

    settings = TenantSettings(tenant=tenant, admin_url=admin_url_for(tenant))
    if section:
        sec = cfg[section]
        settings.access_token = strip_invisibles(sec.get("access_token", ""))
        settings.admin_url = strip_invisibles(sec.get("admin_url", "")) or settings.admin_url
        settings.verify_ssl = sec.getboolean("verify_ssl", fallback=True)
        settings.timeout = sec.getfloat("timeout", fallback=DEFAULT_TIMEOUT)
        settings.review_path = strip_invisibles(sec.get("review_path", "")) or DEFAULT_REVIEW_PATH

    if admin_url:
        settings.admin_url = admin_url
    settings.admin_url = settings.admin_url.rstrip("/")

    env_token = strip_invisibles(os.environ.get(TOKEN_ENV_VAR))
    if env_token:
        settings.access_token = env_token
    return settings
