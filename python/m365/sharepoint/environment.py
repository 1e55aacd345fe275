#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
environment.py

Preflight checks for the admin scripts: elevated privileges and the Python
modules the SharePoint client needs. Missing modules are installed with pip
into the running interpreter.
"""

import ctypes
import importlib
import importlib.util
import logging
import os
import subprocess
import sys
from typing import Dict, List, Optional

from .errors import ModuleError, PrivilegeError

logger = logging.getLogger(__name__)

# import name -> distribution name on the package index
REQUIRED_MODULES: Dict[str, str] = {
    "requests": "requests",
    "urllib3": "urllib3",
    "pandas": "pandas",
}


def sh(cmd: List[str]):
    logger.debug("$ " + " ".join(cmd))
    p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    return p.returncode, p.stdout, p.stderr


class LocalEnvironment:
    """The machine the script runs on."""

    def is_elevated(self) -> bool:
        if os.name == "nt":
            try:
                return bool(ctypes.windll.shell32.IsUserAnAdmin())
            except (AttributeError, OSError):
                return False
        return os.geteuid() == 0

    def require_elevated(self) -> None:
        if not self.is_elevated():
            raise PrivilegeError(
                "This script must be run with administrator privileges "
                "(elevated prompt / root)."
            )

    def ensure_modules(self, modules: Optional[Dict[str, str]] = None) -> None:
        """Install anything missing, then import whatever is not loaded yet."""
        modules = REQUIRED_MODULES if modules is None else modules
        for name, dist in modules.items():
            if name in sys.modules:
                logger.debug(f"Module '{name}' already loaded.")
                continue

            if importlib.util.find_spec(name) is None:
                logger.info(f"Module '{name}' not found. Installing '{dist}'...")
                rc, out, err = sh([sys.executable, "-m", "pip", "install", dist])
                if rc != 0:
                    raise ModuleError(
                        f"Failed to install '{dist}' (pip exit {rc}): {(err or out).strip()}"
                    )
                importlib.invalidate_caches()

            try:
                importlib.import_module(name)
            except ImportError as e:
                raise ModuleError(f"Failed to import '{name}': {e}") from e
            logger.debug(f"Module '{name}' imported.")
