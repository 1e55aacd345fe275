#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
site_ids.py

Read SharePoint site ids from an input file.

    .txt  one site id per line, taken verbatim
    .csv  the 'SiteID' column, in row order; other columns are ignored

Blank entries are kept so the caller can count them as skipped.
"""

from pathlib import Path
from typing import List, Union

import pandas as pd

from .errors import InputError

SITE_ID_COLUMN = "SiteID"
SUPPORTED_SUFFIXES = (".txt", ".csv")


def read_txt(path: Path) -> List[str]:
    try:
        with path.open("r", encoding="utf-8-sig") as f:
            return f.read().splitlines()
    except UnicodeDecodeError as e:
        raise InputError(f"Cannot read '{path}' as UTF-8: {e}") from e


def read_csv(path: Path) -> List[str]:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except pd.errors.EmptyDataError as e:
        raise InputError(f"CSV file '{path}' is empty: {e}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InputError(f"CSV read failed for '{path}': {e}") from e

    if SITE_ID_COLUMN not in df.columns:
        raise InputError(
            f"CSV file '{path}' must contain a '{SITE_ID_COLUMN}' column "
            f"(found: {', '.join(map(str, df.columns))})."
        )
    return df[SITE_ID_COLUMN].fillna("").tolist()


def read_site_ids(path: Union[str, Path]) -> List[str]:
    path = Path(path)
    if not path.is_file():
        raise InputError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".txt":
        return read_txt(path)
    if suffix == ".csv":
        return read_csv(path)
    raise InputError(
        f"Unsupported input file format '{path.suffix}'. "
        f"Use one of: {', '.join(SUPPORTED_SUFFIXES)}"
    )
