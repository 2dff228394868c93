"""IO helpers for loading the demo dataset into memory."""

from __future__ import annotations

import json
import os
from typing import Dict, List

import pandas as pd

from .logging import get_logger

LOGGER = get_logger("utils.io")

DATA_DIR = os.getenv("DATA_DIR", os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "data"))


def _resolve(name: str, data_dir: str | None = None) -> str:
    return name if os.path.isabs(name) else os.path.join(data_dir or DATA_DIR, name)


def load_csv(name: str, data_dir: str | None = None) -> pd.DataFrame:
    """Load a CSV by filename from the data directory."""

    path = _resolve(name, data_dir)
    if not os.path.exists(path):
        raise FileNotFoundError(f"CSV not found: {path}")
    LOGGER.debug("loading_csv path=%s", path)
    return pd.read_csv(path, dtype={"id": str})


def load_records(name: str, data_dir: str | None = None) -> List[Dict]:
    """Load a CSV as a list of plain dicts with missing cells set to None."""

    df = load_csv(name, data_dir)
    df = df.astype(object).where(pd.notnull(df), None)
    return df.to_dict("records")


def load_json(name: str, data_dir: str | None = None) -> Dict:
    path = _resolve(name, data_dir)
    if not os.path.exists(path):
        raise FileNotFoundError(f"JSON not found: {path}")
    LOGGER.debug("loading_json path=%s", path)
    with open(path, "r", encoding="utf-8") as infile:
        return json.load(infile)


__all__ = ["load_csv", "load_records", "load_json", "DATA_DIR"]
