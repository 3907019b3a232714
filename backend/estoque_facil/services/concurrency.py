# Overview: Transaction helpers for stock-moving writes.

from __future__ import annotations

import time
from typing import Callable, TypeVar

from sqlalchemy.exc import OperationalError

from ..extensions import db


T = TypeVar("T")


def run_in_transaction(func: Callable[[], T], *, attempts: int = 3, backoff_base: float = 0.05) -> T:
    """
    Run `func` and commit, as one unit of work.

    Any exception rolls the session back before propagating. OperationalError
    (e.g. "database is locked" under concurrent SQLite writers) is retried
    with exponential backoff; `func` must therefore be safe to re-run from a
    clean session.
    """
    for attempt in range(attempts):
        try:
            result = func()
            db.session.commit()
            return result
        except OperationalError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
    raise RuntimeError("run_in_transaction called with attempts < 1")
