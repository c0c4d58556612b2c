"""Daily-resetting bill/KOT number sequence."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from counter_pos.config import BILL_NUMBER_WIDTH
from counter_pos.errors import StorageError
from counter_pos.persistence import (
    SETTING_LAST_BILL_DATE,
    SETTING_LAST_BILL_NUMBER,
    Database,
    get_setting,
    set_setting,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def format_bill_number(number: int, width: int = BILL_NUMBER_WIDTH) -> str:
    return str(number).zfill(width)


def _parse_counter(raw: str | None) -> int:
    if raw is None or raw == "":
        return 0
    try:
        value = int(raw)
    except ValueError as exc:
        raise StorageError(f"corrupt {SETTING_LAST_BILL_NUMBER} setting: {raw!r}") from exc
    if value < 0:
        raise StorageError(f"corrupt {SETTING_LAST_BILL_NUMBER} setting: {raw!r}")
    return value


class SequenceGenerator:
    """Issues ``00001``, ``00002``, ... and restarts at 1 on a new date.

    The counter lives in the settings table so numbering resumes after a
    restart. The read-modify-write runs inside one write transaction.
    """

    def __init__(self, database: Database, clock: Clock = datetime.now, width: int = BILL_NUMBER_WIDTH) -> None:
        if width < 1:
            raise ValueError("width must be at least 1")
        self.database = database
        self.clock = clock
        self.width = width

    def _today(self) -> str:
        return self.clock().date().isoformat()

    def issue_next(self) -> str:
        today = self._today()
        with self.database.transaction() as conn:
            last_date = get_setting(conn, SETTING_LAST_BILL_DATE)
            if last_date != today:
                number = 1
                set_setting(conn, SETTING_LAST_BILL_DATE, today)
            else:
                number = _parse_counter(get_setting(conn, SETTING_LAST_BILL_NUMBER)) + 1
            set_setting(conn, SETTING_LAST_BILL_NUMBER, number)

        if number == 1 and last_date != today:
            logger.info("bill_sequence_rollover previous_date=%s date=%s", last_date, today)
        issued = format_bill_number(number, self.width)
        logger.debug("bill_number_issued number=%s date=%s", issued, today)
        return issued

    def peek(self) -> str:
        """Return what ``issue_next`` would hand out now, without issuing it."""
        today = self._today()
        with self.database.read() as conn:
            last_date = get_setting(conn, SETTING_LAST_BILL_DATE)
            if last_date != today:
                return format_bill_number(1, self.width)
            return format_bill_number(_parse_counter(get_setting(conn, SETTING_LAST_BILL_NUMBER)) + 1, self.width)

    def reset(self) -> None:
        """Zero the counter. The stored date is left as it is."""
        with self.database.transaction() as conn:
            set_setting(conn, SETTING_LAST_BILL_NUMBER, 0)
        logger.info("bill_sequence_reset")
