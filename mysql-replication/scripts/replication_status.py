"""
Replication status evaluation
Contains Severity, StatusRow, CheckResult and the ReplicationEvaluator class
"""
import logging
import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping, Optional, Sequence
from db_config import Thresholds

logger = logging.getLogger(__name__)

EXPECTED_FIELDS = (
    'Slave_IO_State',
    'Slave_IO_Running',
    'Slave_SQL_Running',
    'Last_IO_Error',
    'Last_SQL_Error',
    'Seconds_Behind_Master',
)

NOT_SLAVE_MESSAGE = "show slave status was nil. This server is not a slave."

_LEADING_INT = re.compile(r'\s*([+-]?\d+)')


class Severity(IntEnum):
    """Check outcome; the value is the plugin exit code"""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @classmethod
    def from_name(cls, name: str) -> "Severity":
        choices = [s.name.lower() for s in cls]
        if name not in choices:
            raise ValueError(
                f"Invalid for --not-slave: {name!r}. "
                f"Expecting one of {', '.join(choices)}."
            )
        return cls[name.upper()]


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    return str(value)


@dataclass
class StatusRow:
    """One row of SHOW SLAVE STATUS"""
    slave_io_state: Optional[str] = None
    slave_io_running: Optional[str] = None
    slave_sql_running: Optional[str] = None
    last_io_error: Optional[str] = None
    last_sql_error: Optional[str] = None
    seconds_behind_master: Optional[str] = None

    # Every other column, in server order
    extra: dict = field(default_factory=dict)

    # Expected columns the server did not return at all
    missing: tuple = ()

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "StatusRow":
        known = {name: _as_text(row[name]) for name in EXPECTED_FIELDS if name in row}
        return cls(
            **{name.lower(): value for name, value in known.items()},
            extra={k: v for k, v in row.items() if k not in EXPECTED_FIELDS},
            missing=tuple(name for name in EXPECTED_FIELDS if name not in row)
        )

    @property
    def is_running(self) -> bool:
        """Both replication threads report Yes"""
        return all(
            value is not None and 'Yes' in value
            for value in (self.slave_io_running, self.slave_sql_running)
        )


@dataclass
class CheckResult:
    """Severity plus the single line reported to the monitoring system"""
    severity: Severity
    message: str
    notes: list = field(default_factory=list)


def parse_lag(value: Optional[str]) -> Optional[int]:
    """
    Read the leading integer of Seconds_Behind_Master.
    Returns None when there is no number to read.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    if not match:
        return None
    return int(match.group(1))


class ReplicationEvaluator:
    """Turns SHOW SLAVE STATUS rows into a CheckResult"""

    def __init__(self, thresholds: Optional[Thresholds] = None,
                 not_slave_severity: Severity = Severity.OK):
        self.thresholds = thresholds or Thresholds()
        self.not_slave_severity = not_slave_severity

    def evaluate(self, rows: Sequence[Mapping[str, Any]]) -> CheckResult:
        """Evaluate the first row; no rows means the server is not a replica"""
        if not rows:
            logger.info("No slave status returned")
            return CheckResult(self.not_slave_severity, NOT_SLAVE_MESSAGE)

        if len(rows) > 1:
            logger.info(f"Got {len(rows)} status rows, evaluating the first")

        return self.evaluate_row(StatusRow.from_mapping(rows[0]))

    def evaluate_row(self, row: StatusRow) -> CheckResult:
        notes = []

        if row.missing:
            note = f"couldn't detect replication status, missing: {', '.join(row.missing)}"
            logger.warning(note)
            notes.append(note)

        if not row.is_running:
            message = (
                "Slave not running!"
                " STATES:"
                f" Slave_IO_Running={row.slave_io_running or ''}"
                f", Slave_SQL_Running={row.slave_sql_running or ''}"
                f", LAST ERROR: {row.last_sql_error or ''}"
            )
            return CheckResult(Severity.CRITICAL, message, notes)

        lag = parse_lag(row.seconds_behind_master)
        if lag is None:
            note = f"Seconds_Behind_Master unreadable ({row.seconds_behind_master!r}), using 0"
            logger.warning(note)
            notes.append(note)
            lag = 0

        message = f"replication delayed by {lag}"

        if lag >= self.thresholds.critical:
            return CheckResult(Severity.CRITICAL, message, notes)
        if lag > self.thresholds.warn:
            return CheckResult(Severity.WARNING, message, notes)
        return CheckResult(Severity.OK, f"slave running: true, {message}", notes)
