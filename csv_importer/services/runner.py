from __future__ import annotations

import logging
from collections.abc import Sequence
from contextlib import AbstractContextManager, nullcontext
from enum import Enum
from typing import Any

from ..errors import CSVImporterError
from ..models.config_models import SqlTransaction, WhenInvalid
from ..models.hooks import SaveHook
from ..models.report import Report, ReportStatus
from ..models.row import Row
from .progress import ProgressTracker

"""Runner: persists the rows' models and classifies each outcome.

Transaction boundaries follow ``sql_transaction``:

- none      no transaction is opened by the runner
- each_row  one ``model_klass.transaction()`` per row
- all_rows  one ``model_klass.transaction()`` around the whole run

With ``when_invalid=abort`` the first failed row raises ImportAborted inside
the open transaction(s), so the store rolls them back. The report still holds
the aborting row: it records what was attempted, not what was committed.
"""

__all__ = [
    "ImportAborted",
    "RowAction",
    "RowOutcome",
    "UnknownOutcome",
    "run",
]

logger = logging.getLogger(__name__)


class ImportAborted(Exception):
    """Internal signal unwinding open transactions; never leaves ``run``."""


class UnknownOutcome(CSVImporterError):
    """Raised when a row's (action, outcome) pair has no report bucket."""


class RowAction(Enum):
    CREATE = "create"
    UPDATE = "update"


class RowOutcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIP = "skip"


_BUCKETS: dict[tuple[RowAction, RowOutcome], str] = {
    (RowAction.CREATE, RowOutcome.SUCCESS): "created_rows",
    (RowAction.CREATE, RowOutcome.FAILURE): "failed_to_create_rows",
    (RowAction.CREATE, RowOutcome.SKIP): "create_skipped_rows",
    (RowAction.UPDATE, RowOutcome.SUCCESS): "updated_rows",
    (RowAction.UPDATE, RowOutcome.FAILURE): "failed_to_update_rows",
    (RowAction.UPDATE, RowOutcome.SKIP): "update_skipped_rows",
}


def run(
    rows: Sequence[Row],
    *,
    when_invalid: WhenInvalid | str = WhenInvalid.SKIP,
    after_save: Sequence[SaveHook] = (),
    sql_transaction: SqlTransaction | str = SqlTransaction.NONE,
    report: Report | None = None,
) -> Report:
    """Persist every row and return the Report.

    Args:
        rows: materialized rows, in input order
        when_invalid: skip (keep going) or abort on the first failed row
        after_save: hooks called after each row, whatever its outcome
        sql_transaction: transaction granularity
        report: report to fill in (a fresh one when omitted)

    Returns:
        The report, status ``done`` or ``aborted``

    Raises:
        UnknownOutcome: a row could not be routed to a bucket
        Exception: anything raised while materializing a row's model or by a hook
    """
    if report is None:
        report = Report()
    when_invalid = WhenInvalid(when_invalid)
    sql_transaction = SqlTransaction(sql_transaction)

    if not rows:
        logger.info("no rows to import")
        return report.mark(ReportStatus.DONE)

    report.mark(ReportStatus.IN_PROGRESS)

    try:
        with ProgressTracker(len(rows)) as progress:
            with _transaction(rows[0], sql_transaction is SqlTransaction.ALL_ROWS):
                for row in rows:
                    with _transaction(row, sql_transaction is SqlTransaction.EACH_ROW):
                        outcome = _persist(row, report, after_save)
                        progress.advance(
                            created=len(report.created_rows),
                            updated=len(report.updated_rows),
                            failed=len(report.invalid_rows),
                        )
                        if outcome is RowOutcome.FAILURE and when_invalid is WhenInvalid.ABORT:
                            raise ImportAborted(f"line {row.line_number}")
    except ImportAborted as e:
        logger.warning("import aborted at %s", e)
        return report.mark(ReportStatus.ABORTED)

    logger.info(
        "import done created=%d updated=%d failed=%d",
        len(report.created_rows),
        len(report.updated_rows),
        len(report.invalid_rows),
    )
    return report.mark(ReportStatus.DONE)


def _transaction(row: Row, enabled: bool) -> AbstractContextManager[Any]:
    if not enabled:
        return nullcontext()
    return type(row.model).transaction()


def _persist(row: Row, report: Report, after_save: Sequence[SaveHook]) -> RowOutcome:
    model = row.model
    action = RowAction.UPDATE if model.persisted else RowAction.CREATE

    if row.skip:
        outcome = RowOutcome.SKIP
    elif row.errors:
        outcome = RowOutcome.FAILURE
    elif model.save():
        outcome = RowOutcome.SUCCESS
    else:
        outcome = RowOutcome.FAILURE

    bucket = _BUCKETS.get((action, outcome))
    if bucket is None:
        raise UnknownOutcome(f"no report bucket for action={action!r} outcome={outcome!r}")
    report.bucket(bucket).append(row)
    logger.debug("line=%d action=%s outcome=%s", row.line_number, action.value, outcome.value)

    for hook in after_save:
        hook(model, row.csv_attributes)

    return outcome
