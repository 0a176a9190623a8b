"""Shared query logic for SQL storage adapters.

Concrete adapters only provide connection handling (``_execute``) and their
dialect's DDL; every port operation is implemented once here.
"""

import logging
from abc import abstractmethod
from typing import Any, Optional, Sequence

from anak_trials.adapters.storage import queries
from anak_trials.domain.models import CHECKPOINT_FIELDS
from anak_trials.domain.ports import ClinicalStoragePort, Result, Row, StorageError

logger = logging.getLogger(__name__)


def rows_to_dicts(description: Sequence[Sequence[Any]], rows: Sequence[Sequence[Any]]) -> list[Row]:
    """Convert DB-API rows into dictionaries keyed by column name."""
    columns = [column[0] for column in description]
    return [dict(zip(columns, row)) for row in rows]


class SQLStorageAdapter(ClinicalStoragePort):
    """Base class implementing ClinicalStoragePort over a DB-API driver."""

    db_type = "unknown"

    @abstractmethod
    def _execute(self, query: str, params: Sequence[Any] = (), fetch: bool = True) -> Optional[list[Row]]:
        """Execute one statement on a freshly acquired connection.

        Parameters:
            query: SQL with ``?`` placeholders
            params: Positional parameters bound to the placeholders
            fetch: Return the result rows (False for DML)

        Returns:
            Rows as dictionaries, or None when ``fetch`` is False

        Raises:
            StorageError: If a connection cannot be obtained
            Exception: Driver errors are propagated to the caller
        """
        pass

    def _run(self, operation: str, query: str, params: Sequence[Any] = (), fetch: bool = True) -> Result:
        try:
            return Result.success_result(self._execute(query, params, fetch=fetch))
        except Exception as e:
            error_msg = f"Failed to {operation.replace('_', ' ')}: {str(e)}"
            logger.error(error_msg, exc_info=True)
            return Result.failure_result(
                StorageError(error_msg, operation=operation),
                error_type="StorageError",
                error_details={"operation": operation, "db_type": self.db_type}
            )

    def ping(self) -> Result[bool]:
        result = self._run("ping", queries.SELECT_ONE)
        if result.is_success():
            return Result.success_result(True)
        return result

    def list_children(self) -> Result[list[Row]]:
        return self._run("list_children", queries.LIST_CHILDREN)

    def get_child(self, nisn: str) -> Result[Optional[Row]]:
        result = self._run("get_child", queries.GET_CHILD, [nisn])
        if result.is_failure():
            return result
        rows = result.value or []
        return Result.success_result(rows[0] if rows else None)

    def list_trials_for_child(self, nisn: str) -> Result[list[Row]]:
        result = self._run("list_trials_for_child", queries.LIST_TRIALS_FOR_CHILD, [nisn])
        if result.is_failure():
            return result
        trials = []
        for row in result.value:
            row["medicine_kode"] = row.pop(queries.MATCHED_MEDICINE_KODE)
            trials.append(row)
        return Result.success_result(trials)

    def update_trial_checkpoint(self, trial_id: int, fields: dict[str, Any]) -> Result[None]:
        missing = [name for name in CHECKPOINT_FIELDS if name not in fields]
        if missing:
            return Result.failure_result(
                f"Missing checkpoint fields: {', '.join(missing)}",
                error_type="ValidationError",
                error_details={"missing": missing}
            )

        params = [fields[name] for name in CHECKPOINT_FIELDS] + [trial_id]
        result = self._run("update_trial_checkpoint", queries.UPDATE_TRIAL_CHECKPOINT, params, fetch=False)
        if result.is_success():
            logger.info(f"Updated checkpoint 24 of clinical trial {trial_id}")
        return result

    def list_all_trials(self) -> Result[list[Row]]:
        return self._run("list_all_trials", queries.LIST_ALL_TRIALS)
