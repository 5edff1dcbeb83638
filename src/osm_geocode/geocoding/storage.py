"""
Record stores for address rows.

Implements a DuckDB-backed address table and an in-memory store. Both select
records missing coordinates and write resolved coordinates back.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
from pydantic import ValidationError

from ..db.db import connect, fetch_dicts, MEMORY
from ..utils.errors import DataValidationError
from .base import RecordStore
from .models import CandidateRecord

logger = logging.getLogger(__name__)

ADDRESS_COLUMNS = ["address", "zip", "city", "country"]


class DuckDBRecordStore(RecordStore):
    """
    DuckDB record store over a tt_address-shaped table.

    Soft-deleted rows (deleted != 0) are never selected.
    """

    DDL = """
    CREATE TABLE IF NOT EXISTS {table} (
        uid INTEGER PRIMARY KEY,
        pid INTEGER DEFAULT 0,
        deleted INTEGER DEFAULT 0,
        address TEXT,
        zip TEXT,
        city TEXT,
        country TEXT,
        latitude DOUBLE,
        longitude DOUBLE
    );
    """

    MISSING_PREDICATE = (
        "(latitude IS NULL OR latitude = 0 OR longitude IS NULL OR longitude = 0)"
    )

    def __init__(self, db_path: Path | str = MEMORY, table_name: str = "tt_address"):
        """
        Initialize DuckDB record store.

        Args:
            db_path: Path to DuckDB database file, or ":memory:"
            table_name: Address table (created if missing)
        """
        if not table_name.isidentifier():
            raise ValueError(f"Invalid table name: {table_name!r}")
        self.db_path = str(db_path)
        self.table_name = table_name
        self.con = connect(self.db_path)
        self.con.execute(self.DDL.format(table=table_name))
        logger.info(f"Initialized DuckDB record store: {self.db_path} ({table_name})")

    def select_missing_coordinates(
        self,
        scope_filter: Optional[int],
        limit: int,
    ) -> List[CandidateRecord]:
        sql = (
            f"SELECT uid, pid, address, zip, city, country, latitude, longitude "
            f"FROM {self.table_name} "
            f"WHERE COALESCE(deleted, 0) = 0 AND {self.MISSING_PREDICATE}"
        )
        params: list[Any] = []
        if scope_filter is not None:
            sql += " AND pid = ?"
            params.append(scope_filter)
        sql += f" ORDER BY uid LIMIT {int(limit)}"

        rows = fetch_dicts(self.con, sql, params)
        records = _validate_records(rows, source=self.table_name)
        logger.info(f"Selected {len(records)} records missing coordinates from {self.table_name}")
        return records

    def persist_coordinates(self, uid: int, latitude: float, longitude: float) -> None:
        self.con.execute(
            f"UPDATE {self.table_name} SET latitude = ?, longitude = ? WHERE uid = ?",
            [latitude, longitude, uid],
        )
        logger.debug(f"Persisted ({latitude}, {longitude}) on uid={uid}")

    def insert_records(self, rows: Iterable[Dict[str, Any]]) -> int:
        """Insert address rows (dicts keyed by column name). Returns the count inserted."""
        df = pd.DataFrame(list(rows))
        return self._insert_frame(df)

    def import_csv(self, csv_path: Path | str) -> int:
        """
        Load address rows from a CSV file.

        The CSV needs a `uid` column; `pid`, `deleted`, the address columns
        and the coordinate columns are optional.

        Returns:
            Number of rows imported
        """
        df = pd.read_csv(
            csv_path,
            dtype={c: str for c in ADDRESS_COLUMNS},
            keep_default_na=False,
            na_values={"latitude": [""], "longitude": [""]},
        )
        count = self._insert_frame(df)
        logger.info(f"Imported {count} rows from {csv_path}")
        return count

    def export_csv(self, csv_path: Path | str) -> int:
        """
        Export the whole table to CSV.

        Returns:
            Number of rows exported
        """
        df = self.con.execute(f"SELECT * FROM {self.table_name} ORDER BY uid").df()
        df.to_csv(csv_path, index=False)
        logger.info(f"Exported {len(df)} rows to {csv_path}")
        return len(df)

    def _insert_frame(self, df: pd.DataFrame) -> int:
        if df.empty:
            return 0
        if "uid" not in df.columns:
            raise ValueError("address rows need a 'uid' column")

        defaults = {"pid": 0, "deleted": 0, "latitude": None, "longitude": None}
        defaults.update({c: "" for c in ADDRESS_COLUMNS})
        for column, default in defaults.items():
            if column not in df.columns:
                df[column] = default
        columns = ["uid", "pid", "deleted", *ADDRESS_COLUMNS, "latitude", "longitude"]
        df = df[columns].copy()
        for column in ("pid", "deleted"):
            df[column] = df[column].fillna(defaults[column]).astype(int)
        for column in ADDRESS_COLUMNS:
            df[column] = df[column].fillna("").astype(str)
        # NaN coordinates must land as NULL
        for column in ("latitude", "longitude"):
            df[column] = df[column].astype(object).where(df[column].notna(), None)

        self.con.register("batch_rows", df)
        try:
            self.con.execute(
                f"INSERT OR REPLACE INTO {self.table_name} ({', '.join(columns)}) "
                f"SELECT {', '.join(columns)} FROM batch_rows"
            )
        finally:
            self.con.unregister("batch_rows")
        return len(df)

    def count_missing(self) -> int:
        row = self.con.execute(
            f"SELECT COUNT(*) FROM {self.table_name} "
            f"WHERE COALESCE(deleted, 0) = 0 AND {self.MISSING_PREDICATE}"
        ).fetchone()
        return row[0] if row else 0

    def close(self) -> None:
        """Close database connection."""
        if self.con:
            self.con.close()
            self.con = None
            logger.info("Closed DuckDB record store")


class InMemoryRecordStore(RecordStore):
    """
    Record store over a list of CandidateRecord values.

    Useful for embedding the batch in other pipelines and for testing.
    """

    def __init__(self, records: Iterable[CandidateRecord | Dict[str, Any]] = ()):
        rows = [r.model_dump() if isinstance(r, CandidateRecord) else dict(r) for r in records]
        self._records: Dict[int, CandidateRecord] = {
            rec.uid: rec for rec in _validate_records(rows, source="memory")
        }
        self.persisted: List[tuple[int, float, float]] = []

    def select_missing_coordinates(
        self,
        scope_filter: Optional[int],
        limit: int,
    ) -> List[CandidateRecord]:
        selected = [
            rec for uid, rec in sorted(self._records.items())
            if rec.is_candidate() and (scope_filter is None or rec.pid == scope_filter)
        ]
        return selected[:limit]

    def persist_coordinates(self, uid: int, latitude: float, longitude: float) -> None:
        record = self._records[uid]
        self._records[uid] = record.model_copy(update={"latitude": latitude, "longitude": longitude})
        self.persisted.append((uid, latitude, longitude))

    def get(self, uid: int) -> Optional[CandidateRecord]:
        return self._records.get(uid)


def _validate_records(rows: List[Dict[str, Any]], source: str) -> List[CandidateRecord]:
    records = []
    errors: list[dict[str, Any]] = []
    original: Optional[ValidationError] = None
    for i, row in enumerate(rows):
        try:
            records.append(CandidateRecord.model_validate(row))
        except ValidationError as e:
            original = original or e
            for err in e.errors():
                errors.append({**err, "loc": (i, *err.get("loc", ()))})
    if errors:
        raise DataValidationError(source, errors, original)
    return records
