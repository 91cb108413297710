"""Background check vendor backed by a JSON status export."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any, Sequence

import structlog

from ..core.background import VendorStatusResult
from ..schemas import Candidate


class VendorError(RuntimeError):
    """Transient failure talking to the background check vendor."""


class JsonFileVendor:
    """Vendor whose status rows live in a JSON file.

    The file holds ``{"results": [{"id": ..., "status": ..., ...}]}``. Operators
    (or a sync job) update the rows; the monitor polls them like the live
    vendor. ``submit`` appends a ``Pending`` row under a fresh reference id.
    """

    provider = "json-file"

    def __init__(self, path: Path):
        self._path = Path(path)
        self._logger = structlog.get_logger(__name__)

    def submit(self, candidate: Candidate, *, package: str | None = None) -> str:
        rows = self._read()
        reference = f"IBR-{uuid.uuid4().hex[:10].upper()}"
        rows.append(
            {
                "id": reference,
                "status": "Pending",
                "candidate_id": candidate.id,
                "package": package,
            }
        )
        self._write(rows)
        self._logger.info(
            "vendor.submitted", candidate_id=candidate.id, reference_id=reference
        )
        return reference

    def check_status(self, reference_ids: Sequence[str]) -> list[VendorStatusResult]:
        wanted = set(reference_ids)
        results: list[VendorStatusResult] = []
        for row in self._read():
            if row.get("id") not in wanted:
                continue
            results.append(
                VendorStatusResult(
                    id=row["id"],
                    status=str(row.get("status", "")),
                    extended=dict(row.get("extended") or {}),
                    report_url=row.get("report_url"),
                    timestamps=row.get("timestamps"),
                )
            )
        return results

    def _read(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise VendorError(f"Unreadable vendor export {self._path}: {exc}") from exc
        rows = data.get("results", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise VendorError(f"Vendor export {self._path} must hold a results list")
        return rows

    def _write(self, rows: list[dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps({"results": rows}, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
