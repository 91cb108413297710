from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from onboardtrack.container import create_container
from onboardtrack.pipeline import AuditLogger


def test_pipeline_writes_audit_log_and_partial_load_errors(tmp_path: Path) -> None:
    candidates_path = tmp_path / "candidates.jsonl"
    output_path = tmp_path / "out.json"
    audit_path = tmp_path / "audit.jsonl"

    candidates_path.write_text(
        "\n".join(
            [
                json.dumps({"id": "C-100", "call_center": "ATX", "license_status": "Licensed"}),
                "{broken",
                json.dumps(
                    {
                        "id": "C-101",
                        "call_center": "ATX",
                        "interview": {"status": "Completed", "result": "Failed"},
                    }
                ),
            ]
        ),
        encoding="utf-8",
    )

    container = create_container()
    pipeline = container.pipeline()

    results = pipeline.run(
        candidates_path=candidates_path,
        output_path=output_path,
        as_of=date(2025, 10, 1),
        audit_logger=AuditLogger(audit_path),
    )

    assert [entry["candidate_id"] for entry in results] == ["C-100", "C-101"]
    assert results[0]["track"] == "Licensed Track"
    assert results[0]["projected_start_date"] == "2025-10-20"
    assert results[1]["interview"]["result"] == "Failed"
    assert "eligibility" not in results[0]

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    metadata = rendered["metadata"]
    assert metadata["errors"][0].startswith("line 2: invalid JSON")
    assert metadata["app_version"]
    assert metadata["funnel"] == {"interview": 2}

    audit_records = [json.loads(line) for line in audit_path.read_text().splitlines()]
    assert [record["candidate_id"] for record in audit_records] == ["C-100", "C-101"]
    assert audit_records[0]["active_step"] == "interview"
    assert audit_records[0]["eligibility"] is None
