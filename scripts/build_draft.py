# scripts/build_draft.py
"""
Offline draft build: responses JSON in, draft JSON out.

    python scripts/build_draft.py data/responses_<case_id>.json [out.json]
"""
import os, sys
# If running script directly, ensure repo root is on path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import re
from pathlib import Path

from lrid.engine import InstrumentConfigError, ResponseSet, build_draft, load_instrument_file
from lrid.logging_config import log_event, log_failure
from lrid.settings import get_settings


def safe_file_name(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_.-]", "_", name or "")


def main(argv: list[str]) -> int:
    if not argv:
        print("Usage: python scripts/build_draft.py <responses.json> [out.json]")
        return 1

    settings = get_settings()
    try:
        instrument = load_instrument_file(settings.INSTRUMENT_PATH)
    except InstrumentConfigError as e:
        log_failure("INSTRUMENT_CONFIG", {"detail": str(e)})
        return 1

    src = Path(argv[0])
    if not src.exists():
        print(f"Input responses file not found: {src}")
        return 1

    responses = ResponseSet.model_validate(json.loads(src.read_text(encoding="utf-8")))
    draft = build_draft(instrument, responses)

    out = Path(argv[1]) if len(argv) > 1 else src.parent / safe_file_name(f"draft_{draft.case_id}.json")
    out.write_text(json.dumps(draft.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")

    log_event("BUILD_DRAFT", f"Draft created: {out}", {
        "case_id": draft.case_id,
        "validation_status": draft.validation.status,
        "recommendation": draft.recommendation,
    })
    if draft.validation.status == "FAIL":
        print("Draft has hard validation errors. See draft.validation.hard_errors")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
