from __future__ import annotations

import json
from typing import TextIO

from .models import ResolutionRecord


def write_one_record(fh: TextIO, record: ResolutionRecord, need_comma: bool) -> None:
    if need_comma:
        fh.write(",\n")
    blob = json.dumps(record.to_dict(), ensure_ascii=False, indent=2)
    fh.write(blob)
    fh.flush()
