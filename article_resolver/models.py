from __future__ import annotations

import dataclasses
from dataclasses import dataclass


@dataclass
class ResolutionRecord:
    original_url: str
    resolved_at: str
    resolved_url: str = ""
    host_class: str = ""
    elapsed_s: float = 0.0
    status: str = "ok"
    error_msg: str = ""

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)
