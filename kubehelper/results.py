"""Collection of condensed resources rendered as a JSON array."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


def _default(obj: Any) -> Any:
    return obj.to_dict()


@dataclass
class ListResult:
    results: list = field(default_factory=list)

    def add(self, item) -> None:
        self.results.append(item)

    def __str__(self) -> str:
        if not self.results:
            return "[]"
        return json.dumps(self.results, separators=(",", ":"), default=_default, ensure_ascii=False)