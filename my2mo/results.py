#!/usr/bin/env python3
# results.py
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ImportResult:
    name: str
    kind: str  # "table" or "join"
    ok: bool = True
    exit_status: Optional[int] = None
    records: Optional[int] = None
    stage: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, name, kind, err):
        return cls(
            name=name,
            kind=kind,
            ok=False,
            exit_status=getattr(err, "exit_status", None),
            stage=getattr(err, "stage", None),
            error=str(err),
        )


@dataclass
class BatchReport:
    """Per-entry outcomes of one import run, in processing order."""
    results: List[ImportResult] = field(default_factory=list)

    def add(self, result):
        self.results.append(result)
        return result

    @property
    def succeeded(self):
        return [r for r in self.results if r.ok]

    @property
    def failed(self):
        return [r for r in self.results if not r.ok]

    @property
    def ok(self):
        return not self.failed

    def summary(self):
        return f"{len(self.succeeded)} imported, {len(self.failed)} failed"
