from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class Issue:
    """One content-integrity finding."""

    code: str
    severity: str
    message: str
    document: Optional[str] = None
    target: Optional[str] = None
    line: Optional[int] = None


@dataclass
class CheckReport:
    """Result of an integrity run over a catalog."""

    documents_checked: int = 0
    issues: List[Issue] = field(default_factory=list)
    checks_run: List[str] = field(default_factory=list)

    @property
    def errors(self) -> List[Issue]:
        return [i for i in self.issues if i.severity == ERROR]

    @property
    def warnings(self) -> List[Issue]:
        return [i for i in self.issues if i.severity == WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def passed(self, *, strict: bool = False) -> bool:
        return not self.issues if strict else self.ok

    def by_code(self) -> Dict[str, List[Issue]]:
        grouped: Dict[str, List[Issue]] = defaultdict(list)
        for issue in self.issues:
            grouped[issue.code].append(issue)
        return dict(sorted(grouped.items()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "documents_checked": self.documents_checked,
            "checks_run": list(self.checks_run),
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [asdict(i) for i in self.issues],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def render_text(self) -> str:
        lines: List[str] = []
        lines.append("--- CONTENT INTEGRITY REPORT ---")
        lines.append(f"Documents checked: {self.documents_checked}")
        lines.append(f"Errors: {len(self.errors)}")
        lines.append(f"Warnings: {len(self.warnings)}")

        for code, issues in self.by_code().items():
            lines.append("")
            lines.append(f"[{issues[0].severity.upper()}] {code} ({len(issues)})")
            for issue in issues:
                where = issue.document or "-"
                if issue.line is not None:
                    where = f"{where}:{issue.line}"
                lines.append(f"  - {where} | {issue.message}")

        lines.append("")
        if not self.issues:
            lines.append("All checks passed.")
        elif self.ok:
            lines.append("No errors, but some warnings to address.")
        else:
            lines.append("Errors need to be fixed.")
        return "\n".join(lines)
