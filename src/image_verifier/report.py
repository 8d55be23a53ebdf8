"""
Crawl results, summary output and JSON export.
"""
from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO


@dataclass(slots=True)
class ImageCheck:
    """Outcome of verifying one unique image URL."""
    url: str
    source: str
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code == 200 and self.error is None

    @property
    def outcome(self) -> str:
        return "working" if self.ok else "broken"

    @property
    def detail(self) -> str:
        """Status code and/or error message explaining the outcome."""
        if self.status_code is not None and self.error:
            return f"{self.status_code} ({self.error})"
        if self.status_code is not None:
            return str(self.status_code)
        return self.error or ""


@dataclass(slots=True)
class PageFailure:
    """A page that could not be fetched. Never fails the run by itself."""
    url: str
    status_code: Optional[int] = None
    error: Optional[str] = None


@dataclass
class CrawlReport:
    """Aggregated outcome of a verification run."""
    base_url: str
    pages_visited: int = 0
    checks: List[ImageCheck] = field(default_factory=list)
    page_failures: List[PageFailure] = field(default_factory=list)
    interrupted: bool = False

    def record_check(self, check: ImageCheck) -> None:
        self.checks.append(check)

    def record_page_failure(self, url: str, status_code: Optional[int] = None,
                            error: Optional[str] = None) -> None:
        self.page_failures.append(PageFailure(url, status_code, error))

    @property
    def images_checked(self) -> int:
        return len(self.checks)

    @property
    def working(self) -> List[ImageCheck]:
        return [c for c in self.checks if c.ok]

    @property
    def broken(self) -> List[ImageCheck]:
        return [c for c in self.checks if not c.ok]

    @property
    def passed(self) -> bool:
        return not self.interrupted and not self.broken

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "passed": self.passed,
            "interrupted": self.interrupted,
            "pages_visited": self.pages_visited,
            "images_checked": self.images_checked,
            "working": len(self.working),
            "broken": len(self.broken),
            "images": [dict(asdict(c), outcome=c.outcome) for c in self.checks],
            "page_failures": [asdict(p) for p in self.page_failures],
        }


def print_report(report: CrawlReport, stream: Optional[TextIO] = None) -> None:
    """Print the summary, the broken image listing and the final verdict."""
    out = stream or sys.stdout
    broken = report.broken

    out.write("\n" + "=" * 50 + "\n")
    out.write("RESULTS\n\n")

    out.write(f"Pages crawled:   {report.pages_visited}\n")
    out.write(f"Images checked:  {report.images_checked}\n")
    out.write(f"Working images:  {len(report.working)}\n")
    out.write(f"Broken images:   {len(broken)}\n")

    if report.page_failures:
        out.write(f"\nPages that could not be crawled ({len(report.page_failures)}):\n")
        for failure in report.page_failures:
            reason = failure.error or f"status {failure.status_code}"
            out.write(f"  {failure.url}: {reason}\n")

    if broken:
        out.write("\nBroken images:\n\n")
        for check in broken:
            out.write(f"  Image:    {check.url}\n")
            out.write(f"  Found on: {check.source}\n")
            if check.status_code is not None:
                out.write(f"  Status:   {check.status_code}\n")
            if check.error:
                out.write(f"  Error:    {check.error}\n")
            out.write("\n")

    if report.interrupted:
        out.write("\nINTERRUPTED: crawl stopped before the frontier was exhausted\n")
    if broken:
        out.write(f"\nFAILED: {len(broken)} broken image(s) found\n")
    elif report.passed:
        out.write("\nPASSED: all images are working\n")
    out.flush()


def write_json(report: CrawlReport, destination: str, pretty: bool = True) -> Optional[Path]:
    """Write the report as JSON to a file path, or to stdout when destination is '-'."""
    json_text = json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if pretty else None)

    if destination == "-":
        print(json_text)
        return None

    output_path = Path(destination)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json_text, encoding="utf-8")
    return output_path
