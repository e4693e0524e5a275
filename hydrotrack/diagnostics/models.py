"""Diagnostic probe results and suite report contracts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence


class DiagnosticStatus(str, Enum):
    """Outcome of one diagnostic probe."""

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


@dataclass(frozen=True)
class DiagnosticOutcome:
    """Value returned by a probe body before timing is attached."""

    status: DiagnosticStatus
    message: str
    details: Any = None


@dataclass(frozen=True)
class DiagnosticResult:
    """Timed result of one diagnostic probe.

    Attributes:
        name: Probe name.
        status: Probe outcome.
        message: Operational message.
        duration_ms: Elapsed probe time in milliseconds.
        details: Optional diagnostic payload.
    """

    name: str
    status: DiagnosticStatus
    message: str
    duration_ms: float
    details: Any = None


@dataclass(frozen=True)
class DiagnosticSummary:
    total: int
    passed: int
    failed: int
    skipped: int
    duration_ms: float


@dataclass(frozen=True)
class DiagnosticSuiteReport:
    """Ordered probe results for one functional area with their summary."""

    suite_name: str
    results: tuple[DiagnosticResult, ...]
    summary: DiagnosticSummary


def diagnostics_build_suite(suite_name: str, results: Sequence[DiagnosticResult]) -> DiagnosticSuiteReport:
    """Aggregate probe results into a suite report.

    The summary is a pure function of `results`: counts by status and the sum of probe durations.
    """

    ordered_results = tuple(results)
    summary = DiagnosticSummary(
        total=len(ordered_results),
        passed=sum(1 for result in ordered_results if result.status is DiagnosticStatus.PASS),
        failed=sum(1 for result in ordered_results if result.status is DiagnosticStatus.FAIL),
        skipped=sum(1 for result in ordered_results if result.status is DiagnosticStatus.SKIP),
        duration_ms=sum(result.duration_ms for result in ordered_results),
    )
    return DiagnosticSuiteReport(suite_name=suite_name, results=ordered_results, summary=summary)


def diagnostics_suite_to_payload(report: DiagnosticSuiteReport) -> dict[str, Any]:
    return {
        "suiteName": report.suite_name,
        "results": [
            {
                "name": result.name,
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "durationMs": result.duration_ms,
            }
            for result in report.results
        ],
        "summary": {
            "total": report.summary.total,
            "passed": report.summary.passed,
            "failed": report.summary.failed,
            "skipped": report.summary.skipped,
            "durationMs": report.summary.duration_ms,
        },
    }
