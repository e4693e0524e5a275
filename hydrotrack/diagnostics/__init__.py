"""Diagnostic harness package producing pass/fail/skip suite reports."""

from .models import (
    DiagnosticOutcome,
    DiagnosticResult,
    DiagnosticStatus,
    DiagnosticSuiteReport,
    DiagnosticSummary,
    diagnostics_build_suite,
    diagnostics_suite_to_payload,
)
from .runner import DiagnosticsRunner, diagnostics_render_report

__all__ = [
    "DiagnosticOutcome",
    "DiagnosticResult",
    "DiagnosticStatus",
    "DiagnosticSuiteReport",
    "DiagnosticSummary",
    "DiagnosticsRunner",
    "diagnostics_build_suite",
    "diagnostics_render_report",
    "diagnostics_suite_to_payload",
]
