"""Centralized finding prioritization for report ordering."""

PRIORITY_ORDER = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 3,
    "info": 4,
    "unknown": 5,
}


SEVERITY_MAPPINGS = {
    2: "high",
    1: "medium",
    0: "info",
    "error": "high",
    "warning": "medium",
    "warn": "medium",
    "info": "low",
    "fatal": "critical",
    "critical": "critical",
    "high": "high",
    "medium": "medium",
    "low": "low",
}


def normalize_severity(severity_value):
    """Normalize severity from ESLint-style or numeric values to a standard string."""
    if severity_value is None:
        return "medium"

    if isinstance(severity_value, (int, float)):
        return SEVERITY_MAPPINGS.get(int(severity_value), "medium")

    severity_str = str(severity_value).lower().strip()

    if severity_str in PRIORITY_ORDER:
        return severity_str

    return SEVERITY_MAPPINGS.get(severity_str, "medium")


def get_sort_key(finding):
    """Generate sort key for a finding dict."""

    normalized_severity = normalize_severity(finding.get("severity"))

    return (
        PRIORITY_ORDER.get(normalized_severity, 5),
        finding.get("file", "zzz"),
        finding.get("line", 999999),
        finding.get("column", 0),
        finding.get("rule", ""),
    )


def sort_findings(findings):
    """Sort findings by priority for report organization."""
    if not findings:
        return findings

    return sorted(findings, key=get_sort_key)
