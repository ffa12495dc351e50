"""Centralized exit codes for the drizzleaudit CLI."""


class ExitCodes:
    """Standard exit codes for drizzleaudit CLI commands."""

    SUCCESS = 0

    HIGH_SEVERITY = 1
    CRITICAL_SEVERITY = 2

    TASK_INCOMPLETE = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - No blocking issues found",
            cls.HIGH_SEVERITY: "High severity findings detected",
            cls.CRITICAL_SEVERITY: "Critical findings detected",
            cls.TASK_INCOMPLETE: "Task could not be completed (no files, bad arguments)",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

    @classmethod
    def for_severities(cls, severities: list[str], fail_on: str = "high") -> int:
        """Pick the exit code for a scan given the severities it produced."""
        from drizzleaudit.utils.finding_priority import PRIORITY_ORDER

        threshold = PRIORITY_ORDER.get(fail_on, PRIORITY_ORDER["high"])
        blocking = [s for s in severities if PRIORITY_ORDER.get(s, 7) <= threshold]
        if not blocking:
            return cls.SUCCESS
        if "critical" in blocking:
            return cls.CRITICAL_SEVERITY
        return cls.HIGH_SEVERITY
