"""Console presentation for drizzleaudit commands."""
