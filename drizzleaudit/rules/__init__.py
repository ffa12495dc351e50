"""drizzleaudit rule definitions, discovered per category by the orchestrator."""
