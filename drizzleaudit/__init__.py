"""drizzleaudit - static advisories for Drizzle ORM schemas and queries."""

__version__ = "0.4.0"
