"""Drizzle ORM schema and query rules."""

from .delete_where_analyze import DeleteWithoutWhereAnalyzer
from .index_naming_analyze import IndexNamingAnalyzer
from .join_complexity_analyze import JoinComplexityAnalyzer
from .rls_bypass_analyze import RLSBypassAnalyzer
from .rls_required_analyze import RLSRequiredAnalyzer
from .select_star_analyze import SelectStarAnalyzer
from .snake_case_analyze import SnakeCaseAnalyzer
from .timestamp_columns_analyze import TimestampColumnsAnalyzer
from .update_where_analyze import UpdateWithoutWhereAnalyzer
from .uuid_index_analyze import UUIDIndexAnalyzer
from .uuid_primary_key_analyze import UUIDPrimaryKeyAnalyzer

__all__ = [
    "DeleteWithoutWhereAnalyzer",
    "UpdateWithoutWhereAnalyzer",
    "UUIDIndexAnalyzer",
    "SnakeCaseAnalyzer",
    "IndexNamingAnalyzer",
    "TimestampColumnsAnalyzer",
    "UUIDPrimaryKeyAnalyzer",
    "SelectStarAnalyzer",
    "JoinComplexityAnalyzer",
    "RLSRequiredAnalyzer",
    "RLSBypassAnalyzer",
]
