"""
Database module for the code-analysis datamart.
"""

from .database import DatabaseManager, db_manager, get_db_session, initialize_database
from .models import DimSnapshot, DimApplication, AppHealthScore, AppSizingMeasure, AppViolationsMeasure
from .repository import DatamartRepository

__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db_session",
    "initialize_database",
    "DimSnapshot",
    "DimApplication",
    "AppHealthScore",
    "AppSizingMeasure",
    "AppViolationsMeasure",
    "DatamartRepository"
]
