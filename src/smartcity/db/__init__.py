from .connection import DatabaseConnection, DatabaseHealth, mask_database_url

__all__ = ["DatabaseConnection", "DatabaseHealth", "mask_database_url"]
