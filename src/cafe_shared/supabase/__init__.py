"""
Supabase access for the café console.
"""

from cafe_shared.supabase.client import (
    AuthGateway,
    DataClient,
    QueryResult,
    TableQuery,
    create_data_client,
)

__all__ = ["AuthGateway", "DataClient", "QueryResult", "TableQuery", "create_data_client"]
