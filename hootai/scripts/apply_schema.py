"""
Apply Schema Script
Runs hootai/database/schema.sql through the exec_sql RPC with the service-role client.
The exec_sql function must exist already: on a fresh project paste schema.sql
into the Supabase SQL editor once instead.
"""

import sys
import logging
from pathlib import Path

from hootai.config import settings
from hootai.database.supabase_client import get_supabase_admin
from supabase import Client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "database" / "schema.sql"


def read_schema(path: Path = SCHEMA_PATH) -> str:
    return path.read_text(encoding="utf-8")


def apply_schema(supabase: Client, sql: str) -> None:
    logger.info("Applying database schema...")
    supabase.rpc("exec_sql", {"query": sql}).execute()
    logger.info("Database schema applied successfully")
    logger.info("- user_profiles table with row level security policies")
    logger.info("- create_user_profile function and sign-up trigger")
    logger.info("- avatars storage bucket")


def main():
    if not settings.supabase_service_role_key:
        logger.error("SUPABASE_SERVICE_ROLE_KEY is required to apply the schema")
        sys.exit(1)
    try:
        apply_schema(get_supabase_admin(), read_schema())
    except Exception as e:
        logger.error(f"Failed to apply database schema: {e}")
        logger.info("You can apply it manually in the Supabase SQL editor using hootai/database/schema.sql")
        sys.exit(1)


if __name__ == "__main__":
    main()
