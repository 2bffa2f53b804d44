# Supabase tables: user_profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL lives in hootai/database/schema.sql

"""
Expected Supabase table structure:

user_profiles:
- id: uuid (primary key, references auth.users.id)
- display_name: text (nullable)
- bio: text (nullable)
- avatar_url: text (nullable)
- preferences: jsonb (default '{}')
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())
- last_sign_in: timestamptz (nullable)

RPC functions:
- create_user_profile(user_id uuid, profile_created_at timestamptz)
- exec_sql(query text)  -- service_role only

Storage buckets:
- avatars (public)
"""

PROFILES_TABLE = "user_profiles"
AVATARS_BUCKET = "avatars"
