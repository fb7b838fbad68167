# Supabase table: user_profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

user_profiles:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (unique, references auth.users.id, on delete cascade)
- username: text (unique, nullable, [A-Za-z0-9_]+)
- display_name: text (nullable)
- avatar_url: text (nullable)
- bio: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

A profile is optional. Users without one can still create, join and be
invited to teams (by email); they just show up without a name.
"""
