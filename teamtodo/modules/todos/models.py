# Supabase table: todos
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

todos:
- id: bigint (primary key, generated always as identity)
- task: text (not null)
- is_completed: boolean (not null, default: false)
- user_id: uuid (foreign key to auth.users.id, not null) - author / owner
- team_id: uuid (foreign key to teams.id, nullable, on delete cascade)
- created_at: timestamp (default: now())

team_id IS NULL marks a private todo visible only to user_id.
A non-null team_id makes the todo visible to every member of that team.
"""
