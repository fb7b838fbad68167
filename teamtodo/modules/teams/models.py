# Supabase tables: teams, team_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL and RLS policies: supabase/migrations/0001_teams_schema.sql

"""
Expected Supabase table structure:

teams:
- id: uuid (primary key, default gen_random_uuid())
- name: text (unique, not null, 2-50 chars)
- created_by: uuid (foreign key to auth.users.id, not null, never updated)
- invite_code: text (unique, not null, default generate_invite_code())
- created_at: timestamp (default: now())

team_members:
- team_id: uuid (foreign key to teams.id, on delete cascade)
- user_id: uuid (foreign key to auth.users.id, on delete cascade)
- joined_at: timestamp (default: now())
- primary key (team_id, user_id)

There is no role column: privilege comes from teams.created_by alone.
The API reports a derived role ("owner" for the creator, "member" otherwise).

Store-side functions (security definer):
- generate_invite_code() -> text
- join_team_by_invite_code(invite_code_param text)
    -> table(success boolean, message text, team_id uuid, team_name text, already_member boolean)
- get_user_id_by_email(email text) -> uuid
- get_user_id_by_username(username text) -> uuid
"""
