# Supabase Auth
# Identities live in Supabase's auth.users table; this service never
# stores passwords or sessions.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve a JWT to a stable user id
- auth.sign_out() - Logout users

The user id returned by auth.get_user() is the only identity the team and
todo services consume. It is the value auth.uid() returns inside RLS
policies when the same JWT is forwarded to PostgREST.
"""
