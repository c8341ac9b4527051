# Supabase tables: follows
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

follows:
- id: uuid (primary key)
- follower_id: uuid (references profiles.id)
- following_id: uuid (references profiles.id)
- created_at: timestamp (default: now())

Note: neither self-follows nor duplicate (follower_id, following_id) pairs
are prevented by the table; FollowStore rejects both before writing.
"""
