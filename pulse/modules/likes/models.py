# Supabase tables: likes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

likes:
- id: uuid (primary key)
- user_id: uuid (references profiles.id)
- post_id: uuid (references posts.id)
- created_at: timestamp (default: now())

Note: at most one like per (user_id, post_id) is only guaranteed by the
client's pre-check in LikeStore.toggle_like, not by a unique constraint.
"""
