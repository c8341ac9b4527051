# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- username: text (unique)
- display_name: text (nullable)
- bio: text (nullable)
- avatar_url: text (nullable)
- website: text (nullable)
- location: text (nullable)
- mood: text (nullable)
- interests: text[] (nullable)
- followers_count: integer (default: 0)
- following_count: integer (default: 0)
- posts_count: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Storage bucket: avatars
- {user_id}/avatar.{ext}, overwritten on every upload

Note: the *_count columns are denormalized and may drift from the
follows/posts tables. Nothing in this package recomputes them.
"""
