# Supabase tables: comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

comments:
- id: uuid (primary key)
- post_id: uuid (references posts.id)
- user_id: uuid (references profiles.id)
- content: text (not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
