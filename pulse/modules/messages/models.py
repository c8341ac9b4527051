# Supabase tables: messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py and inbox.py

"""
Expected Supabase table structure:

messages:
- id: uuid (primary key)
- sender_id: uuid (references profiles.id)
- receiver_id: uuid (references profiles.id)
- content: text (not null)
- read_at: timestamp (nullable) - null until the receiver opens the thread
- created_at: timestamp (default: now())

Realtime: INSERT events on messages, filtered receiver_id=eq.{user_id},
must be enabled for the table (supabase_realtime publication).
"""
