# Supabase tables: posts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in store.py

"""
Expected Supabase table structure:

posts:
- id: uuid (primary key)
- user_id: uuid (references profiles.id)
- caption: text (nullable)
- image_url: text (nullable)
- video_url: text (nullable) - never set together with image_url
- location: text (nullable)
- mood: text (nullable)
- is_disappearing: boolean (default: false)
- likes_count: integer (default: 0)
- comments_count: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Storage buckets:
- posts: images, {user_id}/{timestamp_ms}.{ext}
- videos: videos, {user_id}/{timestamp_ms}.{ext}
"""
