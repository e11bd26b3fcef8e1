"""
Postbridge - Supabase-style data client for PostgREST.

Lets a dashboard written against the Supabase client talk to a
self-hosted PostgREST API without changing its call sites.
"""

__version__ = "1.0.0"
