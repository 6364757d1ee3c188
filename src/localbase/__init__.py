"""
Localbase - Local development stand-in for the hosted Supabase client.

Emulates the fluent table()/select()/eq()/... query API and a minimal auth
session on top of a single-file SQLite database.
"""

__version__ = "0.1.0"
