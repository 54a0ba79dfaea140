"""
Gateway package for the Women Empowerment Super App Lite API.

This package provides a FastAPI application that verifies Firebase ID
tokens and forwards owner-scoped CRUD operations to the Supabase Postgres
database and storage bucket.
"""
