"""Helpers shared by API routes."""
