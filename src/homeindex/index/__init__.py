"""Scanning, deduplication, persistence and scheduling."""
