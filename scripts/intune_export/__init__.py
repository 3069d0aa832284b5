"""Intune mobile app inventory export.

Authenticates against Microsoft Graph, pulls the Intune mobile app inventory
with pagination, de-duplicates it into a local SQLite store, optionally
enriches each app with public Google Play / App Store metadata, and exports
the table to CSV and JSON.
"""
