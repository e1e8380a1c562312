"""Persistence, storage and upload processing."""
