"""Caller authentication for callable endpoints."""
