"""Core constants and data types for the mahjongrate application."""
