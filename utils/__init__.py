"""Shared helpers: configuration-independent utilities and exceptions."""
