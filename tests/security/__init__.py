"""
Security tests package.

Tests for critical security scenarios including:
- Session integrity enforcement and forced resets
- Stale backend results after a reset
- Secret handling in the Telegram adapter
"""
