"""Supra Move code-generation relay with a per-user usage quota."""
