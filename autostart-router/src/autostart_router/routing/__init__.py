"""Vendor profile table and the fallback dispatch loop."""
