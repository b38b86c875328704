"""Outbreak: a click-to-clear arena simulation built on pygame."""
