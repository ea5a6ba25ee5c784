"""Data models for scripted pet behavior."""
