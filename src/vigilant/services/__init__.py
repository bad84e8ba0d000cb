"""Service layer for vigilant."""
