"""Utility modules for vigilant."""

from vigilant.utils.ordered_map import OrderedCollection

__all__ = ["OrderedCollection"]
