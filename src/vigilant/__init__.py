"""Vigilant - live Kubernetes resource dashboard for the terminal."""

__version__ = "0.1.0"
