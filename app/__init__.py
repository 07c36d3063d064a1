"""Hydraulic scenario editor service."""

__version__ = "0.1.0"
