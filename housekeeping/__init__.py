"""Housekeeping Management System: rooms, staff, assignments, checklists and supplies."""

__version__ = "0.1.0"
