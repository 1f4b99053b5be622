"""
Appointment planner backend.

Per-user appointments with daily/weekly/monthly recurrence, conflict
detection and day/week/month listing.
"""
__version__ = "0.3.0"
