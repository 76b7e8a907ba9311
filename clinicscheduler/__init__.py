"""
Clinic scheduler - working-hours, conflict and recurrence rules for appointments.
"""

__version__ = "0.1.0"
