"""
Expense Tracker

Per-user expense, category and settings stores over a pluggable key-value
backend, with pure aggregation functions for dashboards and reports.
"""

__version__ = "1.0.0"
