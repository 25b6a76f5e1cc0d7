"""Holidays module — holiday calendars feeding the deduction engine."""
