"""Calendar admin package.

Feature modules (users, permissions, calendar, schedules) each keep a thin
Flask controller on top of service and repository layers.
"""
