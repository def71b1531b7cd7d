# src/scheduling/__init__.py
"""
Appointment scheduling and doctor availability.

Domain types live in ``domain``, persistence in ``infrastructure``,
the scheduling engine in ``application`` and HTTP routing in ``api``.
The at-most-one-booking rule for a (doctor, date, time) slot is owned here.
"""
