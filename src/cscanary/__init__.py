"""CSCanary - internal/external reachability watchdog.

Pings and HTTP-checks an internal and an external endpoint on independent
timers, logs failures, and emails a rate-limited alert.
"""

__version__ = "0.1.0"
