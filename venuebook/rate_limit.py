"""
Rate limiting configuration using slowapi.

Three tiers:
  • strict  – 5/min  (password reset requests – prevents email spam)
  • auth    – 10/min (login / sign-up – prevents brute-force)
  • public  – 30/min (unauthenticated booking and link validation)

Everything else falls under the 120/min default.
The limiter keys on client IP.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=["120/minute"])

# Named rate strings for use in @limiter.limit() decorators
STRICT = "5/minute"      # forgot-password (email sending)
AUTH = "10/minute"       # login, sign-up, password change
PUBLIC = "30/minute"     # public bookings and link validation
