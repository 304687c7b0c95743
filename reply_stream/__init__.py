"""
Reply Stream Service.

Streams several AI-drafted reply variants for a freelancer's client message
over a single Server-Sent-Events connection, then persists the result and
settles the user's monthly quota.
"""

__version__ = "1.0.0"
