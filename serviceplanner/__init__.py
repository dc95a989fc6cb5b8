"""
Service planning toolkit: rehearsal polls, event availability and order of service.
"""

__version__ = "0.3.0"
