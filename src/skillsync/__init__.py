"""
skillsync - Sync curated agent skills from a GitHub registry into each
AI coding tool's skills directory.
"""

__version__ = "1.1.1"
