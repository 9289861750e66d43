"""
Carrier Tracker.
Scrapes carrier tracking pages and PDF reports into canonical tracking records.
"""

__version__ = "1.0.0"
