"""
Extraction pipeline.
Turns fetched carrier bytes into canonical tracking records.
"""
