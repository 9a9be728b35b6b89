"""
Command line interface to Evermark.
"""
