"""
AutoMatch Engine web boundary.
"""
