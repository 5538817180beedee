"""
Test suite for README Pro.
"""
