"""
Test suite for the docgen package.
"""
