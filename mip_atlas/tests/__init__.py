"""
Tests for the mip-atlas package.
"""
