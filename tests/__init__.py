"""
Test suite for metaexchange

Contains:
- tests/unit/          : Unit tests for individual modules
"""
