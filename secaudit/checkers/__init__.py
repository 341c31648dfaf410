"""
Static analysis checkers.

Contains:
- StaticScanner - line-by-line rule matching over a source tree
- Rule, DEFAULT_RULES - the detection rules it applies
"""
