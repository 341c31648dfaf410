"""
Core components for secaudit.

Contains:
- Base class for checkers and testers
- Data models (Finding, TestResult, AuditReport)
- Error taxonomy
"""
