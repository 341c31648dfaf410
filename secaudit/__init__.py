"""
secaudit - source/runtime security-audit toolkit.

Engines:
- StaticScanner - rule-based line scanner over source trees
- MemorySafetyTracker - static heuristics + replay of ALLOC/FREE/ACCESS logs
- FuzzEngine - edge-case and randomized inputs against a target callable

Usage:
    python -m secaudit.main scan ./src
"""

__version__ = "1.0.0"
