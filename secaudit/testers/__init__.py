"""
Runtime testers.

Contains:
- MemorySafetyTracker - memory-log replay and static memory heuristics
- FuzzEngine - edge-case and random-input fuzzing of a callable
"""
