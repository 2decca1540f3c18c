"""
Application Layer for workout record resolution.

This package contains:
- ports/: Abstract provider interface (what the core needs)
- services/: Parse cache, memoizing parser and cache strategy selection
- use_cases/: Reference resolution, library collections and workout history
"""
