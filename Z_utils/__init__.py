"""
Z_utils: Utility functions and helpers.

Provides:
- Z01: Rate limiter and HTTP client base class
- Z02: Data loader for YAML closed-set files
- Z03: Strict calendar date parsing
"""
