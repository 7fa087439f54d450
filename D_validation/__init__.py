"""
D_validation: Catalog integrity rules.

- D01: Fail-fast catalog validator returning ValidationResult verdicts
"""
