"""
C_matching: Brand-to-label matching.

- C01: Leading-token matcher and freshest effective date resolution
"""
