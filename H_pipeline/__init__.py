"""
H_pipeline: Pipeline orchestration.

- H01: FDA label recency reconciler
"""
