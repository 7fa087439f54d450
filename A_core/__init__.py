"""
A_core: Domain models, enumerations, exceptions and logging.

Core abstractions for the label reconciliation pipeline:
- A00: Logging configuration
- A01: Pydantic catalog and openFDA label models
- A02: Closed-set enumerations
- A12: Exception hierarchy
"""
