"""
I_catalog: Catalog input and output.

- I01: Catalog directory loader and annotated catalog writer
"""
