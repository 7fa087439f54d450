"""
B_lookup: Upstream label lookup.

- B01: openFDA drug label search client
"""
