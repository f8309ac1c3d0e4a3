"""
iterstats.backends
==================

Integrations with dataframe libraries. Accumulator logic never depends on
these modules; they only feed samples in and move snapshots out.
"""
