"""
iterstats.core
==============

Infrastructure shared by every estimator: the error taxonomy, the
`Estimator`/`Mergeable` base classes, flat snapshots and the snapshot
ledger.
"""
