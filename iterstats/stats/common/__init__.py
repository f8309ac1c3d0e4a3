"""
iterstats.stats.common
======================

Pure numerical kernels.

This package contains estimator-agnostic implementations of the update and
combination rules; the accumulator classes in `iterstats.stats` only hold
state and delegate to these functions.
"""
