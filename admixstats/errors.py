# -*- coding: utf-8 -*-
"""Exceptions and warnings raised by admixstats."""


class InvalidArgumentCombination(ValueError):
    """Mutually exclusive options were requested together."""


class EmptyPopulationError(ValueError):
    """A population has no called samples at a variant where a
    per-population denominator is required."""


class InsufficientJackknifeBlocks(ValueError):
    """Fewer than two non-empty blocks remain, so the jackknife variance is
    undefined."""


class OptimizerNonConvergence(RuntimeWarning):
    """The optimiser stopped before meeting its convergence criterion. The
    best iterate found is still returned."""
