# -*- coding: utf-8 -*-
import logging
from collections import namedtuple


import numpy as np


from admixstats.constants import DIPLOID, MISSING
from admixstats.errors import EmptyPopulationError
from admixstats.util import asarray_ndim, group_labels, ignore_invalid


logger = logging.getLogger(__name__)
debug = logger.debug


AlleleStats = namedtuple('AlleleStats', ['pops', 'n', 'p', 'h'])
AlleleStats.__doc__ = """Per-variant, per-population summaries of a genotype
matrix.

Attributes
----------
pops : ndarray, shape (n_pops,)
    Population labels, in order of first occurrence.
n : ndarray, int, shape (n_variants, n_pops)
    Number of called (non-missing) samples.
p : ndarray, float, shape (n_variants, n_pops)
    Frequency of the counted allele among called samples.
h : ndarray, float, shape (n_variants, n_pops)
    Proportion of called samples that are heterozygous.

"""


def is_missing(gn, missing=MISSING):
    """Locate missing genotype calls.

    Parameters
    ----------
    gn : array_like, shape (n_variants, n_samples)
        Genotypes coded as the number of counted alleles per call.
    missing : int, optional
        Value used to represent missing calls. Any negative value, and NaN
        in floating point input, is also treated as missing.

    Returns
    -------
    mask : ndarray, bool, shape (n_variants, n_samples)

    """

    gn = np.asarray(gn)
    mask = (gn == missing) | (gn < 0)
    if gn.dtype.kind == 'f':
        mask |= np.isnan(gn)
    return mask


def count_called(gn, missing=MISSING, axis=None):
    return np.sum(~is_missing(gn, missing=missing), axis=axis)


def _indicator(inverse, n_groups):
    # one column per group, one row per sample
    ind = np.zeros((inverse.shape[0], n_groups), dtype='f8')
    ind[np.arange(inverse.shape[0]), inverse] = 1
    return ind


def check_populations_called(n, pops):
    """Raise :class:`EmptyPopulationError` if any population has no called
    samples at any variant."""
    n = np.asarray(n)
    empty = n == 0
    if np.any(empty):
        variant, pop = np.argwhere(empty)[0]
        raise EmptyPopulationError(
            'population %r has no called samples at variant %s '
            '(%s variant/population pairs affected)'
            % (pops[pop], variant, np.count_nonzero(empty))
        )


def _population_sums(gn, pops, missing):

    # check inputs
    gn = asarray_ndim(gn, 2)
    pops = asarray_ndim(pops, 1)
    if gn.shape[1] != pops.shape[0]:
        raise ValueError(
            'expected one population label per sample; found %s labels for '
            '%s samples' % (pops.shape[0], gn.shape[1])
        )
    labels, inverse, _ = group_labels(pops, order='first')
    debug('populations: %r', labels)

    # mask missing calls out of all sums
    mask = is_missing(gn, missing=missing)
    called = (~mask).astype('f8')
    values = np.where(mask, 0, gn).astype('f8')
    het = ((values == 1) & ~mask).astype('f8')

    # sum within populations
    ind = _indicator(inverse, labels.shape[0])
    n = np.rint(called.dot(ind)).astype('i8')
    ac = np.rint(values.dot(ind)).astype('i8')
    n_het = np.rint(het.dot(ind)).astype('i8')
    debug('n: %s', n.shape)

    return labels, n, ac, n_het


def population_allele_stats(gn, pops, missing=MISSING, ploidy=DIPLOID,
                            strict=False):
    """Compute sample size, allele frequency and heterozygosity for each
    population at each variant.

    Parameters
    ----------
    gn : array_like, shape (n_variants, n_samples)
        Genotypes coded as the number of counted alleles per call (0, 1, 2).
    pops : array_like, shape (n_samples,)
        Population label for each sample.
    missing : int, optional
        Value used to represent missing calls.
    ploidy : int, optional
        Sample ploidy.
    strict : bool, optional
        If True, raise :class:`EmptyPopulationError` when a population has
        no called samples at some variant. Otherwise frequency and
        heterozygosity for that population and variant are NaN.

    Returns
    -------
    stats : AlleleStats

    Examples
    --------

    >>> from admixstats.stats.alleles import population_allele_stats
    >>> gn = [[0, 1, 2, 2],
    ...       [1, 1, -1, 0]]
    >>> s = population_allele_stats(gn, ['A', 'A', 'B', 'B'])
    >>> s.n
    array([[2, 2],
           [2, 1]])
    >>> s.p
    array([[0.25, 1.  ],
           [0.5 , 0.  ]])
    >>> s.h
    array([[0.5, 0. ],
           [1. , 0. ]])

    """

    labels, n, ac, n_het = _population_sums(gn, pops, missing)

    if strict:
        check_populations_called(n, labels)

    with ignore_invalid():
        p = ac / (ploidy * n)
        h = n_het / n

    return AlleleStats(labels, n, p, h)


def population_allele_frequencies(gn, pops, missing=MISSING, ploidy=DIPLOID,
                                  strict=False):
    """Compute the frequency of the counted allele in each population.

    Returns
    -------
    labels : ndarray, shape (n_pops,)
        Population labels, in order of first occurrence.
    freqs : ndarray, float, shape (n_variants, n_pops)
        Allele frequencies; NaN where a population has no called samples.

    """
    stats = population_allele_stats(gn, pops, missing=missing, ploidy=ploidy,
                                    strict=strict)
    return stats.pops, stats.p


def population_allele_counts(gn, pops, missing=MISSING, ploidy=DIPLOID):
    """Count alleles within each population.

    Parameters
    ----------
    gn : array_like, shape (n_variants, n_samples)
        Genotypes coded as the number of counted alleles per call (0, 1, 2).
    pops : array_like, shape (n_samples,)
        Population label for each sample.
    missing : int, optional
        Value used to represent missing calls.
    ploidy : int, optional
        Sample ploidy.

    Returns
    -------
    labels : ndarray, shape (n_pops,)
        Population labels, in order of first occurrence.
    ac : ndarray, int, shape (n_variants, n_pops, 2)
        Allele counts, with the other allele first and the counted allele
        second. Counts at each variant and population sum to `ploidy` times
        the number of called samples.

    """
    labels, n, alt, _ = _population_sums(gn, pops, missing)
    an = ploidy * n
    ac = np.stack([an - alt, alt], axis=2)
    return labels, ac
