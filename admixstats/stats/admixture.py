# -*- coding: utf-8 -*-
import logging
from collections import namedtuple


import numpy as np


from admixstats.errors import EmptyPopulationError
from admixstats.util import asarray_ndim, check_dim0_aligned, \
    ignore_invalid, resolve_labels
from admixstats.stats.misc import block_jackknife


logger = logging.getLogger(__name__)
debug = logger.debug


StatResult = namedtuple('StatResult', [
    'pops', 'estimate', 'se', 'z', 'n_sites', 'n_blocks'
])
StatResult.__doc__ = """Result of a D or F3 test for one population
configuration.

Attributes
----------
pops : tuple
    Population labels, in configuration order.
estimate : float
    Value of the statistic over all retained variants.
se : float
    Block-jackknife standard error.
z : float
    ``estimate / se``.
n_sites : int
    Number of variants retained after filtering.
n_blocks : int
    Number of jackknife blocks among retained variants.

"""


def h_hat(ac):
    """Unbiased estimator for h, where 2*h is the heterozygosity
    of the population.

    Parameters
    ----------
    ac : array_like, int, shape (n_variants, 2)
        Allele counts array for a single population.

    Returns
    -------
    h_hat : ndarray, float, shape (n_variants,)

    Notes
    -----
    Used in Patterson (2012) for calculation of various statistics.

    """

    # check inputs
    ac = asarray_ndim(ac, 2)
    if ac.shape[1] != 2:
        raise ValueError('only biallelic variants supported')

    # compute allele number
    an = ac.sum(axis=1)

    # compute estimator
    with ignore_invalid():
        x = (ac[:, 0] * ac[:, 1]) / (an * (an - 1))

    return x


def _to_frequencies(ac):
    an = ac.sum(axis=1)
    with ignore_invalid():
        return ac[:, 1] / an


def patterson_f3(acc, aca, acb):
    """Unbiased estimator for F3(C; A, B), the three-population test for
    admixture in population C.

    Parameters
    ----------
    acc : array_like, int, shape (n_variants, 2)
        Allele counts for the test population (C).
    aca : array_like, int, shape (n_variants, 2)
        Allele counts for the first source population (A).
    acb : array_like, int, shape (n_variants, 2)
        Allele counts for the second source population (B).

    Returns
    -------
    T : ndarray, float, shape (n_variants,)
        Un-normalized f3 estimates per variant.
    B : ndarray, float, shape (n_variants,)
        Estimates for heterozygosity in population C (twice h_hat).

    Notes
    -----
    See Patterson (2012), main text and Appendix A.

    The normalised f3 statistic is ``np.sum(T) / np.sum(B)``.

    """

    # check inputs
    aca = asarray_ndim(aca, 2)
    acb = asarray_ndim(acb, 2)
    acc = asarray_ndim(acc, 2)
    check_dim0_aligned(aca, acb, acc)

    # compute allele number and heterozygosity in test population
    sc = acc.sum(axis=1)
    hc = h_hat(acc)

    # compute sample frequencies for the counted allele
    a = _to_frequencies(aca)
    b = _to_frequencies(acb)
    c = _to_frequencies(acc)

    # compute estimator
    with ignore_invalid():
        T = ((c - a) * (c - b)) - (hc / sc)
    B = 2 * hc

    return T, B


def patterson_d(fa, fb, fc, fd):
    """Estimator for D(A, B; C, D), the normalised four-population
    test for admixture between (A or B) and (C or D), also known as the
    "ABBA BABA" test.

    Parameters
    ----------
    fa, fb, fc, fd : array_like, float, shape (n_variants,)
        Frequency of the counted allele in populations A, B, C and D.

    Returns
    -------
    num : ndarray, float, shape (n_variants,)
        Numerator (un-normalised f4 estimates).
    den : ndarray, float, shape (n_variants,)
        Denominator.

    Notes
    -----
    See Patterson (2012), main text and Appendix A.

    """

    a = asarray_ndim(fa, 1)
    b = asarray_ndim(fb, 1)
    c = asarray_ndim(fc, 1)
    d = asarray_ndim(fd, 1)
    check_dim0_aligned(a, b, c, d)

    num = (a - b) * (c - d)
    den = (a + b - (2 * a * b)) * (c + d - (2 * c * d))

    return num, den


def d_test_filter(fa, fb, fc, fd):
    """Locate variants polymorphic within both pairs (A, B) and (C, D), i.e.,
    excluding variants where both members of a pair share the same fixed
    allele.

    Returns
    -------
    loc : ndarray, bool, shape (n_variants,)

    """
    ab = np.asarray(fa) + np.asarray(fb)
    cd = np.asarray(fc) + np.asarray(fd)
    return ~(np.isin(ab, [0, 2]) | np.isin(cd, [0, 2]))


def f3_test_filter(fc, fa, fb):
    """Locate variants polymorphic in the pairs (C, A) and (C, B), where C is
    the test population.

    Within each pair at most one population may have frequency exactly 0
    and at most one may have frequency exactly 1.

    Returns
    -------
    loc : ndarray, bool, shape (n_variants,)

    """
    fc = np.asarray(fc)
    loc = np.ones(fc.shape, dtype=bool)
    for f in fa, fb:
        f = np.asarray(f)
        loc &= ((fc == 0).astype(int) + (f == 0)) <= 1
        loc &= ((fc == 1).astype(int) + (f == 1)) <= 1
    return loc


def _uninformative(loc_empty, config, strict):
    n_empty = np.count_nonzero(loc_empty)
    if n_empty:
        if strict:
            raise EmptyPopulationError(
                'populations %r lack data at %s variants' % (config, n_empty)
            )
        logger.info('%s: %s variants without data in some population '
                    'excluded', config, n_empty)


def _check_blocks(blocks, n_variants):
    blocks = asarray_ndim(blocks, 1)
    if blocks.shape[0] != n_variants:
        raise ValueError(
            'expected one block identifier per variant; found %s for %s '
            'variants' % (blocks.shape[0], n_variants)
        )
    return blocks


def d_test(freqs, labels, config, blocks, strict=False):
    """Run the D-test for admixture, D(P1, P2; P3, P4), with block-jackknife
    standard error.

    Parameters
    ----------
    freqs : array_like, float, shape (n_variants, n_pops)
        Frequency of the counted allele in each population, NaN where a
        population has no data.
    labels : sequence, length n_pops
        Population label of each column of `freqs`.
    config : sequence of 4 labels
        Populations (P1, P2, P3, P4).
    blocks : array_like, shape (n_variants,)
        Jackknife block identifier for each variant.
    strict : bool, optional
        If True, raise :class:`admixstats.errors.EmptyPopulationError` when
        any population lacks data at some variant; otherwise those variants
        are excluded.

    Returns
    -------
    result : StatResult

    Notes
    -----
    Only variants polymorphic within (P1, P2) and within (P3, P4) are used,
    so `n_sites` may be much smaller than the number of input variants.

    """

    # check inputs
    freqs = asarray_ndim(freqs, 2).astype('f8', copy=False)
    config = tuple(config)
    if len(config) != 4:
        raise ValueError('D-test requires 4 populations, found %s'
                         % len(config))
    blocks = _check_blocks(blocks, freqs.shape[0])
    idx = resolve_labels(labels, config)
    f = freqs[:, idx]

    # drop variants without data, then those fixed within a pair
    loc_empty = np.any(np.isnan(f), axis=1)
    _uninformative(loc_empty, config, strict)
    loc = ~loc_empty & d_test_filter(*f.T)
    f = f[loc]
    debug('D%s: retained %s of %s variants', config, f.shape[0], loc.shape[0])

    num, den = patterson_d(*f.T)
    jk = block_jackknife(num, den, blocks[loc])

    return StatResult(config, jk.estimate, jk.se, jk.z, jk.n_obs,
                      jk.n_blocks)


def f3_test(ac, labels, config, blocks, strict=False):
    """Run the F3-test for admixture, F3(C; A, B), with block-jackknife
    standard error.

    Parameters
    ----------
    ac : array_like, int, shape (n_variants, n_pops, 2)
        Allele counts for each population; the second allele is the one
        whose frequency is compared.
    labels : sequence, length n_pops
        Population label of each population in `ac`.
    config : sequence of 3 labels
        Populations (C, A, B), test population first.
    blocks : array_like, shape (n_variants,)
        Jackknife block identifier for each variant.
    strict : bool, optional
        If True, raise :class:`admixstats.errors.EmptyPopulationError` when a
        source population has no allele calls or the test population has
        fewer than two at some variant; otherwise those variants are
        excluded.

    Returns
    -------
    result : StatResult

    Notes
    -----
    The statistic is ``sum(T) / sum(B)`` where T and B are the terms from
    :func:`patterson_f3`. Negative values with large negative Z indicate
    that C is admixed between populations related to A and B.

    """

    # check inputs
    ac = asarray_ndim(ac, 3)
    if ac.shape[2] != 2:
        raise ValueError('only biallelic variants supported')
    config = tuple(config)
    if len(config) != 3:
        raise ValueError('F3-test requires 3 populations, found %s'
                         % len(config))
    blocks = _check_blocks(blocks, ac.shape[0])
    idx = resolve_labels(labels, config)
    acc, aca, acb = ac[:, idx[0]], ac[:, idx[1]], ac[:, idx[2]]

    # drop variants where the heterozygosity or a frequency is undefined
    an = ac[:, idx].sum(axis=2)
    loc_empty = (an[:, 0] < 2) | (an[:, 1] == 0) | (an[:, 2] == 0)
    _uninformative(loc_empty, config, strict)

    # drop variants fixed within the test pairs
    fc, fa, fb = (_to_frequencies(x) for x in (acc, aca, acb))
    loc = ~loc_empty & f3_test_filter(fc, fa, fb)
    debug('F3%s: retained %s of %s variants', config,
          np.count_nonzero(loc), loc.shape[0])

    T, B = patterson_f3(acc[loc], aca[loc], acb[loc])
    jk = block_jackknife(T, B, blocks[loc])

    return StatResult(config, jk.estimate, jk.se, jk.z, jk.n_obs,
                      jk.n_blocks)


def _tabulate(results, stat_name):
    import pandas

    rows = []
    for res in results:
        row = dict(('p%s' % (i + 1), p) for i, p in enumerate(res.pops))
        row[stat_name] = res.estimate
        row['se'] = res.se
        row['Z'] = res.z
        row['nSites'] = res.n_sites
        rows.append(row)
    return pandas.DataFrame(rows)


def d_tests(freqs, labels, configs, blocks, strict=False):
    """Run :func:`d_test` for each of several configurations.

    Returns
    -------
    df : pandas.DataFrame
        One row per configuration with columns p1, p2, p3, p4, D, se, Z and
        nSites.

    """
    results = [d_test(freqs, labels, config, blocks, strict=strict)
               for config in configs]
    return _tabulate(results, 'D')


def f3_tests(ac, labels, configs, blocks, strict=False):
    """Run :func:`f3_test` for each of several configurations.

    Returns
    -------
    df : pandas.DataFrame
        One row per configuration with columns p1, p2, p3, f3, se, Z and
        nSites.

    """
    results = [f3_test(ac, labels, config, blocks, strict=strict)
               for config in configs]
    return _tabulate(results, 'f3')
