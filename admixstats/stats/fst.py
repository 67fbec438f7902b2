# -*- coding: utf-8 -*-
import logging


import numpy as np


from admixstats.constants import MISSING
from admixstats.errors import InvalidArgumentCombination
from admixstats.util import asarray_ndim, check_min_populations, \
    get_blen_array, group_labels, ignore_invalid, check_dim0_aligned
from admixstats.stats.alleles import population_allele_stats, \
    check_populations_called
from admixstats.stats.misc import block_jackknife


logger = logging.getLogger(__name__)
debug = logger.debug


def check_fst_modes(region, extended):
    if region and extended:
        raise InvalidArgumentCombination(
            "'region' and 'extended' cannot be used together"
        )


def _finite_ratio_of_sums(num, den):
    # markers with undefined terms (e.g., an empty population) are left out
    ok = np.isfinite(num) & np.isfinite(den)
    n_skip = np.count_nonzero(~ok)
    if n_skip:
        logger.info('%s markers with undefined terms left out of region sum',
                    n_skip)
    with ignore_invalid():
        return np.sum(num[ok]) / np.sum(den[ok])


def weir_cockerham_fst(gn, pops, missing=MISSING, strict=False, blen=None):
    """Compute the variance components from the analyses of variance of
    allele frequencies according to Weir and Cockerham (1984).

    Parameters
    ----------
    gn : array_like, int, shape (n_variants, n_samples)
        Genotypes at biallelic variants, coded as the number of counted
        alleles per call (0, 1, 2), diploid only.
    pops : array_like, shape (n_samples,)
        Population label for each sample. At least two distinct labels are
        required.
    missing : int, optional
        Value used to represent missing calls.
    strict : bool, optional
        If True, raise :class:`admixstats.errors.EmptyPopulationError` when
        a population has no called samples at some variant. Otherwise the
        components for that variant are NaN.
    blen : int, optional
        Number of variants to compute at a time.

    Returns
    -------
    a : ndarray, float, shape (n_variants,)
        Component of variance between populations.
    b : ndarray, float, shape (n_variants,)
        Component of variance between individuals within populations.
    c : ndarray, float, shape (n_variants,)
        Component of variance between gametes within individuals.

    Examples
    --------

    >>> from admixstats.stats.fst import weir_cockerham_fst
    >>> gn = [[0, 0, 2, 2],
    ...       [1, 1, 1, 1],
    ...       [0, 0, 0, 0],
    ...       [0, 1, 2, -1]]
    >>> a, b, c = weir_cockerham_fst(gn, ['A', 'B', 'A', 'B'])
    >>> a
    array([-0.25 ,  0.   ,  0.   , -0.375])

    Note that estimated Fst values may be negative.

    See Also
    --------
    weir_cockerham_fst_per_marker, weir_cockerham_fst_region

    """

    # check inputs
    gn = asarray_ndim(gn, 2)
    pops = asarray_ndim(pops, 1)
    labels, _, _ = group_labels(pops)
    check_min_populations(labels.shape[0], 2)

    # compute in chunks to limit the size of intermediate arrays
    blen = get_blen_array(gn, blen)
    n_variants = gn.shape[0]
    a = np.zeros(n_variants, dtype='f8')
    b = np.zeros(n_variants, dtype='f8')
    c = np.zeros(n_variants, dtype='f8')
    for i in range(0, n_variants, blen):
        j = min(n_variants, i + blen)
        ab, bb, cb = _weir_cockerham_fst(gn[i:j], pops, missing, strict)
        a[i:j] = ab
        b[i:j] = bb
        c[i:j] = cb

    return a, b, c


def _weir_cockerham_fst(gn, pops, missing, strict):

    stats = population_allele_stats(gn, pops, missing=missing, strict=strict)
    n = stats.n.astype('f8')
    p = stats.p
    h = stats.h

    # number of populations sampled
    r = n.shape[1]
    debug('r: %r', r)

    with ignore_invalid():

        # average sample size across populations
        n_bar = np.sum(n, axis=1) / r
        debug('n_bar: %s, %r', n_bar.shape, n_bar)

        # the term n sub C incorporating the coefficient of variation in
        # sample sizes
        n_C = (r * n_bar -
               np.sum(n ** 2 / (r * n_bar[:, np.newaxis]), axis=1)) / (r - 1)
        debug('n_C: %s, %r', n_C.shape, n_C)

        # average sample frequency of the allele
        p_bar = np.sum(n * p / (r * n_bar[:, np.newaxis]), axis=1)

        # sample variance of allele frequencies over populations
        s_squared = np.sum(
            n * (p - p_bar[:, np.newaxis]) ** 2 /
            ((r - 1) * n_bar[:, np.newaxis]),
            axis=1
        )

        # average heterozygote frequency
        h_bar = np.sum(n * h / (r * n_bar[:, np.newaxis]), axis=1)

        # component of variance between populations
        a = ((n_bar / n_C) *
             (s_squared -
              ((1 / (n_bar - 1)) *
               ((p_bar * (1 - p_bar)) -
                ((r - 1) * s_squared / r) -
                (h_bar / 4)))))

        # component of variance between individuals within populations
        b = ((n_bar / (n_bar - 1)) *
             ((p_bar * (1 - p_bar)) -
              ((r - 1) * s_squared / r) -
              (((2 * n_bar) - 1) * h_bar / (4 * n_bar))))

        # component of variance between gametes within individuals
        c = h_bar / 2

    return a, b, c


def weir_cockerham_fst_per_marker(gn, pops, missing=MISSING, strict=False,
                                  blen=None):
    """Estimate Fst for each variant following Weir and Cockerham (1984).

    Parameters are as for :func:`weir_cockerham_fst`.

    Returns
    -------
    fst : ndarray, float, shape (n_variants,)
        ``a / (a + b + c)``; NaN at monomorphic variants.

    """
    a, b, c = weir_cockerham_fst(gn, pops, missing=missing, strict=strict,
                                 blen=blen)
    with ignore_invalid():
        return a / (a + b + c)


def weir_cockerham_fst_region(gn, pops, missing=MISSING, strict=False,
                              blen=None):
    """Estimate Fst over a set of variants following Weir and Cockerham
    (1984), as the ratio of summed variance components.

    Parameters are as for :func:`weir_cockerham_fst`.

    Returns
    -------
    fst : float
        ``sum(a) / sum(a + b + c)`` over variants with defined components.
        This is not the mean of per-variant Fst values.

    """
    a, b, c = weir_cockerham_fst(gn, pops, missing=missing, strict=strict,
                                 blen=blen)
    return float(_finite_ratio_of_sums(a, a + b + c))


def average_weir_cockerham_fst(gn, pops, blocks, missing=MISSING,
                               strict=False, blen=None):
    """Estimate region Fst following Weir and Cockerham (1984), with
    standard error from the delete-one-block jackknife.

    Parameters
    ----------
    gn : array_like, int, shape (n_variants, n_samples)
        Genotype matrix.
    pops : array_like, shape (n_samples,)
        Population label for each sample.
    blocks : array_like, shape (n_variants,)
        Block identifier for each variant.
    missing, strict, blen
        As for :func:`weir_cockerham_fst`.

    Returns
    -------
    result : admixstats.stats.misc.JackknifeResult

    """

    a, b, c = weir_cockerham_fst(gn, pops, missing=missing, strict=strict,
                                 blen=blen)
    blocks = asarray_ndim(blocks, 1)
    check_dim0_aligned(a, blocks)
    den = a + b + c
    ok = np.isfinite(a) & np.isfinite(den)
    return block_jackknife(a[ok], den[ok], blocks[ok])


def fst_gt(gn, pops, region=False, extended=False, **kwargs):
    """Estimate Fst from genotypes following Weir and Cockerham (1984),
    selecting the output with flags.

    Parameters
    ----------
    gn : array_like, int, shape (n_variants, n_samples)
        Genotype matrix.
    pops : array_like, shape (n_samples,)
        Population label for each sample.
    region : bool, optional
        Return a single Fst value for all variants.
    extended : bool, optional
        Return the variance components, as an array of shape
        (n_variants, 3).
    **kwargs
        Passed through to :func:`weir_cockerham_fst`.

    Returns
    -------
    fst : ndarray or float

    """
    check_fst_modes(region, extended)
    if region:
        return weir_cockerham_fst_region(gn, pops, **kwargs)
    if extended:
        return np.column_stack(weir_cockerham_fst(gn, pops, **kwargs))
    return weir_cockerham_fst_per_marker(gn, pops, **kwargs)


def weir_hill_fst(ac, strict=False):
    """Compute the terms of the Fst estimator of Weir and Hill (2002) from
    allele counts, supporting multiallelic variants.

    Parameters
    ----------
    ac : array_like, int, shape (n_variants, n_pops, n_alleles)
        Allele counts for each population.
    strict : bool, optional
        If True, raise :class:`admixstats.errors.EmptyPopulationError` when a
        population has no allele calls at some variant. Otherwise the terms
        for that variant are NaN.

    Returns
    -------
    num : ndarray, float, shape (n_variants,)
        Mean squares among populations minus mean squares within
        populations, summed over alleles.
    den : ndarray, float, shape (n_variants,)
        Mean squares among populations plus ``(n_C - 1)`` times mean squares
        within populations, summed over alleles.
    theta : ndarray, float, shape (n_variants,)
        Fst for each variant.

    Examples
    --------

    >>> from admixstats.stats.fst import weir_hill_fst
    >>> ac = [[[4, 0], [0, 4]],
    ...       [[2, 2], [2, 2]]]
    >>> num, den, theta = weir_hill_fst(ac)
    >>> theta
    array([ 1.        , -0.33333333])

    """

    # check inputs
    ac = asarray_ndim(ac, 3).astype('f8')
    n_variants, r, n_alleles = ac.shape
    check_min_populations(r, 2)

    # number of alleles sampled per population
    n = np.sum(ac, axis=2)
    if strict:
        check_populations_called(n, np.arange(r))
    n_total = np.sum(n, axis=1)

    with ignore_invalid():

        # n sub C, accounting for imbalance in sample sizes
        n_C = np.sum(n - n ** 2 / n_total[:, np.newaxis], axis=1) / (r - 1)
        debug('n_C: %s, %r', n_C.shape, n_C)

        # allele frequencies within each population
        p = ac / n[:, :, np.newaxis]

        # average frequency of each allele over all populations
        p_bar = (np.sum(p * n[:, :, np.newaxis], axis=1) /
                 n_total[:, np.newaxis])
        debug('p_bar: %s, %r', p_bar.shape, p_bar)

        # mean squares among populations
        msp = np.sum(n[:, :, np.newaxis] * (p - p_bar[:, np.newaxis, :]) ** 2,
                     axis=1) / (r - 1)

        # mean squares within populations
        msg = (np.sum(n[:, :, np.newaxis] * p * (1 - p), axis=1) /
               np.sum(n - 1, axis=1)[:, np.newaxis])

        # sum over alleles
        num = np.sum(msp - msg, axis=1)
        den = np.sum(msp + (n_C[:, np.newaxis] - 1) * msg, axis=1)
        theta = num / den

    return num, den, theta


def weir_hill_fst_per_marker(ac, strict=False):
    """Estimate Fst for each variant following Weir and Hill (2002)."""
    _, _, theta = weir_hill_fst(ac, strict=strict)
    return theta


def weir_hill_fst_region(ac, strict=False):
    """Estimate Fst over all variants following Weir and Hill (2002), as
    ``sum(num) / sum(den)``."""
    num, den, _ = weir_hill_fst(ac, strict=strict)
    return float(_finite_ratio_of_sums(num, den))


def fst_allele_counts(ac, region=False, extended=False, **kwargs):
    """Estimate Fst from allele counts following Weir and Hill (2002),
    selecting the output with flags.

    With `extended` the result is an array of shape (n_variants, 3) holding
    numerator, denominator and Fst for each variant; with `region` it is a
    single value; otherwise it is Fst per variant.

    """
    check_fst_modes(region, extended)
    if region:
        return weir_hill_fst_region(ac, **kwargs)
    if extended:
        return np.column_stack(weir_hill_fst(ac, **kwargs))
    return weir_hill_fst_per_marker(ac, **kwargs)
