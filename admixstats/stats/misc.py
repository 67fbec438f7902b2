# -*- coding: utf-8 -*-
import logging
from collections import namedtuple


import numpy as np


from admixstats.errors import InsufficientJackknifeBlocks
from admixstats.util import asarray_ndim, check_dim0_aligned, group_labels, \
    ignore_invalid


logger = logging.getLogger(__name__)
debug = logger.debug


JackknifeResult = namedtuple('JackknifeResult', [
    'estimate', 'se', 'z', 'estimate_jk', 'n_obs', 'n_blocks', 'blocks',
    'block_sizes', 'vj', 'pseudo_values'
])


def block_sums(values, blocks):
    """Sum `values` within each block.

    Parameters
    ----------
    values : array_like, float, shape (n_obs,)
    blocks : array_like, shape (n_obs,)
        Block identifier for each observation.

    Returns
    -------
    labels : ndarray, shape (n_blocks,)
        Block identifiers, in natural sorted order.
    sums : ndarray, float, shape (n_blocks,)
    sizes : ndarray, int, shape (n_blocks,)

    Notes
    -----
    Observations are accumulated block by block in input order, so identical
    input always gives bit-identical sums.

    """

    values = asarray_ndim(values, 1)
    blocks = asarray_ndim(blocks, 1)
    check_dim0_aligned(values, blocks)
    labels, inverse, sizes = group_labels(blocks, order='sorted')
    sums = np.bincount(inverse, weights=values, minlength=labels.shape[0])
    return labels, sums, sizes


def block_jackknife(num, den, blocks):
    """Estimate the standard error of a ratio statistic
    ``sum(num) / sum(den)`` using the delete-one-block jackknife for blocks
    of unequal size.

    Parameters
    ----------
    num : array_like, float, shape (n_obs,)
        Numerator terms, one per observation.
    den : array_like, float, shape (n_obs,)
        Denominator terms, one per observation.
    blocks : array_like, shape (n_obs,)
        Block identifier for each observation, e.g., chromosome or window
        index. Only the partition matters, not the identifier values.

    Returns
    -------
    result : JackknifeResult
        Fields are `estimate` (the ratio over all data), `se`, `z`
        (``estimate / se``), `estimate_jk` (the delete-m jackknife estimator),
        `n_obs`, `n_blocks`, `blocks`, `block_sizes`, `vj` (the statistic
        with each block left out) and `pseudo_values`.

    Notes
    -----
    With N observations in g blocks of sizes m_j and h_j = N / m_j, the
    pseudo-values are ``h_j * stat - (h_j - 1) * stat_j``, the jackknife
    estimator is ``g * stat - sum((1 - m_j / N) * stat_j)`` and the variance
    is ``sum((pseudo_j - estimate_jk) ** 2 / (h_j - 1)) / g``. See Busing et
    al. (1999), equation 8, and Patterson et al. (2012).

    Examples
    --------

    >>> from admixstats.stats.misc import block_jackknife
    >>> res = block_jackknife([2, -1, 3], [4, 4, 2], blocks=[1, 1, 2])
    >>> res.estimate
    0.4
    >>> res.vj
    array([1.5  , 0.125])

    """

    # check inputs
    num = asarray_ndim(num, 1).astype('f8', copy=False)
    den = asarray_ndim(den, 1).astype('f8', copy=False)
    blocks = asarray_ndim(blocks, 1)
    check_dim0_aligned(num, den, blocks)

    n_obs = num.shape[0]
    if n_obs == 0:
        raise InsufficientJackknifeBlocks(
            'no observations available for the block-jackknife'
        )

    # contribution to numerator and denominator sums from each block
    labels, num_bsum, m = block_sums(num, blocks)
    _, den_bsum, _ = block_sums(den, blocks)
    n_blocks = labels.shape[0]
    debug('jackknife over %s observations in %s blocks', n_obs, n_blocks)
    if n_blocks < 2:
        raise InsufficientJackknifeBlocks(
            'at least 2 blocks are required for the block-jackknife, found %s'
            % n_blocks
        )

    with ignore_invalid():

        # overall value of the statistic
        num_sum = np.sum(num)
        den_sum = np.sum(den)
        stat = num_sum / den_sum

        # value of the statistic leaving out each block
        vj = (num_sum - num_bsum) / (den_sum - den_bsum)

        # pseudo-values
        h = n_obs / m
        pseudo = h * stat - (h - 1) * vj

        # delete-m jackknife estimator
        stat_jk = n_blocks * stat - np.sum((1 - m / n_obs) * vj)

        # variance and standard error
        var_jk = np.sum((pseudo - stat_jk) ** 2 / (h - 1)) / n_blocks
        se = np.sqrt(var_jk)
        z = stat / se

    return JackknifeResult(float(stat), float(se), float(z), float(stat_jk),
                           n_obs, n_blocks, labels, m, vj, pseudo)
