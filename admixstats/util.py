# -*- coding: utf-8 -*-
from contextlib import contextmanager


import numpy as np


@contextmanager
def ignore_invalid():
    err = np.seterr(invalid='ignore', divide='ignore')
    try:
        yield
    finally:
        np.seterr(**err)


def asarray_ndim(a, *ndims, **kwargs):
    """Ensure numpy array.

    Parameters
    ----------
    a : array_like
    *ndims : int, optional
        Allowed values for number of dimensions.
    **kwargs
        Passed through to :func:`numpy.asarray`.

    Returns
    -------
    a : numpy.ndarray

    """
    allow_none = kwargs.pop('allow_none', False)
    if a is None and allow_none:
        return None
    a = np.asarray(a, **kwargs)
    if a.ndim not in ndims:
        if len(ndims) > 1:
            expect_str = 'one of %s' % str(ndims)
        else:
            expect_str = '%s' % ndims[0]
        raise TypeError('bad number of dimensions: expected %s; found %s' %
                        (expect_str, a.ndim))
    return a


def check_dim0_aligned(*arrays):
    a = arrays[0]
    for b in arrays[1:]:
        if b.shape[0] != a.shape[0]:
            raise ValueError(
                'arrays do not have matching length for first dimension'
            )


def check_min_populations(actual, expect):
    if actual < expect:
        raise ValueError(
            'expected at least %s populations, found %s' % (expect, actual)
        )


def group_labels(labels, order='first'):
    """Group items by label.

    Parameters
    ----------
    labels : array_like, shape (n_items,)
        One label per item.
    order : {'first', 'sorted'}
        Order of groups in the output; 'first' orders groups by first
        occurrence of their label, 'sorted' by the natural order of labels.

    Returns
    -------
    groups : ndarray, shape (n_groups,)
        Distinct labels, in group order.
    inverse : ndarray, int, shape (n_items,)
        Group index of each item.
    sizes : ndarray, int, shape (n_groups,)
        Number of items in each group.

    Examples
    --------

    >>> from admixstats.util import group_labels
    >>> groups, inverse, sizes = group_labels(['b', 'a', 'b', 'c'])
    >>> groups
    array(['b', 'a', 'c'], dtype='<U1')
    >>> inverse
    array([0, 1, 0, 2])
    >>> sizes
    array([2, 1, 1])

    """

    labels = asarray_ndim(labels, 1)
    groups, first, inverse, sizes = np.unique(
        labels, return_index=True, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)
    if order == 'sorted':
        return groups, inverse, sizes
    elif order == 'first':
        # renumber groups by first occurrence
        rank = np.argsort(first, kind='stable')
        remap = np.empty_like(rank)
        remap[rank] = np.arange(rank.size)
        return groups[rank], remap[inverse], sizes[rank]
    else:
        raise ValueError('unrecognised group order: %r' % order)


def resolve_labels(available, requested):
    """Find the index of each requested label within `available`."""
    available = list(available)
    index = []
    for label in requested:
        if label not in available:
            raise ValueError('unknown population label: %r' % (label,))
        index.append(available.index(label))
    return index


def get_blen_array(data, blen=None):
    """Try to guess a reasonable block length to use for block-wise iteration
    over `data`."""

    if blen is None:
        if data.shape[0] == 0:
            return 1
        row = np.asarray(data[0])
        # ~1Mb chunks
        return max(1, (2**20) // max(1, row.nbytes))

    else:
        return blen
