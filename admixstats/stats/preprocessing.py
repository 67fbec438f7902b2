# -*- coding: utf-8 -*-
import numpy as np


from admixstats.constants import DIPLOID, MISSING
from admixstats.util import asarray_ndim, ignore_invalid
from admixstats.stats.alleles import is_missing


def locate_informative(gn, missing=MISSING, ploidy=DIPLOID):
    """Locate variants which are neither fixed nor entirely missing among
    the given samples.

    Parameters
    ----------
    gn : array_like, shape (n_variants, n_samples)
        Genotypes coded as the number of counted alleles per call.
    missing : int, optional
        Value used to represent missing calls.
    ploidy : int, optional
        Sample ploidy.

    Returns
    -------
    loc : ndarray, bool, shape (n_variants,)

    """
    gn = asarray_ndim(gn, 2)
    mask = is_missing(gn, missing=missing)
    n_called = np.sum(~mask, axis=1)
    with ignore_invalid():
        p = np.sum(np.where(mask, 0, gn), axis=1) / (ploidy * n_called)
    return (n_called > 0) & (p != 0) & (p != 1)


class PattersonScaler(object):
    """Center genotypes by the mean and scale by the binomial standard
    deviation expected under Hardy-Weinberg equilibrium, following Patterson
    et al. (2006). Missing calls are ignored when fitting and set to zero
    (the mean) when transforming."""

    def __init__(self, copy=True, ploidy=DIPLOID, missing=MISSING):
        self.copy = copy
        self.ploidy = ploidy
        self.missing = missing
        self.mean_ = None
        self.var_ = None
        self.std_ = None

    def fit(self, gn):

        # check input
        gn = asarray_ndim(gn, 2)
        mask = is_missing(gn, missing=self.missing)

        # find mean over called genotypes
        with ignore_invalid():
            self.mean_ = (np.sum(np.where(mask, 0, gn), axis=1, keepdims=True) /
                          np.sum(~mask, axis=1, keepdims=True))

        # find scaling factor
        p = self.mean_ / self.ploidy
        self.var_ = p * (1 - p)
        self.std_ = np.sqrt(self.var_)

        return self

    def transform(self, gn, copy=None):

        if self.mean_ is None:
            raise ValueError('scaler has not been fitted')

        # check inputs
        copy = copy if copy is not None else self.copy
        gn = asarray_ndim(gn, 2)
        mask = is_missing(gn, missing=self.missing)
        if gn.dtype.kind == 'f':
            if copy:
                gn = gn.copy()
        else:
            gn = gn.astype('f8')

        with ignore_invalid():

            # center
            gn -= self.mean_

            # scale
            gn /= self.std_

        # missing calls take the mean
        gn[mask] = 0

        return gn

    def fit_transform(self, gn, copy=None):
        self.fit(gn)
        return self.transform(gn, copy=copy)
