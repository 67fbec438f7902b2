# -*- coding: utf-8 -*-
import logging
from collections import namedtuple


import numpy as np


from admixstats.constants import DIPLOID, MISSING
from admixstats.util import asarray_ndim
from admixstats.stats.preprocessing import PattersonScaler, \
    locate_informative


logger = logging.getLogger(__name__)
debug = logger.debug


PcaResult = namedtuple('PcaResult', [
    'coords', 'explained', 'loadings', 'samples', 'n_basis', 'variants',
    'model'
])
PcaResult.__doc__ = """Result of :func:`pca`.

Attributes
----------
coords : ndarray, float, shape (n_samples, n_components)
    Coordinates of basis samples followed by projected samples.
explained : ndarray, float, shape (n_components,) or None
    Percentage of variance explained by each component. None for the
    truncated decomposition.
loadings : ndarray, float, shape (n_informative, n_components) or None
    Loading of each informative variant on each component. None for the
    truncated decomposition.
samples : ndarray, int, shape (n_samples,)
    Column index in the input genotype matrix for each row of `coords`.
n_basis : int
    Number of basis samples; rows from `n_basis` onwards are projected.
variants : ndarray, bool, shape (n_variants,)
    Variants used, i.e., neither fixed nor entirely missing in the basis.
model : GenotypePCA or GenotypeTruncatedPCA
    Fitted model, holding the raw decomposition.

"""


class GenotypePCA(object):
    """Principal components from the full singular value decomposition of
    standardised genotypes."""

    def __init__(self, n_components=10, copy=True, ploidy=DIPLOID,
                 missing=MISSING):
        self.n_components = n_components
        self.copy = copy
        self.scaler_ = PattersonScaler(copy=copy, ploidy=ploidy,
                                       missing=missing)

    def fit(self, gn):
        self._fit(gn)
        return self

    def fit_transform(self, gn):
        vt = self._fit(gn)
        return vt[:self.n_components].T.copy()

    def _fit(self, gn):
        import scipy.linalg

        # apply scaling
        x = self.scaler_.fit(gn).transform(gn)
        if not 0 < self.n_components <= min(x.shape):
            raise ValueError(
                'decomposition requires 0 < n_components <= %s, found %s'
                % (min(x.shape), self.n_components)
            )
        debug('fitting %s variants x %s samples', *x.shape)

        # singular value decomposition
        u, s, vt = scipy.linalg.svd(x, full_matrices=False)

        # percentage of variance explained, over all components
        explained = 100 * s ** 2 / np.sum(s ** 2)

        # store variables
        n_components = self.n_components
        self.u_ = u
        self.s_ = s
        self.vt_ = vt
        self.components_ = u[:, :n_components]
        self.singular_values_ = s[:n_components]
        self.explained_variance_ratio_ = explained[:n_components]
        self.loadings_ = (self.components_ *
                          np.sqrt(self.singular_values_ * self.scaler_.var_))

        return vt

    def transform(self, gn, copy=None):
        """Project samples onto the fitted components.

        Genotypes are standardised using the mean and variance of the samples
        the model was fitted with, then multiplied by the left singular
        vectors and divided by the singular values. Projecting a sample from
        the fitted set reproduces its own coordinates.

        """
        if not hasattr(self, 'components_'):
            raise ValueError('model has not been fitted')

        # scaling
        x = self.scaler_.transform(gn, copy=copy)

        # apply transformation
        return np.dot(x.T, self.components_) / self.singular_values_


class GenotypeTruncatedPCA(GenotypePCA):
    """Principal components from a truncated singular value decomposition,
    computing only the leading components with the ARPACK iterative solver.

    Variance explained and per-variant loadings need the full spectrum and
    are not available.

    """

    def __init__(self, n_components=10, copy=True, ploidy=DIPLOID,
                 missing=MISSING, random_state=0):
        super(GenotypeTruncatedPCA, self).__init__(
            n_components=n_components, copy=copy, ploidy=ploidy,
            missing=missing
        )
        self.random_state = random_state

    def _fit(self, gn):
        from scipy.sparse.linalg import svds

        # apply scaling
        x = self.scaler_.fit(gn).transform(gn)
        k = self.n_components
        if not 0 < k < min(x.shape):
            raise ValueError(
                'truncated decomposition requires 0 < n_components < %s, '
                'found %s' % (min(x.shape), k)
            )
        debug('fitting %s components to %s variants x %s samples', k,
              *x.shape)

        # deterministic starting vector
        rng = np.random.RandomState(self.random_state)
        v0 = rng.uniform(-1, 1, size=min(x.shape))

        # leading singular triplets, in decreasing order
        u, s, vt = svds(x, k=k, v0=v0)
        order = np.argsort(s)[::-1]
        u, s, vt = u[:, order], s[order], vt[order]

        self.u_ = u
        self.s_ = s
        self.vt_ = vt
        self.components_ = u
        self.singular_values_ = s
        self.explained_variance_ratio_ = None
        self.loadings_ = None

        return vt


def get_decomposer(solver, n_components=10, ploidy=DIPLOID, missing=MISSING):
    """Select a PCA implementation.

    Parameters
    ----------
    solver : {'full', 'truncated'}
        'full' computes the complete singular value decomposition;
        'truncated' computes only the leading components iteratively.

    Returns
    -------
    model : GenotypePCA or GenotypeTruncatedPCA

    """
    solver = solver.lower()
    if solver == 'full':
        return GenotypePCA(n_components, ploidy=ploidy, missing=missing)
    elif solver == 'truncated':
        return GenotypeTruncatedPCA(n_components, ploidy=ploidy,
                                    missing=missing)
    else:
        raise ValueError('unrecognised solver: %s' % solver)


def _basis_index(basis, n_samples):
    if basis is None:
        return np.arange(n_samples)
    basis = asarray_ndim(basis, 1)
    if basis.dtype.kind == 'b':
        if basis.shape[0] != n_samples:
            raise ValueError('basis mask does not match number of samples')
        return np.nonzero(basis)[0]
    basis = basis.astype(int)
    if np.any((basis < 0) | (basis >= n_samples)):
        raise ValueError('basis sample index out of range')
    if np.unique(basis).shape[0] != basis.shape[0]:
        raise ValueError('basis sample indices must be unique')
    return basis


def pca(gn, basis=None, n_components=10, solver='full', ploidy=DIPLOID,
        missing=MISSING):
    """Perform principal components analysis of genotype data, building the
    components from a basis set of samples and projecting all other samples
    onto them.

    Parameters
    ----------
    gn : array_like, shape (n_variants, n_samples)
        Genotypes at biallelic variants, coded as the number of counted
        alleles per call (0, 1, 2); missing calls allowed.
    basis : array_like, int or bool, optional
        Indices (or mask) of samples used to build the components. Defaults
        to all samples.
    n_components : int, optional
        Number of components to keep.
    solver : {'full', 'truncated'}
        Decomposition to use, see :func:`get_decomposer`.
    ploidy : int, optional
        Sample ploidy.
    missing : int, optional
        Value used to represent missing calls.

    Returns
    -------
    result : PcaResult

    Notes
    -----
    Variants fixed or entirely missing among the basis samples are dropped.
    The remaining variants are standardised following Patterson et al.
    (2006) using basis sample statistics, with missing calls imputed to the
    basis mean. Coordinates of basis samples are the right singular vectors;
    per-variant loadings follow Zou et al. (2010). Projection of samples
    outside the basis is an approximation, not a recomputation.

    """

    # choose the implementation before doing any work
    model = get_decomposer(solver, n_components=n_components, ploidy=ploidy,
                           missing=missing)

    # check inputs
    gn = asarray_ndim(gn, 2)
    n_samples = gn.shape[1]
    basis_idx = _basis_index(basis, n_samples)
    if basis_idx.shape[0] < 2:
        raise ValueError('at least 2 basis samples are required')
    other = np.ones(n_samples, dtype=bool)
    other[basis_idx] = False
    other_idx = np.nonzero(other)[0]

    # filter fixed and missing variants in the basis set
    loc = locate_informative(gn[:, basis_idx], missing=missing, ploidy=ploidy)
    logger.info('pca: %s of %s variants informative in %s basis samples',
                np.count_nonzero(loc), loc.shape[0], basis_idx.shape[0])
    if not np.any(loc):
        raise ValueError('no informative variants among basis samples')
    g = gn[loc]

    coords = model.fit_transform(g[:, basis_idx])

    # project if necessary
    if other_idx.shape[0]:
        debug('projecting %s samples', other_idx.shape[0])
        proj = model.transform(g[:, other_idx], copy=True)
        coords = np.vstack([coords, proj])

    return PcaResult(coords, model.explained_variance_ratio_, model.loadings_,
                     np.concatenate([basis_idx, other_idx]),
                     basis_idx.shape[0], loc, model)
