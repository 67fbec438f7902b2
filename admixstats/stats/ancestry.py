# -*- coding: utf-8 -*-
import logging
import warnings
from collections import namedtuple


import numpy as np
from scipy.special import xlogy


from admixstats.constants import ADMIXTURE_EPS, MISSING
from admixstats.errors import OptimizerNonConvergence
from admixstats.util import asarray_ndim, check_dim0_aligned, ignore_invalid
from admixstats.stats.alleles import is_missing


logger = logging.getLogger(__name__)
debug = logger.debug


AdmixtureProjection = namedtuple('AdmixtureProjection', [
    'q', 'converged', 'log_likelihood', 'n_iter', 'message'
])


def _check_inputs(g, pm, missing):
    g = asarray_ndim(g, 1)
    pm = asarray_ndim(pm, 2).astype('f8', copy=False)
    check_dim0_aligned(g, pm)
    if np.any((pm < 0) | (pm > 1)):
        raise ValueError('ancestral allele frequencies must lie in [0, 1]')
    called = ~is_missing(g, missing=missing)
    return g[called].astype('f8'), pm[called]


def _neg_log_likelihood(x, pm, g):
    # objective and gradient with respect to the unnormalised proportions
    s = np.sum(x)
    q = x / s
    p1 = np.dot(pm, q)
    p2 = 1 - p1

    # zero-weight terms vanish, also where the frequency is fixed
    ll = np.sum(xlogy(g, p1) + xlogy(2 - g, p2))

    # chain rule through the normalisation q = x / sum(x)
    w = (np.where(g > 0, g / p1, 0) -
         np.where(g < 2, (2 - g) / p2, 0))
    dq = np.dot(w, pm)
    grad = (dq - np.dot(q, dq)) / s

    return -ll, -grad


def admixture_log_likelihood(q, pm, g, missing=MISSING):
    """Log-likelihood of a genotype vector given ancestry proportions and
    ancestral allele frequencies, equation 2 of Alexander et al. (2009).

    Parameters
    ----------
    q : array_like, float, shape (n_clusters,)
        Ancestry proportions; rescaled to sum to 1 before evaluation.
    pm : array_like, float, shape (n_variants, n_clusters)
        Ancestral frequency of the counted allele in each cluster.
    g : array_like, shape (n_variants,)
        Genotypes coded as the number of counted alleles (0, 1, 2), with the
        same allele coding as `pm`. Missing calls are skipped.
    missing : int, optional
        Value used to represent missing calls.

    Returns
    -------
    ll : float

    """
    g, pm = _check_inputs(g, pm, missing)
    q = asarray_ndim(q, 1).astype('f8')
    if q.shape[0] != pm.shape[1]:
        raise ValueError('expected %s proportions, found %s'
                         % (pm.shape[1], q.shape[0]))
    with ignore_invalid():
        nll, _ = _neg_log_likelihood(q, pm, g)
    return float(-nll)


def admixture_projection(g, pm, eps=ADMIXTURE_EPS, maxiter=15000,
                         missing=MISSING):
    """Estimate the ancestry proportions of one sample by maximum likelihood
    given fixed ancestral allele frequencies, as for a projection with
    ADMIXTURE.

    Parameters
    ----------
    g : array_like, shape (n_variants,)
        Genotypes coded as the number of counted alleles (0, 1, 2), with the
        same allele coding as `pm`.
    pm : array_like, float, shape (n_variants, n_clusters)
        Ancestral frequency of the counted allele in each cluster (the P
        matrix).
    eps : float, optional
        Each proportion is constrained to ``[eps, 1 - eps]`` during
        optimisation.
    maxiter : int, optional
        Iteration budget of the optimiser.
    missing : int, optional
        Value used to represent missing calls.

    Returns
    -------
    result : AdmixtureProjection
        Fields are `q` (proportions summing to 1), `converged`,
        `log_likelihood` at `q`, `n_iter` and the optimiser `message`.

    Notes
    -----
    Minimises the negative binomial log-likelihood with L-BFGS-B starting
    from equal proportions. The proportions are rescaled to sum to 1 inside
    the objective and again on return. If the optimiser does not converge
    an :class:`admixstats.errors.OptimizerNonConvergence` warning is issued
    and the best iterate is returned with ``converged=False``.

    """
    import scipy.optimize

    g, pm = _check_inputs(g, pm, missing)
    k = pm.shape[1]
    if g.shape[0] == 0:
        raise ValueError('no called genotypes to project')

    x0 = np.full(k, 1 / k)
    bounds = [(eps, 1 - eps)] * k
    with ignore_invalid():
        res = scipy.optimize.minimize(
            _neg_log_likelihood, x0, args=(pm, g), jac=True,
            method='L-BFGS-B', bounds=bounds, options=dict(maxiter=maxiter)
        )

    # rescale estimates to sum to 1
    q = res.x / np.sum(res.x)
    message = res.message
    if isinstance(message, bytes):
        message = message.decode()
    if not res.success:
        warnings.warn('admixture projection did not converge: %s' % message,
                      OptimizerNonConvergence)
    debug('projection: %s iterations, %s', res.nit, message)

    return AdmixtureProjection(q, bool(res.success), float(-res.fun),
                               int(res.nit), message)


def admixture_projections(gn, pm, eps=ADMIXTURE_EPS, maxiter=15000,
                          missing=MISSING):
    """Run :func:`admixture_projection` for each sample of a genotype matrix.

    Parameters
    ----------
    gn : array_like, shape (n_variants, n_samples)
        Genotype matrix.
    pm : array_like, float, shape (n_variants, n_clusters)
        Ancestral allele frequencies.

    Returns
    -------
    qm : ndarray, float, shape (n_samples, n_clusters)
        Ancestry proportions of each sample (the Q matrix).
    converged : ndarray, bool, shape (n_samples,)

    """
    gn = asarray_ndim(gn, 2)
    pm = asarray_ndim(pm, 2)
    check_dim0_aligned(gn, pm)
    qm = np.zeros((gn.shape[1], pm.shape[1]), dtype='f8')
    converged = np.zeros(gn.shape[1], dtype=bool)
    for i in range(gn.shape[1]):
        res = admixture_projection(gn[:, i], pm, eps=eps, maxiter=maxiter,
                                   missing=missing)
        qm[i] = res.q
        converged[i] = res.converged
    n_failed = np.count_nonzero(~converged)
    if n_failed:
        logger.info('%s of %s projections did not converge', n_failed,
                    gn.shape[1])
    return qm, converged
