# -*- coding: utf-8 -*-
import unittest


import numpy as np
import pytest
from pytest import approx


from admixstats.test.tools import assert_array_almost_equal, \
    simulate_genotypes
from admixstats.errors import InvalidArgumentCombination, \
    EmptyPopulationError
from admixstats.stats.fst import weir_cockerham_fst, \
    weir_cockerham_fst_per_marker, weir_cockerham_fst_region, \
    average_weir_cockerham_fst, fst_gt, weir_hill_fst, \
    weir_hill_fst_per_marker, weir_hill_fst_region, fst_allele_counts
from admixstats.stats.alleles import population_allele_counts


gn_example = [[0, 0, 2, 2],
              [1, 1, 1, 1],
              [0, 0, 0, 0],
              [0, 2, 1, -1]]
pops_example = ['A', 'A', 'B', 'B']


def _structured_genotypes(seed=1):
    rng = np.random.RandomState(seed)
    base = rng.uniform(0.1, 0.9, size=(300, 1))
    freqs = np.clip(base + rng.normal(0, 0.1, size=(300, 3)), 0.01, 0.99)
    return simulate_genotypes(freqs, [8, 12, 20], seed=seed,
                              missing_rate=0.05)


class TestWeirCockerham(unittest.TestCase):

    def test_components(self):
        a, b, c = weir_cockerham_fst(gn_example, pops_example)
        assert_array_almost_equal([0.5, 0., 0., -0.375], a)
        assert_array_almost_equal([0., -0.25, 0., 0.41666667], b)
        assert_array_almost_equal([0., 0.5, 0., 0.16666667], c)

    def test_per_marker(self):
        fst = weir_cockerham_fst_per_marker(gn_example, pops_example)
        assert_array_almost_equal([1., 0., np.nan, -1.8], fst)

    def test_region(self):
        fst = weir_cockerham_fst_region(gn_example, pops_example)
        assert fst == approx(0.125 / 0.95833333)

    def test_region_consistent_with_extended(self):
        gn, pops = _structured_genotypes()
        abc = fst_gt(gn, pops, extended=True)
        assert abc.shape == (gn.shape[0], 3)
        ok = np.all(np.isfinite(abc), axis=1)
        a, b, c = abc[ok].T
        region = fst_gt(gn, pops, region=True)
        assert region == approx(np.sum(a) / np.sum(a + b + c))

        # not the mean of per-marker values
        per_marker = fst_gt(gn, pops)
        assert region != approx(np.nanmean(per_marker))

    def test_not_clamped(self):
        fst = weir_cockerham_fst_per_marker(gn_example, pops_example)
        assert fst[3] < 0

    def test_chunked(self):
        gn, pops = _structured_genotypes()
        a1, b1, c1 = weir_cockerham_fst(gn, pops)
        a2, b2, c2 = weir_cockerham_fst(gn, pops, blen=7)
        assert_array_almost_equal(a1, a2)
        assert_array_almost_equal(b1, b2)
        assert_array_almost_equal(c1, c2)

    def test_empty_population(self):
        gn = [[0, 1, -1, -1],
              [0, 1, 2, 2]]
        with pytest.raises(EmptyPopulationError):
            weir_cockerham_fst(gn, pops_example, strict=True)
        fst = weir_cockerham_fst_per_marker(gn, pops_example)
        assert np.isnan(fst[0])
        assert np.isfinite(fst[1])

    def test_two_populations_required(self):
        with pytest.raises(ValueError):
            weir_cockerham_fst(gn_example, ['A'] * 4)

    def test_exclusive_modes(self):
        with pytest.raises(InvalidArgumentCombination):
            fst_gt(gn_example, pops_example, region=True, extended=True)

    def test_average(self):
        gn, pops = _structured_genotypes()
        blocks = np.repeat(np.arange(10), 30)
        res = average_weir_cockerham_fst(gn, pops, blocks)
        assert res.estimate == approx(weir_cockerham_fst_region(gn, pops))
        assert res.n_blocks == 10
        assert res.se > 0
        assert res.z == approx(res.estimate / res.se)


def _weir_hill_refimpl(ac):
    ac = np.asarray(ac, dtype='f8')
    n_variants, r, u = ac.shape
    num = np.zeros(n_variants)
    den = np.zeros(n_variants)
    for i in range(n_variants):
        n = ac[i].sum(axis=1)
        n_total = n.sum()
        n_c = (n_total - np.sum(n ** 2) / n_total) / (r - 1)
        for k in range(u):
            p = ac[i, :, k] / n
            p_bar = ac[i, :, k].sum() / n_total
            msp = np.sum(n * (p - p_bar) ** 2) / (r - 1)
            msg = np.sum(n * p * (1 - p)) / np.sum(n - 1)
            num[i] += msp - msg
            den[i] += msp + (n_c - 1) * msg
    return num, den


class TestWeirHill(unittest.TestCase):

    def test_fixed_differences(self):
        ac = [[[4, 0], [0, 4]],
              [[2, 2], [2, 2]]]
        num, den, theta = weir_hill_fst(ac)
        assert_array_almost_equal([4., -2 / 3], num)
        assert_array_almost_equal([4., 2.], den)
        assert_array_almost_equal([1., -1 / 3], theta)

    def test_multiallelic(self):
        rng = np.random.RandomState(7)
        ac = rng.randint(1, 20, size=(50, 4, 3))
        num, den, theta = weir_hill_fst(ac)
        expect_num, expect_den = _weir_hill_refimpl(ac)
        assert_array_almost_equal(expect_num, num)
        assert_array_almost_equal(expect_den, den)
        assert_array_almost_equal(expect_num / expect_den, theta)
        assert_array_almost_equal(theta, weir_hill_fst_per_marker(ac))

    def test_region(self):
        rng = np.random.RandomState(8)
        ac = rng.randint(1, 20, size=(50, 3, 2))
        extended = fst_allele_counts(ac, extended=True)
        assert extended.shape == (50, 3)
        region = fst_allele_counts(ac, region=True)
        assert region == approx(np.sum(extended[:, 0]) /
                                np.sum(extended[:, 1]))
        assert region == approx(weir_hill_fst_region(ac))

    def test_from_genotypes(self):
        gn, pops = _structured_genotypes()
        _, ac = population_allele_counts(gn, pops)
        theta = weir_hill_fst_per_marker(ac)
        assert theta.shape == (gn.shape[0],)

    def test_exclusive_modes(self):
        with pytest.raises(InvalidArgumentCombination):
            fst_allele_counts([[[1, 1], [2, 0]]], region=True,
                              extended=True)

    def test_empty_population(self):
        ac = [[[0, 0], [2, 2]]]
        with pytest.raises(EmptyPopulationError):
            weir_hill_fst(ac, strict=True)
        assert np.isnan(weir_hill_fst_per_marker(ac)[0])
