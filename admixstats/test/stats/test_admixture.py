# -*- coding: utf-8 -*-
import unittest


import numpy as np
import pytest
from pytest import approx


from admixstats.test.tools import assert_array_equal as aeq, \
    assert_array_almost_equal, simulate_genotypes
from admixstats.errors import EmptyPopulationError, \
    InsufficientJackknifeBlocks
from admixstats.stats.admixture import patterson_d, patterson_f3, h_hat, \
    d_test_filter, f3_test_filter, d_test, f3_test, d_tests, f3_tests
from admixstats.stats.alleles import population_allele_frequencies, \
    population_allele_counts
from admixstats.stats.misc import block_jackknife


labels = ['P1', 'P2', 'P3', 'P4']
freqs = np.array([[0.1, 0.5, 0.3, 0.6],
                  [0.2, 0.4, 0.7, 0.1],
                  [0.0, 0.0, 0.5, 0.2],
                  [0.9, 0.3, 0.2, 0.6],
                  [0.5, 0.6, 0.4, 0.8]])
blocks = [1, 1, 2, 2, 2]


class TestPattersonTerms(unittest.TestCase):

    def test_patterson_d(self):
        a = [1., 0., 0., .5, np.nan]
        b = [1., 1., 1., .5, 1.]
        c = [0., 0., 1., .5, 1.]
        d = [0., 1., 0., .5, 1.]
        num, den = patterson_d(a, b, c, d)
        assert_array_almost_equal([0., 1., -1., 0., np.nan], num)
        assert_array_almost_equal([0., 1., 1., 0.25, np.nan], den)

    def test_patterson_f3(self):
        aca = [[0, 2],
               [2, 0],
               [0, 2],
               [0, 2],
               [0, 0]]
        acb = [[2, 0],
               [0, 2],
               [0, 2],
               [0, 2],
               [0, 2]]
        acc = [[1, 1],
               [1, 1],
               [0, 2],
               [2, 0],
               [1, 1]]
        T, B = patterson_f3(acc, aca, acb)
        assert_array_almost_equal([-.5, -.5, 0., 1., np.nan], T)
        assert_array_almost_equal([1., 1., 0., 0., 1.], B)

    def test_h_hat(self):
        assert_array_almost_equal([0.5, 0., 4 / 12], h_hat([[1, 1],
                                                            [0, 3],
                                                            [2, 2]]))
        with pytest.raises(ValueError):
            h_hat([[1, 1, 1]])


class TestDTest(unittest.TestCase):

    def test_filter(self):
        aeq([True, True, False, True, True], d_test_filter(*freqs.T))
        # fixed for the same allele in the second pair
        aeq([False, True], d_test_filter([.5, .5], [.5, .5], [1., 0.],
                                         [1., 1.]))

    def test_n_sites(self):
        res = d_test(freqs, labels, ('P1', 'P2', 'P3', 'P4'), blocks)
        assert res.n_sites == 4
        assert res.pops == ('P1', 'P2', 'P3', 'P4')

    def test_estimate(self):
        res = d_test(freqs, labels, ('P1', 'P2', 'P3', 'P4'), blocks)
        f = freqs[[0, 1, 3, 4]]
        num = (f[:, 0] - f[:, 1]) * (f[:, 2] - f[:, 3])
        den = ((f[:, 0] + f[:, 1] - 2 * f[:, 0] * f[:, 1]) *
               (f[:, 2] + f[:, 3] - 2 * f[:, 2] * f[:, 3]))
        assert res.estimate == approx(num.sum() / den.sum())
        jk = block_jackknife(num, den, [1, 1, 2, 2])
        assert res.se == approx(jk.se)
        assert res.z == approx(res.estimate / res.se)
        assert res.n_blocks == 2

    def test_swap_populations(self):
        r1 = d_test(freqs, labels, ('P1', 'P2', 'P3', 'P4'), blocks)
        r2 = d_test(freqs, labels, ('P2', 'P1', 'P3', 'P4'), blocks)
        assert r2.estimate == approx(-r1.estimate)
        assert r2.se == approx(r1.se)

    def test_column_order(self):
        r1 = d_test(freqs, labels, ('P1', 'P2', 'P3', 'P4'), blocks)
        r2 = d_test(freqs[:, ::-1], labels[::-1], ('P1', 'P2', 'P3', 'P4'),
                    blocks)
        assert r1 == r2

    def test_missing_population_data(self):
        f = freqs.copy()
        f[0, 3] = np.nan
        res = d_test(f, labels, ('P1', 'P2', 'P3', 'P4'), blocks)
        assert res.n_sites == 3
        with pytest.raises(EmptyPopulationError):
            d_test(f, labels, ('P1', 'P2', 'P3', 'P4'), blocks, strict=True)

    def test_insufficient_blocks(self):
        with pytest.raises(InsufficientJackknifeBlocks):
            d_test(freqs, labels, ('P1', 'P2', 'P3', 'P4'), [1, 1, 1, 1, 1])

    def test_bad_config(self):
        with pytest.raises(ValueError):
            d_test(freqs, labels, ('P1', 'P2', 'P3'), blocks)
        with pytest.raises(ValueError):
            d_test(freqs, labels, ('P1', 'P2', 'P3', 'P9'), blocks)
        with pytest.raises(ValueError):
            d_test(freqs, labels, ('P1', 'P2', 'P3', 'P4'), [1, 2])

    def test_batch(self):
        configs = [('P1', 'P2', 'P3', 'P4'), ('P1', 'P3', 'P2', 'P4')]
        df = d_tests(freqs, labels, configs, blocks)
        assert list(df.columns) == ['p1', 'p2', 'p3', 'p4', 'D', 'se', 'Z',
                                    'nSites']
        assert len(df) == 2
        res = d_test(freqs, labels, configs[1], blocks)
        assert df['D'][1] == approx(res.estimate)
        assert df['nSites'][1] == res.n_sites


class TestF3Test(unittest.TestCase):

    def test_filter_boundaries(self):
        fc = np.array([0., 0., 1., 0., .5, 1., .5])
        fa = np.array([0., .5, 1., 1., 0., 0., .5])
        fb = np.array([.5, .5, .5, .5, .5, .5, 0.])
        # both zero or both one in the (C, A) pair is excluded
        aeq([False, True, False, True, True, True, True],
            f3_test_filter(fc, fa, fb))
        # the (C, B) pair is checked independently
        aeq([False, True, False, True, True, False, True],
            f3_test_filter(fc, fa, np.array([.5, .5, .5, 1., .5, 1., .5])))
        aeq([True, False], f3_test_filter([.5, 0.], [.5, .3], [.5, 0.]))

    def _counts(self):
        rng = np.random.RandomState(11)
        ac_alt = rng.randint(0, 11, size=(60, 3))
        ac = np.stack([10 - ac_alt, ac_alt], axis=2)
        return ac

    def test_estimate(self):
        ac = self._counts()
        blocks = np.repeat(np.arange(6), 10)
        res = f3_test(ac, ['C', 'A', 'B'], ('C', 'A', 'B'), blocks)
        f = ac[:, :, 1] / 10
        loc = f3_test_filter(f[:, 0], f[:, 1], f[:, 2])
        T, B = patterson_f3(ac[loc, 0], ac[loc, 1], ac[loc, 2])
        assert res.n_sites == np.count_nonzero(loc)
        assert res.estimate == approx(T.sum() / B.sum())
        jk = block_jackknife(T, B, blocks[loc])
        assert res.se == approx(jk.se)
        assert res.z == approx(res.estimate / res.se)

    def test_admixed_population(self):
        rng = np.random.RandomState(5)
        fa = rng.uniform(0.05, 0.95, size=2000)
        fb = rng.uniform(0.05, 0.95, size=2000)
        fc = (fa + fb) / 2
        gn, pops = simulate_genotypes(np.column_stack([fc, fa, fb]),
                                      [40, 40, 40], seed=5)
        pop_labels, ac = population_allele_counts(gn, pops)
        blocks = np.repeat(np.arange(20), 100)
        res = f3_test(ac, pop_labels, ('pop0', 'pop1', 'pop2'), blocks)
        assert res.estimate < 0
        assert res.z < -3

    def test_too_few_test_alleles(self):
        ac = self._counts()
        ac[0, 0] = [1, 0]
        blocks = np.repeat(np.arange(6), 10)
        res = f3_test(ac, ['C', 'A', 'B'], ('C', 'A', 'B'), blocks)
        assert np.isfinite(res.estimate)
        with pytest.raises(EmptyPopulationError):
            f3_test(ac, ['C', 'A', 'B'], ('C', 'A', 'B'), blocks,
                    strict=True)

    def test_batch(self):
        ac = self._counts()
        blocks = np.repeat(np.arange(6), 10)
        configs = [('C', 'A', 'B'), ('A', 'C', 'B')]
        df = f3_tests(ac, ['C', 'A', 'B'], configs, blocks)
        assert list(df.columns) == ['p1', 'p2', 'p3', 'f3', 'se', 'Z',
                                    'nSites']
        assert df['p1'].tolist() == ['C', 'A']

    def test_multiallelic_rejected(self):
        with pytest.raises(ValueError):
            f3_test(np.ones((4, 3, 3), dtype=int), ['C', 'A', 'B'],
                    ('C', 'A', 'B'), [0, 0, 1, 1])


def test_d_test_from_genotypes():
    rng = np.random.RandomState(9)
    f = rng.uniform(0.05, 0.95, size=(500, 4))
    gn, pops = simulate_genotypes(f, [10, 10, 10, 10], seed=9,
                                  missing_rate=0.02)
    pop_labels, pf = population_allele_frequencies(gn, pops)
    res = d_test(pf, pop_labels, ('pop0', 'pop1', 'pop2', 'pop3'),
                 np.repeat(np.arange(10), 50))
    assert 0 < res.n_sites <= 500
    assert np.isfinite(res.se)
