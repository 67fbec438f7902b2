# -*- coding: utf-8 -*-
# flake8: noqa
"""
This sub-package provides statistical functions for use with genotype data.

"""


from admixstats.stats.alleles import AlleleStats, is_missing, count_called, \
    population_allele_stats, population_allele_frequencies, \
    population_allele_counts, check_populations_called

from admixstats.stats.misc import JackknifeResult, block_jackknife, \
    block_sums

from admixstats.stats.fst import weir_cockerham_fst, \
    weir_cockerham_fst_per_marker, weir_cockerham_fst_region, \
    average_weir_cockerham_fst, fst_gt, weir_hill_fst, \
    weir_hill_fst_per_marker, weir_hill_fst_region, fst_allele_counts

from admixstats.stats.admixture import StatResult, h_hat, patterson_f3, \
    patterson_d, d_test_filter, f3_test_filter, d_test, f3_test, d_tests, \
    f3_tests

from admixstats.stats.preprocessing import PattersonScaler, \
    locate_informative

from admixstats.stats.decomposition import PcaResult, GenotypePCA, \
    GenotypeTruncatedPCA, get_decomposer, pca

from admixstats.stats.ancestry import AdmixtureProjection, \
    admixture_log_likelihood, admixture_projection, admixture_projections
