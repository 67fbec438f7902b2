# -*- coding: utf-8 -*-
# flake8: noqa

from .stats.alleles import AlleleStats, is_missing, count_called, \
    population_allele_stats, population_allele_frequencies, \
    population_allele_counts

from .stats.misc import JackknifeResult, block_jackknife, block_sums

from .stats.fst import weir_cockerham_fst, weir_cockerham_fst_per_marker, \
    weir_cockerham_fst_region, average_weir_cockerham_fst, fst_gt, \
    weir_hill_fst, weir_hill_fst_per_marker, weir_hill_fst_region, \
    fst_allele_counts

from .stats.admixture import StatResult, patterson_f3, patterson_d, \
    d_test, f3_test, d_tests, f3_tests

from .stats.preprocessing import PattersonScaler

from .stats.decomposition import PcaResult, GenotypePCA, \
    GenotypeTruncatedPCA, get_decomposer, pca

from .stats.ancestry import AdmixtureProjection, admixture_log_likelihood, \
    admixture_projection, admixture_projections

from .errors import InvalidArgumentCombination, EmptyPopulationError, \
    InsufficientJackknifeBlocks, OptimizerNonConvergence

from .util import group_labels

from .version import version as __version__
