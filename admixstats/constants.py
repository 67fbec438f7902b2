# -*- coding: utf-8 -*-

# ploidy
DIPLOID = 2

# genotype value used for missing calls
MISSING = -1

# box constraint for ancestry proportions during optimisation
ADMIXTURE_EPS = 1e-5
