"""
Does controlling for a covariate help or hurt?

Cohen et al. (2003), as cited by Wysocki et al. (2022), argue that
controlling for a variable that shares variance with the outcome but not
the predictor lowers the standard error of the predictor's coefficient.
This script checks the claim under three causal models:

    Case-control bias   X → Y → Z        (Z is a consequence of Y)
    Multiple causes     X → Y ← Z        (Z is an independent cause of Y)
    Common variance     X → Y ← u → Z    (Z and Y share an unobserved cause)

For each model, 10,000 samples of n = 100 are drawn with all path
coefficients equal to 1. Each sample is fit with Y ~ X and Y ~ X + Z.
The figure shows the sampling densities of the X estimate and of its
standard error. Red is adjusted, black is unadjusted.
"""

import logging

import matplotlib.pyplot as plt

from controlsim import run_study
from controlsim.plotting import plot_study

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")

SEED = 2022

study = run_study(replicates=10_000, n=100, n_jobs=4, seed=SEED)
print(study.summary())

plot_study(study)
plt.show()
