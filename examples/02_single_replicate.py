"""
One replicate, step by step.

A single case-control sample is generated and both regressions are fit
on it. Adjusting for Z, a consequence of the outcome, pulls the estimate
of X's effect well below its true value of 1.0.
"""

import numpy as np

from controlsim import CausalModel, PathCoefficients, fit_pair, generate

RNG = np.random.default_rng(0)

model = CausalModel.CASE_CONTROL
print(model.dag)
print()
print(f"Covariate role: {model.dag.covariate_role('Z', 'X', 'Y').value}")
print()

sample = generate(model, n=100, coefficients=PathCoefficients(), rng=RNG)
result = fit_pair(sample)

print(f"Unadjusted  Y ~ X     : {result.unadjusted.estimate:.4f}  (SE {result.unadjusted.std_err:.4f})")
print(f"Adjusted    Y ~ X + Z : {result.adjusted.estimate:.4f}  (SE {result.adjusted.std_err:.4f})")
print(f"Shift from adjusting  : {result.shift:+.4f}")
