"""
Super-population: a fresh population of 1000 units every repetition.

The target is the constant tau0 = 0.2 rather than the ATE of any one
realised population, so coverage reflects both sampling and assignment
variability.
"""

from ateprobe import run_experiment

result = run_experiment("redraw", n=1000, n_treat=500, reps=800, seed=54321, tau0=0.2)

print(result.summary())
print(result.executive_summary())
