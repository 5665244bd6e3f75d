"""
Fixed finite population: one population, many re-randomizations.

Population (drawn once):
    y0 ~ N(0, 1),  v ~ N(0, 1)
    y1 = 0.5*y0 + 0.5*v + 0.2

Each of 800 repetitions assigns exactly 500 of 1000 units to treatment,
estimates the ATE by difference in means with an HC1 robust variance, and
checks whether the 95% Wald interval covers the realised population ATE.
"""

from ateprobe import run_experiment

result = run_experiment("fixed", n=1000, n_treat=500, reps=800, seed=12345)

print(result.summary())
print(result.executive_summary())
print(result.diagnose().summary())
