"""
Watch the population change between repetitions with an observer.

The observer is called once per repetition with the population and the
assignment used. Under the redraw design the first unit's y0 differs every
time; under the fixed design it never changes.
"""

from ateprobe import run_experiment

for design in ("fixed", "redraw"):
    first_y0 = []
    run_experiment(
        design, n=200, n_treat=100, reps=5, seed=7,
        observer=lambda rep, pop, assignment: first_y0.append(pop.y0[0]),
    )
    print(f"{design:>6}: y0[0] by repetition = {[round(x, 4) for x in first_y0]}")
