from batch_run import run_replicates, run_simulation


def test_run_simulation_returns_metrics_and_trajectory():
    metrics, trajectory = run_simulation(width=10, height=10, density=0.8, initial_infected=2,
                                         countdown=4, max_ticks=30, seed=1)
    assert metrics["ticks"] == len(trajectory) - 1
    assert metrics["susceptible"] + metrics["infected"] + metrics["removed"] + metrics["dead"] == 80
    for pair in ("ss", "si", "sr", "ii", "ir", "rr"):
        assert metrics[f"{pair}_contacts"] == trajectory[pair.upper()].iloc[-1]


def test_run_replicates_one_row_per_run():
    results = run_replicates(3, seed=5, width=8, height=8, density=0.7, initial_infected=2,
                             countdown=4, max_ticks=20)
    assert list(results["run"]) == [0, 1, 2]
    assert (results["susceptible"] + results["infected"] + results["removed"] + results["dead"] == 45).all()
