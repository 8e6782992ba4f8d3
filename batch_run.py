import logging
import random

import pandas as pd

from config import SimulationConfig
from simulation import Simulation

logger = logging.getLogger(__name__)

####

# --- Single run ---

def final_metrics(snapshot):
    return {
        "ticks": snapshot.tick,
        "halt_reason": snapshot.halt_reason,
        "susceptible": snapshot.counts.susceptible,
        "infected": snapshot.counts.infected,
        "removed": snapshot.counts.removed,
        "dead": snapshot.counts.dead,
        **{f"{pair}_contacts": value for pair, value in snapshot.contacts.as_dict().items()},
    }


def run_simulation(config=None, **params):
    """
    Runs one configuration until it halts and returns the final metrics
    together with the per-tick trajectory.
    """
    sim = Simulation()
    sim.setup(config, **params)
    snapshot = sim.run()
    return final_metrics(snapshot), sim.history()

# --- Replicates ---

def run_replicates(n_runs, seed=0, config=None, **params):
    """Repeats one configuration with seeds derived from ``seed``; one row per run."""
    base = SimulationConfig.from_params(config, **params)
    seeds = random.Random(seed)
    rows = []
    for run in range(n_runs):
        metrics, _ = run_simulation(base, seed=seeds.randrange(2**31 - 1))
        metrics["run"] = run
        rows.append(metrics)
        if (run + 1) % 10 == 0:
            logger.info("Completed %d/%d runs", run + 1, n_runs)
    return pd.DataFrame(rows)

# --- Main execution ---
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

    metrics, trajectory = run_simulation(seed=42)
    print(f"Halted after {metrics['ticks']} ticks ({metrics['halt_reason']})")
    print(trajectory.tail(1).to_string(index=False))
