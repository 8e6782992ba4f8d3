"""
Value-type facade over :class:`models.EpidemicModel` for visualisation and
experiment callers: configure with ``setup``, advance with ``step``, and read
counts and contact totals as immutable snapshots.
"""
from dataclasses import dataclass
from typing import Optional

from agents import Compartment
from config import SimulationConfig
from contacts import ContactTotals
from models import EpidemicModel


@dataclass(frozen=True)
class CompartmentCounts:
    susceptible: int
    infected: int
    removed: int
    dead: int

    @property
    def total(self):
        return self.susceptible + self.infected + self.removed + self.dead


@dataclass(frozen=True)
class SimulationSnapshot:
    tick: int
    running: bool
    halt_reason: Optional[str]
    counts: CompartmentCounts
    contacts: ContactTotals
    new_infected: int
    new_removed: int
    new_dead: int

####

class Simulation:
    def __init__(self):
        self.model = None

    def setup(self, config=None, **params):
        self.model = EpidemicModel(SimulationConfig.from_params(config, **params))
        return self.snapshot()

    def step(self):
        model = self._require_model()
        if not model.running:
            return False
        model.step()
        return model.running

    def run(self):
        while self.step():
            pass
        return self.snapshot()

    @property
    def config(self):
        return self._require_model().params

    @property
    def running(self):
        return self._require_model().running

    @property
    def tick(self):
        return self._require_model().tick

    def counts(self):
        counts = self._require_model().count_compartments()
        return CompartmentCounts(
            susceptible=counts[Compartment.SUSCEPTIBLE],
            infected=counts[Compartment.INFECTED],
            removed=counts[Compartment.REMOVED],
            dead=counts[Compartment.DEAD],
        )

    def contacts(self):
        return self._require_model().contacts.totals()

    def snapshot(self):
        model = self._require_model()
        return SimulationSnapshot(
            tick=model.tick,
            running=model.running,
            halt_reason=model.halt_reason,
            counts=self.counts(),
            contacts=self.contacts(),
            new_infected=model.new_infected,
            new_removed=model.new_removed,
            new_dead=model.new_dead,
        )

    def history(self):
        return self._require_model().datacollector.get_model_vars_dataframe()

    def _require_model(self):
        if self.model is None:
            raise RuntimeError("Simulation.setup() must be called before running or querying")
        return self.model
