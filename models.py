import logging
from collections import Counter

from mesa import Model
from mesa.datacollection import DataCollector
from mesa.space import SingleGrid

from agents import Compartment, Infected, InvariantViolation, Person, Susceptible
from config import SimulationConfig
from contacts import ContactLedger, tally_contacts
from neighbors import NeighborIndex

logger = logging.getLogger(__name__)

MAX_TICKS = "max_ticks"
NO_INFECTED = "no_infected"

####

class EpidemicModel(Model):
    def __init__(self, config=None, **params):
        config = SimulationConfig.from_params(config, **params).validate()
        super().__init__(seed=None if config.seed is None else int(config.seed))
        self.params = config

        self.grid = SingleGrid(config.width, config.height, torus=True)
        self.neighbors = NeighborIndex(self.grid)
        self.contacts = ContactLedger()

        self.tick = 0
        self.running = True
        self.halt_reason = None
        self.new_infected = 0
        self.new_removed = 0
        self.new_dead = 0

        cells = [(x, y) for x in range(config.width) for y in range(config.height)]
        for pos in self.random.sample(cells, config.population_size):
            self.grid.place_agent(Person(self), pos)
        self.population = len(self.agents)

        for person in self.random.sample(list(self.agents), config.initial_infected):
            person.infect()

        self.datacollector = DataCollector(
            model_reporters={
                "Tick": "tick",
                "Susceptible": lambda m: m.count(Compartment.SUSCEPTIBLE),
                "Infected": lambda m: m.count(Compartment.INFECTED),
                "Removed": lambda m: m.count(Compartment.REMOVED),
                "Dead": lambda m: m.count(Compartment.DEAD),
                "Ever_Infected": lambda m: m.ever_infected(),
                "New_Infected": "new_infected",
                "New_Removed": "new_removed",
                "New_Dead": "new_dead",
                "SS": lambda m: m.contacts.ss,
                "SI": lambda m: m.contacts.si,
                "SR": lambda m: m.contacts.sr,
                "II": lambda m: m.contacts.ii,
                "IR": lambda m: m.contacts.ir,
                "RR": lambda m: m.contacts.rr,
            }
        )

        logger.info("Set up %d agents on a %dx%d torus (%d infected, seed=%s)",
                    self.population, config.width, config.height, config.initial_infected, config.seed)
        self.check_halt()
        self.datacollector.collect(self)

    # --- Queries ---

    def count_compartments(self):
        counts = Counter(person.compartment for person in self.agents)
        return {compartment: counts.get(compartment, 0) for compartment in Compartment}

    def count(self, compartment):
        return sum(1 for person in self.agents if person.compartment is compartment)

    def ever_infected(self):
        return self.population - self.count(Compartment.SUSCEPTIBLE)

    def people(self):
        """Agents in creation order."""
        return sorted(self.agents, key=lambda person: person.unique_id)

    # --- Phases ---

    def modify_behavior(self):
        params = self.params
        if params.social_distancing and self.ever_infected() > params.social_distancing_threshold * self.population:
            self.agents.shuffle_do("distance_socially")
        if params.infected_isolation:
            self.agents.shuffle_do("isolate")

    def account_contacts(self):
        tick = tally_contacts(self.people(), self.neighbors, self.params.infection_radius)
        self.contacts.add(**tick)

    def decide_transitions(self):
        self.agents.shuffle_do("decide_infection")
        self.agents.shuffle_do("decide_removal")

    def apply_transitions(self):
        newly_infected, removed, dead, still_infected = [], [], [], []
        for person in self.people():
            status = person.status
            if isinstance(status, Susceptible) and status.marked_for_infection:
                newly_infected.append(person)
            elif isinstance(status, Infected):
                if status.marked_for_removal:
                    removed.append(person)
                elif status.marked_for_death:
                    dead.append(person)
                else:
                    still_infected.append(person)

        for person in removed:
            person.recover()
        for person in dead:
            person.die()
        for person in still_infected:
            person.count_down()
        for person in newly_infected:
            person.infect()

        self.new_infected = len(newly_infected)
        self.new_removed = len(removed)
        self.new_dead = len(dead)
        self.check_invariants()

    def check_invariants(self):
        for person in self.agents:
            status = person.status
            if isinstance(status, Susceptible):
                if status.marked_for_infection:
                    raise InvariantViolation(f"Agent {person.unique_id} kept its infection mark")
            elif isinstance(status, Infected):
                if status.marked_for_removal or status.marked_for_death:
                    raise InvariantViolation(f"Agent {person.unique_id} kept its removal mark")
                if status.ticks_remaining < 0:
                    raise InvariantViolation(
                        f"Agent {person.unique_id} has ticks_remaining={status.ticks_remaining}")
            elif person.compartment not in (Compartment.REMOVED, Compartment.DEAD):
                raise InvariantViolation(f"Agent {person.unique_id} has unknown status {status!r}")

    def check_halt(self):
        if self.tick >= self.params.max_ticks:
            self.halt_reason = MAX_TICKS
        elif self.count(Compartment.INFECTED) == 0:
            self.halt_reason = NO_INFECTED
        else:
            return
        self.running = False
        logger.info("Halted at tick %d (%s): %s", self.tick, self.halt_reason,
                    {c.name: n for c, n in self.count_compartments().items()})

    def step(self):
        if not self.running:
            return
        self.modify_behavior()
        self.account_contacts()
        self.decide_transitions()
        self.apply_transitions()
        self.tick += 1
        logger.debug("Tick %d: +%d infected, +%d removed, +%d dead",
                     self.tick, self.new_infected, self.new_removed, self.new_dead)
        self.check_halt()
        self.datacollector.collect(self)
