from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from mesa import Agent


class InvariantViolation(AssertionError):
    """An agent was observed in a state the model rules cannot produce."""


class Compartment(Enum):
    SUSCEPTIBLE = "S"
    INFECTED = "I"
    REMOVED = "R"
    DEAD = "D"

####

# --- Compartment payloads ---

@dataclass
class Susceptible:
    infect_probability: float
    marked_for_infection: bool = False

    compartment: ClassVar[Compartment] = Compartment.SUSCEPTIBLE


@dataclass
class Infected:
    ticks_remaining: int
    behavior_modified: bool = False
    marked_for_removal: bool = False
    marked_for_death: bool = False

    compartment: ClassVar[Compartment] = Compartment.INFECTED


@dataclass
class Removed:
    compartment: ClassVar[Compartment] = Compartment.REMOVED


@dataclass
class Dead:
    compartment: ClassVar[Compartment] = Compartment.DEAD

####

class Person(Agent):
    def __init__(self, model):
        super().__init__(model)
        params = model.params
        self.contact_chance = params.default_contact_chance
        self.behavior_modified = False
        self.status = Susceptible(params.p_infect_init)

    @property
    def compartment(self):
        return self.status.compartment

    @property
    def position(self):
        return self.pos

    @property
    def is_alive(self):
        return self.compartment is not Compartment.DEAD

    def caution_weight(self):
        """Current infection probability relative to the initial one (1.0 when that is zero)."""
        self._expect(Compartment.SUSCEPTIBLE)
        initial = self.model.params.p_infect_init
        if initial == 0:
            return 1.0
        return self.status.infect_probability / initial

    # --- Behaviour modification ---

    def distance_socially(self):
        if self.behavior_modified or not self.is_alive:
            return
        params = self.model.params
        self.behavior_modified = True
        if self.random.random() < params.social_distancing_chance:
            multiplier = params.social_distancing_modifier - 0.05 + 0.1 * self.random.random()
            self.contact_chance = params.default_contact_chance * multiplier

    def isolate(self):
        if self.compartment is not Compartment.INFECTED or self.status.behavior_modified:
            return
        params = self.model.params
        self.status.behavior_modified = True
        if self.random.random() < params.social_distancing_chance:
            self.contact_chance = params.default_contact_chance * 0.05 * self.random.random()

    # --- Decisions (mark only) ---

    def decide_infection(self):
        if self.compartment is not Compartment.SUSCEPTIBLE:
            return
        if self.status.marked_for_infection:
            raise InvariantViolation(f"Agent {self.unique_id} already marked for infection this tick")
        params = self.model.params
        infected = self.model.neighbors.count_neighbors(
            self, params.infection_radius, Compartment.INFECTED)
        contacts = infected * self.contact_chance
        p_infect = 1 - (1 - self.status.infect_probability) ** contacts
        if self.random.random() < p_infect:
            self.status.marked_for_infection = True

    def decide_removal(self):
        if self.compartment is not Compartment.INFECTED or self.status.ticks_remaining != 0:
            return
        if self.status.marked_for_removal or self.status.marked_for_death:
            raise InvariantViolation(f"Agent {self.unique_id} already marked for removal this tick")
        if self.random.random() < self.model.params.p_recover:
            self.status.marked_for_removal = True
        else:
            self.status.marked_for_death = True

    # --- Transitions (apply phase) ---

    def infect(self):
        self._expect(Compartment.SUSCEPTIBLE)
        countdown = self.model.params.countdown
        spread = countdown // 5
        ticks = countdown - 2 + (self.random.randrange(spread) if spread > 0 else 0)
        self.status = Infected(ticks_remaining=ticks)

    def recover(self):
        self._expect(Compartment.INFECTED)
        self.status = Removed()

    def die(self):
        self._expect(Compartment.INFECTED)
        self.status = Dead()

    def count_down(self):
        self._expect(Compartment.INFECTED)
        if self.status.ticks_remaining <= 0:
            raise InvariantViolation(
                f"Agent {self.unique_id} still infected with ticks_remaining={self.status.ticks_remaining}")
        self.status.ticks_remaining -= 1

    def _expect(self, compartment):
        if self.compartment is not compartment:
            raise InvariantViolation(
                f"Agent {self.unique_id} is {self.compartment.name}, expected {compartment.name}")
