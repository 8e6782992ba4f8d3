import math
from dataclasses import dataclass

from agents import Compartment, InvariantViolation

PAIRS = ("ss", "si", "sr", "ii", "ir", "rr")


def round_half_up(value):
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class ContactTotals:
    ss: int = 0
    si: int = 0
    sr: int = 0
    ii: int = 0
    ir: int = 0
    rr: int = 0

    def as_dict(self):
        return {pair: getattr(self, pair) for pair in PAIRS}

####

class ContactLedger:
    """Running contact totals per compartment pair; cleared only by ``reset``."""

    def __init__(self):
        self.reset()

    def reset(self):
        for pair in PAIRS:
            setattr(self, pair, 0)

    def add(self, **increments):
        for pair, amount in increments.items():
            if pair not in PAIRS:
                raise KeyError(pair)
            if amount < 0:
                raise InvariantViolation(f"{pair.upper()} contact increment is negative: {amount}")
            setattr(self, pair, getattr(self, pair) + amount)

    def totals(self):
        return ContactTotals(**{pair: getattr(self, pair) for pair in PAIRS})

####

def tally_contacts(people, neighbors, radius):
    """
    Contacts realised this tick, per compartment pair.

    Each agent adds its neighbour count scaled by its contact chance (and, for
    susceptibles, its caution weight); same-compartment counts are halved so
    each unordered pair is counted once. The running total of every pair is
    rounded after each agent's contribution.
    """
    tick = dict.fromkeys(PAIRS, 0)

    def add(pair, amount):
        tick[pair] = round_half_up(tick[pair] + amount)

    for person in people:
        compartment = person.compartment
        chance = person.contact_chance
        if compartment is Compartment.SUSCEPTIBLE:
            scale = person.caution_weight() * chance
            add("si", neighbors.count_neighbors(person, radius, Compartment.INFECTED) * scale)
            add("sr", neighbors.count_neighbors(person, radius, Compartment.REMOVED) * scale)
            add("ss", neighbors.count_neighbors(person, radius, Compartment.SUSCEPTIBLE) * scale / 2)
        elif compartment is Compartment.INFECTED:
            add("ir", neighbors.count_neighbors(person, radius, Compartment.REMOVED) * chance)
            add("ii", neighbors.count_neighbors(person, radius, Compartment.INFECTED) * chance / 2)
        elif compartment is Compartment.REMOVED:
            add("rr", neighbors.count_neighbors(person, radius, Compartment.REMOVED) * chance / 2)
        elif compartment is not Compartment.DEAD:
            raise InvariantViolation(f"Agent {person.unique_id} has unknown compartment {compartment!r}")
    return tick
