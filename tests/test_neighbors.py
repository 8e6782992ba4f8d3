import math

import pytest

from agents import Compartment
from models import EpidemicModel
from neighbors import NeighborIndex


def toroidal_distance(a, b, width, height):
    dx = abs(a[0] - b[0])
    dy = abs(a[1] - b[1])
    return math.hypot(min(dx, width - dx), min(dy, height - dy))


@pytest.fixture
def full_model():
    # 7x6 lattice fully occupied, nobody infected
    return EpidemicModel(width=7, height=6, density=1.0, initial_infected=0, seed=3)


def brute_force_count(model, agent, radius, compartment, exclude_self=True):
    return sum(
        1 for other in model.agents
        if other.compartment is compartment
        and not (exclude_self and other is agent)
        and toroidal_distance(agent.pos, other.pos, model.grid.width, model.grid.height) <= radius
    )


def test_toroidal_distance_wraps_edges():
    assert toroidal_distance((0, 0), (9, 0), 10, 10) == 1
    assert toroidal_distance((0, 0), (9, 9), 10, 10) == pytest.approx(2 ** 0.5)
    assert toroidal_distance((2, 3), (2, 3), 10, 10) == 0


def test_stencil_radius_one_is_von_neumann(full_model):
    index = NeighborIndex(full_model.grid)
    assert sorted(index.stencil(1)) == [(-1, 0), (0, -1), (0, 0), (0, 1), (1, 0)]


def test_radius_zero_sees_only_itself(full_model):
    agent = next(iter(full_model.agents))
    assert full_model.neighbors.neighborhood(agent, 0) == (agent,)
    assert full_model.neighbors.count_neighbors(agent, 0, Compartment.SUSCEPTIBLE) == 0
    assert full_model.neighbors.count_neighbors(agent, 0, Compartment.SUSCEPTIBLE, exclude_self=False) == 1


@pytest.mark.parametrize("radius", [0, 1, 1.5, 2, 2.9, 3.5, 10])
def test_counts_match_brute_force(full_model, radius):
    for agent in full_model.agents:
        assert full_model.neighbors.count_neighbors(agent, radius, Compartment.SUSCEPTIBLE) == \
            brute_force_count(full_model, agent, radius, Compartment.SUSCEPTIBLE)


def test_radius_beyond_diagonal_sees_whole_lattice(full_model):
    agent = next(iter(full_model.agents))
    assert full_model.neighbors.count_neighbors(agent, 20, Compartment.SUSCEPTIBLE) == len(full_model.agents) - 1


def test_counts_filter_by_compartment():
    model = EpidemicModel(width=8, height=8, density=0.5, initial_infected=6, seed=11)
    for agent in model.agents:
        for compartment in (Compartment.SUSCEPTIBLE, Compartment.INFECTED):
            assert model.neighbors.count_neighbors(agent, 2.5, compartment) == \
                brute_force_count(model, agent, 2.5, compartment)
        both = model.neighbors.count_neighbors(agent, 2.5, [Compartment.SUSCEPTIBLE, Compartment.INFECTED])
        assert both == brute_force_count(model, agent, 2.5, Compartment.SUSCEPTIBLE) + \
            brute_force_count(model, agent, 2.5, Compartment.INFECTED)


def test_negative_radius_rejected(full_model):
    with pytest.raises(ValueError):
        full_model.neighbors.stencil(-1)


def test_infinite_radius_sees_whole_lattice(full_model):
    agent = next(iter(full_model.agents))
    count = full_model.neighbors.count_neighbors(agent, float("inf"), Compartment.SUSCEPTIBLE)
    assert count == len(full_model.agents) - 1


def test_infinite_radius_model_runs():
    model = EpidemicModel(width=6, height=6, density=1.0, initial_infected=1, p_infect_init=0.5,
                          infection_radius=float("inf"), countdown=4, max_ticks=10, seed=2)
    while model.running:
        model.step()
    assert sum(model.count_compartments().values()) == 36
