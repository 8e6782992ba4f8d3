"""
Radius queries over the toroidal lattice.

Agents never move, so each agent's neighbourhood for a given radius is
resolved once against the grid (through a precomputed offset stencil) and
cached; counts then only filter the cached agents by compartment.
"""
import math

import numpy as np

from agents import Compartment


class NeighborIndex:
    def __init__(self, grid):
        self.grid = grid
        self._stencils = {}
        self._neighborhoods = {}

    def stencil(self, radius):
        """Offsets ``(dx, dy)`` with ``dx**2 + dy**2 <= radius**2``, clipped to half the lattice."""
        if not radius >= 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        if radius not in self._stencils:
            # Clipped before flooring so an infinite radius covers the whole lattice
            reach = math.floor(min(radius, self.grid.width + self.grid.height))
            rx = min(reach, self.grid.width // 2)
            ry = min(reach, self.grid.height // 2)
            dx, dy = np.meshgrid(np.arange(-rx, rx + 1), np.arange(-ry, ry + 1), indexing="ij")
            inside = dx ** 2 + dy ** 2 <= radius ** 2
            self._stencils[radius] = list(zip(dx[inside].tolist(), dy[inside].tolist()))
        return self._stencils[radius]

    def cells_within(self, pos, radius):
        x, y = pos
        width, height = self.grid.width, self.grid.height
        return sorted({((x + dx) % width, (y + dy) % height) for dx, dy in self.stencil(radius)})

    def neighborhood(self, agent, radius):
        """Every agent (``agent`` included) within ``radius`` of ``agent``."""
        key = (agent.unique_id, radius)
        if key not in self._neighborhoods:
            cells = self.cells_within(agent.pos, radius)
            self._neighborhoods[key] = tuple(self.grid.get_cell_list_contents(cells))
        return self._neighborhoods[key]

    def count_neighbors(self, agent, radius, compartments, exclude_self=True):
        if isinstance(compartments, Compartment):
            compartments = (compartments,)
        wanted = frozenset(compartments)
        return sum(
            1 for other in self.neighborhood(agent, radius)
            if other.compartment in wanted and not (exclude_self and other is agent)
        )
