import math
import numbers
from dataclasses import asdict, dataclass, fields, replace
from typing import Optional


class ConfigurationError(ValueError):
    """Raised when a simulation option lies outside its valid domain."""

####

@dataclass(frozen=True)
class SimulationConfig:
    # --- Lattice ---
    width: int = 50
    height: int = 50
    density: float = 0.75
    # --- Disease ---
    initial_infected: int = 5
    p_infect_init: float = 0.1
    p_recover: float = 0.9
    countdown: int = 14
    infection_radius: float = 1.5
    # --- Behaviour ---
    default_contact_chance: float = 0.8
    social_distancing: bool = False
    social_distancing_threshold: float = 0.1
    social_distancing_chance: float = 0.7
    social_distancing_modifier: float = 0.5
    infected_isolation: bool = False
    # --- Run control ---
    max_ticks: int = 365
    seed: Optional[int] = None

    @classmethod
    def from_params(cls, config=None, **params):
        """Defaults (or ``config``) with keyword overrides applied on top."""
        base = config if config is not None else cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ConfigurationError(f"Unknown simulation option(s): {', '.join(unknown)}")
        return replace(base, **params)

    @property
    def cells(self):
        return self.width * self.height

    @property
    def population_size(self):
        return round(self.density * self.cells)

    def as_dict(self):
        return asdict(self)

    def validate(self):
        for name in ("width", "height"):
            _require_int(name, getattr(self, name), minimum=1)
        for name in ("density", "p_infect_init", "p_recover", "default_contact_chance",
                     "social_distancing_threshold", "social_distancing_chance"):
            _require_probability(name, getattr(self, name))
        for name in ("social_distancing", "infected_isolation"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a bool, got {getattr(self, name)!r}")

        # The adopted multiplier is drawn from [modifier - 0.05, modifier + 0.05)
        modifier = self.social_distancing_modifier
        if not _is_real(modifier) or not 0.05 <= modifier <= 0.95:
            raise ConfigurationError(
                f"social_distancing_modifier must lie in [0.05, 0.95], got {modifier!r}")

        _require_int("countdown", self.countdown, minimum=2)
        _require_int("max_ticks", self.max_ticks, minimum=0)
        _require_int("initial_infected", self.initial_infected, minimum=0)
        if not _is_real(self.infection_radius) or math.isnan(self.infection_radius) \
                or self.infection_radius < 0:
            raise ConfigurationError(
                f"infection_radius must be a non-negative number, got {self.infection_radius!r}")
        if self.seed is not None:
            _require_int("seed", self.seed, minimum=0)

        if self.initial_infected > self.population_size:
            raise ConfigurationError(
                f"initial_infected={self.initial_infected} exceeds the population of "
                f"{self.population_size} agents (density={self.density} on {self.width}x{self.height})")
        return self


def _is_real(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _require_int(name, value, minimum):
    if not isinstance(value, numbers.Integral) or isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")


def _require_probability(name, value):
    if not _is_real(value) or not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be a probability in [0, 1], got {value!r}")
