"""Inter-emission time distributions for sensors."""

from abc import ABC, abstractmethod

import numpy as np


class Distribution(ABC):

    @abstractmethod
    def next_value(self, rng: "np.random.Generator") -> float:
        pass

    @abstractmethod
    def mean_inter_arrival_time(self) -> float:
        pass


class DeterministicDistribution(Distribution):
    """Always the same period."""

    def __init__(self, value: float):
        if value <= 0:
            raise ValueError(f"Period must be positive, got {value}")
        self.value = value

    def next_value(self, rng=None) -> float:
        return self.value

    def mean_inter_arrival_time(self) -> float:
        return self.value

    def __repr__(self):
        return f"DeterministicDistribution({self.value})"


class UniformDistribution(Distribution):

    def __init__(self, min_value: float, max_value: float):
        if min_value < 0 or max_value <= min_value:
            raise ValueError(f"Invalid uniform range [{min_value}, {max_value})")
        self.min = min_value
        self.max = max_value

    def next_value(self, rng: "np.random.Generator") -> float:
        return float(rng.uniform(self.min, self.max))

    def mean_inter_arrival_time(self) -> float:
        return (self.min + self.max) / 2

    def __repr__(self):
        return f"UniformDistribution({self.min}, {self.max})"


class NormalDistribution(Distribution):

    def __init__(self, mean: float, stdev: float):
        if mean <= 0 or stdev < 0:
            raise ValueError(f"Invalid normal parameters mean={mean}, stdev={stdev}")
        self.mean = mean
        self.stdev = stdev

    def next_value(self, rng: "np.random.Generator") -> float:
        # redraw until the period is usable
        value = float(rng.normal(self.mean, self.stdev))
        while value <= 0:
            value = float(rng.normal(self.mean, self.stdev))
        return value

    def mean_inter_arrival_time(self) -> float:
        return self.mean

    def __repr__(self):
        return f"NormalDistribution({self.mean}, {self.stdev})"


def create_distribution(kind: str, period: float) -> Distribution:
    """
    Build a distribution of the given kind centred on `period`.

    Uniform spans [period/2, 3*period/2), normal uses a tenth of the period as
    standard deviation.
    """
    if kind == "deterministic":
        return DeterministicDistribution(period)
    if kind == "uniform":
        return UniformDistribution(period / 2, period * 1.5)
    if kind == "normal":
        return NormalDistribution(period, period / 10)
    raise ValueError(f"Unknown distribution kind: {kind}")
