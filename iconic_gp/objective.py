"""
Objectives

An Objective maps a genome to a scalar to be minimised, and records the
value in the genome's `score` dict under its label. A MultiObjective holds
a list of goals, scores each of them, and aggregates them into 'fitness'.
"""

import threading
import time
from abc import ABC, abstractmethod

import numpy as np
from cachetools import TTLCache

# Values closer than this are treated as equal
EPSILON = 1e-6


class Objective(ABC):

    label = 'objective'

    def __call__(self, genome):
        """Return the value for genome and record it in genome.score"""
        value = float(self.apply(genome))
        genome.score[self.label] = value
        return value

    @abstractmethod
    def apply(self, genome):
        """Return the (unrecorded) value of the objective for genome"""

    def is_not_worse(self, x, y):
        """Return whether value x is at least as good as value y"""
        return x <= y or abs(x - y) < EPSILON

    def __repr__(self):
        return f'<{type(self).__name__}: {self.label}>'


#++++++++++++++++++++++++++++
#   Error                   |
#++++++++++++++++++++++++++++

class ErrorFunction(ABC):

    label = 'error'

    @abstractmethod
    def __call__(self, calculated, expected):
        """Return the error of calculated against expected values"""


class MeanSquaredError(ErrorFunction):
    """Mean of (expected - calculated)**2; NaN and inf propagate"""

    label = 'mean_squared_error'

    def __call__(self, calculated, expected):
        calculated = np.asarray(calculated, dtype=np.float64)
        expected = np.asarray(expected, dtype=np.float64)
        if calculated.shape != expected.shape:
            raise ValueError(f'Shape mismatch: calculated {calculated.shape}, '
                             f'expected {expected.shape}')
        with np.errstate(all='ignore'):
            return float(np.mean(np.square(expected - calculated)))


class ErrorBasedObjective(Objective):
    """Score a genome by an error function against a Dataset"""

    def __init__(self, error_function, dataset):
        self.error_function = error_function
        self.label = error_function.label
        self.dataset = dataset

    _dataset = None
    _expected = None

    @property
    def dataset(self):
        return self._dataset

    @dataset.setter
    def dataset(self, dataset):
        """Replace the dataset and mark the expected outputs as changed"""
        self._dataset = dataset
        self.changed = True

    @property
    def expected(self):
        """Return the expected outputs, re-read only after a change"""
        if self.changed or self._expected is None:
            self._expected = np.array(self._dataset.y, dtype=np.float64)
            self.changed = False
        return self._expected


class DefaultObjective(ErrorBasedObjective):
    """The error of the per-sample sum of a genome's outputs"""

    def apply(self, genome):
        calculated = genome.evaluate(self.dataset.X).sum(axis=1)
        return self.error_function(calculated, self.expected)


class SizeObjective(Objective):
    """The number of nodes a genome expresses"""

    label = 'size'

    def apply(self, genome):
        return genome.size()


#++++++++++++++++++++++++++++
#   Multi-objective         |
#++++++++++++++++++++++++++++

class MultiObjective(Objective):
    """Score every goal, then aggregate the values into 'fitness'"""

    label = 'fitness'

    def __init__(self, goals):
        goals = list(goals)
        if not goals:
            raise ValueError('A MultiObjective needs at least one goal')
        labels = [g.label for g in goals]
        if len(set(labels)) != len(labels) or self.label in labels:
            raise ValueError(f'Goal labels must be unique and not '
                             f'{self.label!r}, got {labels}')
        self.goals = goals

    def apply(self, genome):
        return self.aggregate([goal(genome) for goal in self.goals])

    @abstractmethod
    def aggregate(self, values):
        """Return the fitness for a list of goal values"""

    def __repr__(self):
        labels = ', '.join(g.label for g in self.goals)
        return f'<{type(self).__name__}: {labels}>'


class DefaultMultiObjective(MultiObjective):
    """Fitness is the value of the first goal"""

    def aggregate(self, values):
        return values[0]


class SimpleMultiObjective(MultiObjective):
    """Fitness is the mean of the goal values"""

    def aggregate(self, values):
        return float(np.mean(values))


#++++++++++++++++++++++++++++
#   Cache                   |
#++++++++++++++++++++++++++++

class CacheableObjective(Objective):
    """Memoize an objective by genome identity

    Entries expire `ttl` seconds after they are written and at most `maxsize`
    are kept. Genomes are only modified as fresh clones, before their first
    evaluation, so a cached value never goes stale.
    """

    def __init__(self, objective, maxsize=500, ttl=300, timer=time.monotonic):
        self.objective = objective
        self.cache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    @property
    def label(self):
        return self.objective.label

    def __call__(self, genome):
        with self._lock:
            value = self.cache.get(genome)
        if value is None:
            value = self.objective(genome)
            with self._lock:
                self.cache[genome] = value
        return value

    def apply(self, genome):
        return self(genome)

    def is_not_worse(self, x, y):
        return self.objective.is_not_worse(x, y)

    def __repr__(self):
        return f'<CacheableObjective: {self.objective!r}>'
