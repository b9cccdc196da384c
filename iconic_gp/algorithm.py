# Iconic Evolutionary Algorithm Base Classes
# Define the population, operator registries and Pareto bookkeeping shared by
# all strategies

import math
import threading
from abc import ABC, abstractmethod
from functools import reduce

from sklearn.utils import check_random_state

from .objective import CacheableObjective
from .operators import SequentialSelector, RandomUniformSelector


class EvolutionaryAlgorithm(ABC):

    """
    The population, operators and objective of an evolutionary search.

    EvolutionaryAlgorithm
    ├─ .factory                         - produces random genomes
    ├─ .objective                       - the (unwrapped) Objective
    ├─ .crossovers, .mutators           - operator lists; #0 is used
    ├─ .selectors                       - selector lists; #i per parent
    ├─ .population                      - list of genomes
    │
    ├─ .initialise_population(size)     - fill with evaluated random genomes
    ├─ .elitism(population)             - hook run before each generation
    └─ .evolve(population)              - return the next generation
    """

    def __init__(self, factory, objective=None, cache=False,
                 crossover_probability=0.2, mutation_probability=0.1,
                 random_state=None, display='s'):
        """Initialize with a genome factory and an optional objective"""
        for name, p in (('crossover_probability', crossover_probability),
                        ('mutation_probability', mutation_probability)):
            if not 0 <= p <= 1:
                raise ValueError(f'{name} must be between 0 and 1, got {p}')
        self.factory = factory
        self.crossover_probability = crossover_probability
        self.mutation_probability = mutation_probability
        self.random_state = random_state     # follows sklearn convention
        self.rng = check_random_state(random_state)
        self.display = display               # determines when log is called
        self.crossovers = []
        self.mutators = []
        self.selectors = []
        self.population = []
        self.cache = cache                   # wrap objectives in a cache
        self._objective = None               # possibly wrapped in a cache
        self._logical_objective = None
        if objective is not None:
            self.set_objective(objective, cache)

    def log(self, msg, display={'i', 'g', 'm', 'db'}):
        """Print a message to the console when in specified display mode"""
        if self.display in display or display == 'all':
            print(msg)

    #+++++++++++++++++++++++++++++++++++++++++++++
    #   Objective & Operators                    |
    #+++++++++++++++++++++++++++++++++++++++++++++

    def set_objective(self, objective, cache=None):
        """Set the objective, memoized by a CacheableObjective if cache

        When cache is None the setting given at construction is kept.
        """
        if cache is not None:
            self.cache = cache
        self._logical_objective = objective
        self._objective = (CacheableObjective(objective) if self.cache
                           else objective)

    @property
    def objective(self):
        """Return the objective as set, never the cache wrapper"""
        return self._logical_objective

    @objective.setter
    def objective(self, objective):
        self.set_objective(objective)

    def add_crossover(self, crossover):
        self.crossovers.append(crossover)

    def add_mutator(self, mutator):
        self.mutators.append(mutator)

    def add_selector(self, selector):
        self.selectors.append(selector)

    def get_crossover(self, i):
        return self.crossovers[i]

    def get_mutator(self, i):
        return self.mutators[i]

    def get_selector(self, i):
        return self.selectors[i]

    #+++++++++++++++++++++++++++++++++++++++++++++
    #   Population                               |
    #+++++++++++++++++++++++++++++++++++++++++++++

    def evaluate(self, chromosome):
        """Apply the objective; store and return the fitness"""
        if self._objective is None:
            raise ValueError('An objective is required to evaluate genomes')
        fitness = self._objective(chromosome)
        chromosome.fitness = fitness
        chromosome.dirty = False
        return fitness

    def initialise_population(self, size):
        """Replace the population with `size` evaluated random genomes"""
        if size < 1:
            raise ValueError(f'Population size must be positive, got {size}')
        self.population = []
        for _ in range(size):
            chromosome = self.factory.generate(self.rng)
            self.evaluate(chromosome)
            self.population.append(chromosome)
        self.log(f'\nWe have constructed the first, stochastic population of '
                 f'{size} genomes.')
        return self.population

    def elitism(self, population):
        """Return the population to evolve from (default: a copy)"""
        return list(population)

    @abstractmethod
    def evolve(self, population):
        """Return the next generation of population"""

    def step(self):
        """Evolve the current population by one generation"""
        if not self.population:
            raise ValueError('Population has not been initialised')
        self.population = self.evolve(self.population)
        return self.population

    def fittest(self, population=None):
        """Return the member with the lowest fitness (NaN last)"""
        population = self.population if population is None else population
        def compare(a, b):
            if b.fitness is None or math.isnan(b.fitness):
                return a
            if a.fitness is None or math.isnan(a.fitness):
                return b
            return a if a.fitness < b.fitness else b
        return reduce(compare, population)


class MultiObjectiveEvolutionaryAlgorithm(EvolutionaryAlgorithm):
    """Add Pareto dominance, per-goal global bests and an archive

    `globals` maps each goal to (best value, genome holding it). `archive`
    collects every genome that was ever recorded as a global best; it is
    never pruned. Both are guarded by a lock so goal updates may come from
    several threads.
    """

    def __init__(self, factory, objective=None, lambda_=1, **kwargs):
        if lambda_ < 1:
            raise ValueError(f'lambda_ must be at least 1, got {lambda_}')
        self.lambda_ = lambda_
        self.globals = {}
        self.archive = set()
        self._lock = threading.Lock()
        self.default_selectors = [SequentialSelector(), RandomUniformSelector()]
        super().__init__(factory, objective, **kwargs)

    @property
    def goals(self):
        """Return the goals of the objective (itself if not a MultiObjective)"""
        return list(getattr(self.objective, 'goals', [self.objective]))

    def get_selector(self, i):
        """Return selector i, or the default: sequential for 0, else random"""
        if i < len(self.selectors) and self.selectors[i] is not None:
            return self.selectors[i]
        return self.default_selectors[min(i, 1)]

    #+++++++++++++++++++++++++++++++++++++++++++++
    #   Dominance                                |
    #+++++++++++++++++++++++++++++++++++++++++++++

    def goal_value(self, goal, chromosome):
        """Return a genome's value for goal, evaluating it if needed"""
        if chromosome.dirty:
            self.evaluate(chromosome)
        value = chromosome.score.get(goal.label)
        if value is None:
            value = goal(chromosome)
        return value

    def is_dominated_by(self, objective, c1, c2):
        """Return whether c2 is not worse than c1 for every goal

        Goal values within EPSILON count as equal, so genomes with equal
        values dominate each other.
        """
        for goal in getattr(objective, 'goals', [objective]):
            if not goal.is_not_worse(self.goal_value(goal, c2),
                                     self.goal_value(goal, c1)):
                return False
        return True

    def get_non_dominated(self, population):
        """Return the members not dominated by any other member

        Members with equal goal values dominate each other; of such a group
        only the first is compared against, so one of them is kept.
        """
        objective = self.objective
        front = []
        for i, c in enumerate(population):
            dominated = False
            for j, other in enumerate(population):
                if other is c:
                    continue
                if (self.is_dominated_by(objective, c, other) and
                        (j < i or not self.is_dominated_by(objective, other, c))):
                    dominated = True
                    break
            if not dominated:
                front.append(c)
        return front

    #+++++++++++++++++++++++++++++++++++++++++++++
    #   Global Bests & Archive                   |
    #+++++++++++++++++++++++++++++++++++++++++++++

    def add_global(self, goal, chromosome, value):
        """Record chromosome as the best for goal if not worse; never NaN"""
        if value is None or math.isnan(value):
            self.log(f'Warning: {chromosome!r} has a NaN {goal.label} and '
                     f'cannot be a global best')
            return False
        with self._lock:
            best = self.globals.get(goal)
            if best is None or goal.is_not_worse(value, best[0]):
                self.globals[goal] = (value, chromosome)
                self.archive.add(chromosome)
                return True
        return False

    def update_globals(self, chromosome):
        """Offer chromosome to the global best of every goal"""
        for goal in self.goals:
            self.add_global(goal, chromosome, self.goal_value(goal, chromosome))

    def recompute_globals(self, population):
        """Re-evaluate every member and offer each to the global bests"""
        for chromosome in population:
            self.evaluate(chromosome)
            self.update_globals(chromosome)

    def is_global_best(self, chromosome):
        """Return whether chromosome matches the best value of any goal"""
        for goal, (best, holder) in list(self.globals.items()):
            if holder is chromosome:
                return True
            value = self.goal_value(goal, chromosome)
            if not math.isnan(value) and goal.is_not_worse(value, best):
                return True
        return False

    def initialise_population(self, size):
        population = super().initialise_population(size)
        for chromosome in population:
            self.update_globals(chromosome)
        return population

    #+++++++++++++++++++++++++++++++++++++++++++++
    #   Variation                                |
    #+++++++++++++++++++++++++++++++++++++++++++++

    def mutate(self, chromosome):
        """A (1+lambda) step: the best of lambda mutants, or chromosome

        The mutants are folded to one by dominance (the latter wins ties).
        It is returned only if chromosome does not dominate it.
        """
        if not self.mutators:
            raise ValueError('A mutator is required to mutate genomes')
        mutator = self.get_mutator(0)
        objective = self.objective
        children = []
        for _ in range(self.lambda_):
            child = mutator(chromosome, self.rng, self.log)
            self.evaluate(child)
            children.append(child)
        best = reduce(
            lambda a, b: b if self.is_dominated_by(objective, a, b) else a,
            children)
        if self.is_dominated_by(objective, best, chromosome):
            return chromosome
        return best

    def crossover(self, c1, c2):
        """Return an evaluated child of c1 and c2, or c1 if no operator"""
        if not self.crossovers:
            return c1
        child = self.get_crossover(0)(c1, c2, self.rng, self.log)
        self.evaluate(child)
        return child

    #+++++++++++++++++++++++++++++++++++++++++++++
    #   Replacement                              |
    #+++++++++++++++++++++++++++++++++++++++++++++

    def replace_parent(self, population, parent, offspring):
        """Put offspring in the place of parent; False if parent is absent"""
        for i, member in enumerate(population):
            if member is parent:
                population[i] = offspring
                if offspring.dirty:
                    self.evaluate(offspring)
                self.update_globals(offspring)
                return True
        return False

    def should_replace(self, population, chromosome, replacement):
        """Return whether replacement is new and would be a global best"""
        if any(member is replacement for member in population):
            return False
        return self.is_global_best(replacement)
