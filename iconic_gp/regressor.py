# Iconic Symbolic Regressor
# Configure, run and query a multi-objective search from one object

import math

from sklearn.base import BaseEstimator
from sklearn.utils import check_array, check_random_state, check_X_y
from sklearn.utils.validation import check_is_fitted

from .dataset import Dataset
from .deme import Deme
from .graph import GraphGenomeFactory
from .gsemo import GSEMO
from .linear import LinearGenomeFactory
from .objective import (DefaultMultiObjective, DefaultObjective,
                        MeanSquaredError, SizeObjective)
from .operators import (CartesianSingleActiveMutator, ExpressionMutator,
                        SimpleExpressionCrossover)
from .primitives import get_primitives
from .seamo import SEAMO, ElitistSEAMO

strategies = dict(seamo=SEAMO, elitist=ElitistSEAMO, gsemo=GSEMO)


class SymbolicRegressor(BaseEstimator):

    """
    Evolve expressions trading off error against size.

    SymbolicRegressor
    ├─ .fit(X, y)                       - run a Deme for gen_max generations
    ├─ .front_                          - non-dominated genomes of the run
    ├─ .archive_                        - every genome once a global best
    ├─ .best_                           - the lowest-error genome of front_
    ├─ .predict(X)                      - outputs of best_ (summed per sample)
    └─ .score(X, y)                     - dict of scores of best_
    """

    def __init__(
        self, encoding='cgp', strategy='seamo', population_size=50,
        gen_max=10, rows=1, columns=20, levels_back=20, num_outputs=1,
        head_length=8, functions=None, terminals=None, constants=False,
        crossover_probability=0.2, mutation_probability=0.1, lambda_=1,
        cache=False, random_state=None, display='s'):
        """Initialize a SymbolicRegressor with given parameters"""

        self.encoding = encoding             # (cgp) graph or (gep) linear
        self.strategy = strategy             # seamo, elitist or gsemo
        self.population_size = population_size # initial population
        self.gen_max = gen_max               # number of generations to evolve
        self.rows = rows                     # cgp grid rows
        self.columns = columns               # cgp grid columns
        self.levels_back = levels_back       # cgp columns a node may reach
        self.num_outputs = num_outputs       # cgp outputs, summed to predict
        self.head_length = head_length       # gep head genes
        self.functions = functions           # list of primitive labels
        self.terminals = terminals           # list of feature labels
        self.constants = constants           # gep tail may hold constants
        self.crossover_probability = crossover_probability
        self.mutation_probability = mutation_probability
        self.lambda_ = lambda_               # mutants per (1+lambda) step
        self.cache = cache                   # memoize objective by genome
        self.random_state = random_state     # follows sklearn convention
        self.display = display               # determines when log is called

    def log(self, msg, display={'i', 'g', 'm', 'db'}):
        """Print a message to the console when in specified display mode"""
        if self.display in display or display == 'all':
            print(msg)

    #+++++++++++++++++++++++++++++++++++++++++++++
    #   'Check' Functions                        |
    #+++++++++++++++++++++++++++++++++++++++++++++

    def check_model(self):
        """Validate model parameters and initialize the rng"""
        if self.encoding not in ('cgp', 'gep'):
            raise ValueError(f'Unrecognized encoding: {self.encoding}')
        if self.strategy not in strategies:
            raise ValueError(f'Unrecognized strategy: {self.strategy}')
        if self.population_size < 1:
            raise ValueError(f'population_size must be positive, got '
                             f'{self.population_size}')
        if self.gen_max < 0:
            raise ValueError(f'gen_max must not be negative, got '
                             f'{self.gen_max}')
        self.rng_ = check_random_state(self.random_state)
        self.primitives_ = get_primitives(self.functions)

    def build_factory(self, dataset):
        """Return the genome factory for the encoding"""
        if self.encoding == 'cgp':
            return GraphGenomeFactory(
                self.num_outputs, dataset.num_features, self.columns,
                self.rows, self.levels_back, self.primitives_, dataset.labels)
        return LinearGenomeFactory(
            self.head_length, dataset.num_features, self.primitives_,
            dataset.labels, self.constants)

    def build_algorithm(self, dataset):
        """Return the strategy, with objective and operators registered"""
        objective = DefaultMultiObjective([
            DefaultObjective(MeanSquaredError(), dataset),
            SizeObjective(),
        ])
        algorithm = strategies[self.strategy](
            self.build_factory(dataset), objective,
            lambda_=self.lambda_,
            cache=self.cache,
            crossover_probability=self.crossover_probability,
            mutation_probability=self.mutation_probability,
            random_state=self.rng_,
            display=self.display)
        if self.encoding == 'cgp':
            algorithm.add_mutator(CartesianSingleActiveMutator())
        else:
            algorithm.add_mutator(ExpressionMutator())
            algorithm.add_crossover(SimpleExpressionCrossover())
        return algorithm

    #+++++++++++++++++++++++++++++++++++++++++++++
    #   Methods to Run                           |
    #+++++++++++++++++++++++++++++++++++++++++++++

    def fit(self, X, y):
        """Evolve a population of genomes based on training data"""
        X, y = check_X_y(X, y, y_numeric=True)
        self.check_model()
        dataset = Dataset.from_X_y(X, y, self.terminals)
        self.n_features_in_ = dataset.num_features

        algorithm = self.build_algorithm(dataset)
        self.deme_ = Deme(algorithm, self.population_size)
        self.deme_.run(self.gen_max)

        def error(c):
            value = c.score.get(MeanSquaredError.label, math.nan)
            return math.inf if math.isnan(value) else value

        self.history_ = self.deme_.history
        front = algorithm.get_non_dominated(algorithm.population)
        self.front_ = sorted(front or [algorithm.fittest()], key=error)
        self.archive_ = sorted(algorithm.archive, key=error)
        self.best_ = self.front_[0]
        self.log(f'\nThe front holds {len(self.front_)} genomes; the lowest '
                 f'error is {error(self.best_)}: {self.best_!r}')
        return self

    def predict(self, X):
        """Return predicted y values for X using best_"""
        check_is_fitted(self, 'best_')
        X = check_array(X)
        if X.shape[1] != self.n_features_in_:
            raise ValueError(f'Expected {self.n_features_in_} features, got '
                             f'{X.shape[1]}')
        return self.best_.evaluate(X).sum(axis=1)

    def score(self, X, y):
        """Return a dict with the error and size of best_ on X and y"""
        return dict(mean_squared_error=MeanSquaredError()(self.predict(X), y),
                    size=self.best_.size())
