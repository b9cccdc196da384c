from abc import ABC, abstractmethod

from sympy import sympify
from sympy.core.sympify import SympifyError

from .primitives import max_arity


def simplify(raw_expr):
    """Return the sympy-simplified form of a raw expression string

    '0/0' sympifies to 'nan' and 'a/(b-b)' to 'zoo'; protected division means
    neither reflects what the genome computes, so fall back to the raw string.
    """
    try:
        result = str(sympify(raw_expr))
    except (SympifyError, TypeError, AttributeError):
        return raw_expr
    if result == 'nan' or 'zoo' in result:
        return raw_expr
    return result


class Genome(ABC):
    """Base for the graph (CGP) and linear (GEP) encodings

    A genome keeps a `score` dict: the value of each objective keyed by its
    label, and the aggregate under 'fitness'. `dirty` marks a genome whose
    score and decoded phenotype are stale.
    """

    def __init__(self, num_inputs, primitives, labels=None, score=None):
        self.num_inputs = num_inputs
        self.primitives = primitives
        self.labels = labels or [f'f{i}' for i in range(num_inputs)]
        self.score = score or {}
        self.dirty = True

    #++++++++++++++++++++++++++++
    #   Query                   |
    #++++++++++++++++++++++++++++

    @property
    def fitness(self):
        """Return fitness or None if not yet evaluated"""
        fitness = self.score.get('fitness')
        return None if fitness is None else float(fitness)

    @fitness.setter
    def fitness(self, value):
        self.score['fitness'] = float(value)

    _dirty = True

    @property
    def dirty(self):
        return self._dirty

    @dirty.setter
    def dirty(self, value):
        """Flag for re-evaluation; a dirty genome re-decodes on next use"""
        self._dirty = value
        if value:
            self.invalidate()

    def invalidate(self):
        """Drop any cached phenotype (overridden by subclasses)"""

    @abstractmethod
    def size(self):
        """Return the number of nodes expressed by the genome"""

    @abstractmethod
    def evaluate(self, X):
        """Return an array of outputs (n_samples, n_outputs) for samples X"""

    @abstractmethod
    def clone(self):
        """Return an unlinked, dirty copy"""

    #++++++++++++++++++++++++++++
    #   Display                 |
    #++++++++++++++++++++++++++++

    @property
    @abstractmethod
    def raw_expressions(self):
        """Return the raw (fully parenthesised) expression of each output"""

    @property
    def raw_expression(self):
        """Return the raw expression; one line per output"""
        return self._join(self.raw_expressions)

    @property
    def simplified_expressions(self):
        """Return the sympy-simplified expression of each output"""
        return [simplify(e) for e in self.raw_expressions]

    @property
    def expression(self):
        """Return the simplified expression; one line per output"""
        return self._join(self.simplified_expressions)

    @staticmethod
    def _join(expressions):
        if len(expressions) == 1:
            return expressions[0]
        return '\n'.join(f'y{i} = {e}' for i, e in enumerate(expressions))

    def __str__(self):
        return self.raw_expression

    def __repr__(self):
        fit_repr = '' if self.fitness is None else f" fitness: {self.fitness}"
        expr = self.raw_expression.replace('\n', '; ')
        if len(expr) > 16:
            expr = expr[:13] + "..."
        return f"<{type(self).__name__}: '{expr}'{fit_repr}>"


class GenomeFactory(ABC):
    """Base for factories producing random genomes from a primitive pool"""

    def __init__(self, primitives, labels=None):
        if not primitives:
            raise ValueError('The primitive pool must not be empty')
        self.primitives = list(primitives)
        self.max_arity = max_arity(self.primitives)
        self.labels = labels

    def check_labels(self, num_features):
        """Validate (or default) the feature labels"""
        if self.labels is None:
            self.labels = [f'f{i}' for i in range(num_features)]
        else:
            if not all(isinstance(t, str) for t in self.labels):
                raise ValueError('Feature labels must be strings.')
            elif len(self.labels) != num_features:
                raise ValueError(f'Expected {num_features} feature labels, '
                                 f'got {len(self.labels)}')
            elif len(set(self.labels)) != len(self.labels):
                raise ValueError('Feature labels must be unique.')
            self.labels = list(self.labels)

    @abstractmethod
    def generate(self, rng):
        """Return a random genome"""

    def __call__(self, rng):
        return self.generate(rng)
