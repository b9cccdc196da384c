"""
Gene expression (linear) genomes

A linear genome is a list of Genes split into a head, which may hold
functions or terminals, and a tail of terminals only. The tail is long enough
to complete any tree the head can start:

    tail_length = head_length * (max_arity - 1) + 1

Decoding is breadth-first: the root is gene 0, and each function takes the
next `arity` unconsumed genes as its children. Genes past the last consumed
one are unexpressed.
"""

from collections import deque

import numpy as np

from . import Gene
from .genome import Genome, GenomeFactory


def tail_length(head_length, max_arity):
    return head_length * (max_arity - 1) + 1


def random_head_gene(rng, primitives, num_features, labels=None):
    """Return a function (p=0.5) or a terminal gene"""
    if rng.rand() < 0.5:
        return Gene.function(primitives[rng.randint(0, len(primitives))])
    return random_tail_gene(rng, num_features, labels)


def random_tail_gene(rng, num_features, labels=None, constants=False):
    """Return a terminal gene, or a constant (p=0.5) if allowed"""
    if constants and rng.rand() < 0.5:
        return Gene.constant(rng.randint(0, 10000) / 100)
    return Gene.terminal(int(rng.randint(0, num_features)), labels)


class LinearGenome(Genome):

    #++++++++++++++++++++++++++++
    #   Initialize              |
    #++++++++++++++++++++++++++++

    def __init__(self, genes, head_length, num_features, primitives,
                 labels=None, score=None):
        self.genes = genes
        self.head_length = head_length
        self.tail_length = len(genes) - head_length
        super().__init__(num_features, primitives, labels, score)

    def clone(self):
        """Return a copy with every gene copied; the copy starts dirty"""
        return LinearGenome([g.copy() for g in self.genes], self.head_length,
                            self.num_inputs, self.primitives, self.labels)

    #++++++++++++++++++++++++++++
    #   Decode                  |
    #++++++++++++++++++++++++++++

    _root = None

    def invalidate(self):
        self._root = None

    @property
    def root(self):
        """Return the root of the decoded tree (decoded when dirty)"""
        if self._root is None:
            self._root = self.decode()
        return self._root

    def decode(self):
        """Link the genes into a tree, breadth-first; return the root"""
        for gene in self.genes:
            gene.parent = None
            gene.children = None
        root = self.genes[0]
        queue = deque([root])
        consumed = 1
        while queue:
            gene = queue.popleft()
            if gene.arity:
                gene.children = self.genes[consumed:consumed + gene.arity]
                for child in gene.children:
                    child.parent = gene
                consumed += gene.arity
                queue.extend(gene.children)
        return root

    def set_gene(self, index, gene):
        """Replace the gene at index"""
        self.genes[index] = gene
        self.dirty = True

    #++++++++++++++++++++++++++++
    #   Query                   |
    #++++++++++++++++++++++++++++

    def __len__(self):
        return len(self.genes)

    def size(self):
        """Return the number of nodes in the decoded tree"""
        return self.root.n_children + 1

    @property
    def depth(self):
        return self.root.depth

    def is_head(self, index):
        return index < self.head_length

    #++++++++++++++++++++++++++++
    #   Predict                 |
    #++++++++++++++++++++++++++++

    def evaluate(self, X):
        """Return outputs (n_samples, 1) for samples X"""
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        with np.errstate(all='ignore'):
            return self.root.predict(X).reshape(-1, 1)

    #++++++++++++++++++++++++++++
    #   Display                 |
    #++++++++++++++++++++++++++++

    @property
    def raw_expressions(self):
        return [self.root.parse()]

    def display(self, *args, **kwargs):
        """Return a printable tree of the expressed genes"""
        return self.root.display_viz(*args, **kwargs)

    def save(self):
        """Return the genes as a space-separated string of labels"""
        head = ' '.join(str(g.label) for g in self.genes[:self.head_length])
        tail = ' '.join(str(g.label) for g in self.genes[self.head_length:])
        return f'{head} | {tail}'


class LinearGenomeFactory(GenomeFactory):
    """Produce random LinearGenomes with a fixed head length"""

    def __init__(self, head_length, num_features, primitives, labels=None,
                 constants=False):
        super().__init__(primitives, labels)
        for name, value in (('head_length', head_length),
                            ('num_features', num_features)):
            if not isinstance(value, (int, np.integer)) or value <= 0:
                raise ValueError(f'{name} must be a positive integer, '
                                 f'got {value!r}')
        self.head_length = head_length
        self.num_features = num_features
        self.constants = constants
        self.check_labels(num_features)

    @property
    def tail_length(self):
        return tail_length(self.head_length, self.max_arity)

    def generate(self, rng):
        """Return a LinearGenome with a random head and tail"""
        genes = [random_head_gene(rng, self.primitives, self.num_features,
                                  self.labels)
                 for _ in range(self.head_length)]
        genes += [random_tail_gene(rng, self.num_features, self.labels,
                                   self.constants)
                  for _ in range(self.tail_length)]
        return LinearGenome(genes, self.head_length, self.num_features,
                            self.primitives, self.labels)
