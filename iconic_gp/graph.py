"""
Cartesian (graph) genomes

The genome is a flat list of ints. The first `num_inputs` genes are identity
placeholders for the inputs; each of the `rows * columns` interior nodes then
takes `1 + max_arity` genes: a function gene (index into the primitive pool)
followed by `max_arity` connection genes. A node always takes the full width,
so connection genes beyond its function's arity are inert. A separate list
of `outputs` holds node addresses.

Node addresses count inputs first, then interior nodes column by column:

    address:  0 .. num_inputs-1 | num_inputs .. num_inputs+rows*columns-1
    genes:    [i0, i1, ...]     | [f, c0, c1, ...] per node
"""

import numpy as np
from sympy import Symbol, sympify
from sympy.core.sympify import SympifyError

from .genome import Genome, GenomeFactory


def node_to_index(node, num_inputs, max_arity):
    """Return the position in the genome of the first gene of a node"""
    if node < num_inputs:
        return node
    return (max_arity + 1) * (node - num_inputs) + num_inputs


def random_connection(node, num_inputs, rows, levels_back, rng):
    """Return a random legal connection for interior node number `node`

    `node` counts interior nodes from 0. Nodes in column c may connect to any
    input or to nodes of columns c-levels_back .. c-1.
    """
    column = node // rows
    upper = num_inputs + column * rows
    if column < levels_back:
        return int(rng.randint(0, upper))
    lower = num_inputs + (column - levels_back) * rows
    # Inputs are always legal; draw over inputs + window
    choice = int(rng.randint(0, num_inputs + upper - lower))
    return choice if choice < num_inputs else lower + choice - num_inputs


class GraphGenome(Genome):

    #++++++++++++++++++++++++++++
    #   Initialize              |
    #++++++++++++++++++++++++++++

    def __init__(self, genome, outputs, num_inputs, columns, rows,
                 levels_back, primitives, labels=None, score=None):
        self.genome = list(genome)
        self.outputs = list(outputs)
        self.columns = columns
        self.rows = rows
        self.levels_back = levels_back
        self.max_arity = max(p.arity for p in primitives)
        super().__init__(num_inputs, primitives, labels, score)

    def clone(self):
        """Return a copy of the genes; the copy starts dirty"""
        return GraphGenome(self.genome, self.outputs, self.num_inputs,
                           self.columns, self.rows, self.levels_back,
                           self.primitives, self.labels)

    #++++++++++++++++++++++++++++
    #   Query                   |
    #++++++++++++++++++++++++++++

    @property
    def num_nodes(self):
        """Return the number of interior nodes"""
        return self.rows * self.columns

    @property
    def num_addresses(self):
        """Return the number of addressable nodes, inputs included"""
        return self.num_inputs + self.num_nodes

    def index(self, node):
        return node_to_index(node, self.num_inputs, self.max_arity)

    def function(self, node):
        """Return the Primitive of an interior node"""
        return self.primitives[self.genome[self.index(node)]]

    def connections(self, node):
        """Return the live (arity-bounded) connections of an interior node"""
        i = self.index(node)
        arity = self.primitives[self.genome[i]].arity
        return self.genome[i + 1:i + 1 + arity]

    def find_active_nodes(self, output):
        """Return the ascending addresses of the nodes contributing to output

        Walks backwards from the last interior node. An active node marks only
        the targets of its function's first `arity` connection genes.
        """
        active = [False] * self.num_addresses
        active[output] = True
        for node in range(self.num_addresses - 1, self.num_inputs - 1, -1):
            if active[node]:
                for target in self.connections(node):
                    active[target] = True
        return [node for node, flag in enumerate(active) if flag]

    _phenome = None

    def invalidate(self):
        self._phenome = None

    @property
    def phenome(self):
        """Return the active nodes of each output (recomputed when dirty)"""
        if self._phenome is None:
            self._phenome = [self.find_active_nodes(o) for o in self.outputs]
        return self._phenome

    def active_nodes(self):
        """Return the sorted union of active nodes across outputs"""
        return sorted(set().union(*self.phenome))

    def size(self):
        return len(self.active_nodes())

    def is_active(self, gene_index):
        """Return whether a gene is live and belongs to any active node"""
        if gene_index < self.num_inputs:
            return False
        node, offset = divmod(gene_index - self.num_inputs, self.max_arity + 1)
        node += self.num_inputs
        if offset > self.function(node).arity:  # Inert connection gene
            return False
        return any(node in nodes for nodes in self.phenome)

    #++++++++++++++++++++++++++++
    #   Predict                 |
    #++++++++++++++++++++++++++++

    def evaluate(self, X):
        """Return outputs (n_samples, n_outputs) for samples X

        Active nodes are computed in ascending order, so every connection has
        been calculated before it is used.
        """
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        values = {}
        with np.errstate(all='ignore'):
            for node in self.active_nodes():
                if node < self.num_inputs:
                    values[node] = X[:, node]
                else:
                    args = [values[c] for c in self.connections(node)]
                    result = self.function(node)(*args)
                    values[node] = np.broadcast_to(
                        np.asarray(result, dtype=np.float64), (X.shape[0],))
        return np.stack([values[o] for o in self.outputs], axis=1)

    #++++++++++++++++++++++++++++
    #   Display                 |
    #++++++++++++++++++++++++++++

    def parse(self, node, ws='', memo=None):
        """Return the raw expression computed by a node

        `memo` maps addresses to strings already built in this call, so each
        shared node is parsed once.
        """
        memo = {} if memo is None else memo
        if node not in memo:
            if node < self.num_inputs:
                memo[node] = f'({self.labels[node]})'
            else:
                args = [self.parse(c, ws, memo) for c in self.connections(node)]
                memo[node] = f'({self.function(node).format(args, ws)})'
        return memo[node]

    @property
    def raw_expressions(self):
        memo = {}
        return [self.parse(o, memo=memo) for o in self.outputs]

    def symbolic(self):
        """Return a sympy expression per output, built once per active node

        Each node is sympified from its primitive's format with its arguments
        bound to the already built expressions of its connections, so shared
        nodes are never expanded into text.
        """
        exprs = {}
        for node in self.active_nodes():
            if node < self.num_inputs:
                exprs[node] = Symbol(self.labels[node])
                continue
            connections = self.connections(node)
            names = [f'arg{i}' for i in range(len(connections))]
            text = self.function(node).format([f'({n})' for n in names])
            exprs[node] = sympify(text, locals={
                n: exprs[c] for n, c in zip(names, connections)})
        return [exprs[o] for o in self.outputs]

    @property
    def simplified_expressions(self):
        try:
            exprs = [str(e) for e in self.symbolic()]
        except (SympifyError, TypeError, AttributeError):
            return super().simplified_expressions
        raw = None
        for i, expr in enumerate(exprs):
            if expr == 'nan' or 'zoo' in expr:
                # Protected division makes sympy's value wrong here
                raw = raw or self.raw_expressions
                exprs[i] = raw[i]
        return exprs

    def __repr__(self):
        # Shared nodes make the expression string grow quickly with depth
        fit_repr = '' if self.fitness is None else f" fitness: {self.fitness}"
        return (f"<GraphGenome: outputs={self.outputs} "
                f"size={self.size()}{fit_repr}>")

    def display(self):
        """Return a printable listing of the active nodes of each output"""
        output = ''
        for i, (address, nodes) in enumerate(zip(self.outputs, self.phenome)):
            output += f'Output {i} (node {address}):\n'
            for node in nodes:
                if node < self.num_inputs:
                    output += f'  {node}: {self.labels[node]}\n'
                else:
                    label = self.function(node).label
                    output += f'  {node}: {label} {self.connections(node)}\n'
        return output


class GraphGenomeFactory(GenomeFactory):
    """Produce random GraphGenomes within a fixed grid"""

    def __init__(self, num_outputs, num_inputs, columns, rows, levels_back,
                 primitives, labels=None):
        super().__init__(primitives, labels)
        for name, value in (('num_outputs', num_outputs),
                            ('num_inputs', num_inputs), ('columns', columns),
                            ('rows', rows), ('levels_back', levels_back)):
            if not isinstance(value, (int, np.integer)) or value <= 0:
                raise ValueError(f'{name} must be a positive integer, '
                                 f'got {value!r}')
        self.num_outputs = num_outputs
        self.num_inputs = num_inputs
        self.columns = columns
        self.rows = rows
        self.levels_back = levels_back
        self.check_labels(num_inputs)

    @property
    def num_addresses(self):
        return self.num_inputs + self.rows * self.columns

    def random_output(self, rng):
        return int(rng.randint(0, self.num_addresses))

    def random_connection(self, node, rng):
        return random_connection(node, self.num_inputs, self.rows,
                                 self.levels_back, rng)

    def generate(self, rng):
        """Return a GraphGenome with random outputs and body genes"""
        outputs = [self.random_output(rng) for _ in range(self.num_outputs)]
        genome = list(range(self.num_inputs))
        for node in range(self.rows * self.columns):
            genome.append(int(rng.randint(0, len(self.primitives))))
            for _ in range(self.max_arity):
                genome.append(self.random_connection(node, rng))
        return GraphGenome(genome, outputs, self.num_inputs, self.columns,
                           self.rows, self.levels_back, self.primitives,
                           self.labels)
