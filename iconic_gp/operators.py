"""
Evolutionary operators

Operators are small callables so that algorithms can hold lists of them:
  - mutators:   mutator(genome, rng, log=None) -> new genome
  - crossovers: crossover(a, b, rng, log=None) -> new genome
  - selectors:  selector(population, rng) -> member of population

Mutators and crossovers never modify their arguments; they work on clones.
"""

from .graph import node_to_index, random_connection
from .linear import LinearGenome, random_head_gene, random_tail_gene


def _no_log(msg, display=None):
    pass


#++++++++++++++++++++++++++++
#   Mutation                |
#++++++++++++++++++++++++++++

class CartesianSingleActiveMutator:
    """Mutate genes of a GraphGenome until an active gene changes

    Candidates are the interior nodes and the output genes, chosen uniformly.
    For a node, either its function gene or one of its live connection genes
    (p=0.5) gets a new random legal value. Changes to inactive genes are kept
    (neutral drift) and the loop continues until a changed gene is active, so
    the phenotype of the mutant always differs from the parent's.
    """

    def __call__(self, parent, rng, log=None):
        log = log or _no_log
        mutant = parent.clone()
        genome = mutant.genome
        n_nodes = mutant.num_nodes
        while True:
            choice = int(rng.randint(0, n_nodes + len(mutant.outputs)))

            # Output genes are always active
            if choice >= n_nodes:
                i_output = choice - n_nodes
                new = int(rng.randint(0, mutant.num_addresses))
                if new == mutant.outputs[i_output]:
                    continue
                log(f'Output {i_output} moved from node '
                    f'{mutant.outputs[i_output]} to node {new}', display=['db'])
                mutant.outputs[i_output] = new
                mutant.dirty = True
                return mutant

            index = node_to_index(choice + mutant.num_inputs,
                                  mutant.num_inputs, mutant.max_arity)
            arity = mutant.primitives[genome[index]].arity
            if arity == 0 or rng.rand() < 0.5:
                i_gene = index
                new = int(rng.randint(0, len(mutant.primitives)))
            else:
                i_gene = index + 1 + int(rng.randint(0, arity))
                new = random_connection(choice, mutant.num_inputs, mutant.rows,
                                        mutant.levels_back, rng)
            if new == genome[i_gene]:
                continue
            genome[i_gene] = new
            mutant.dirty = True
            if mutant.is_active(i_gene):
                log(f'Gene {i_gene} of node {choice + mutant.num_inputs} '
                    f'set to {new}', display=['db'])
                return mutant


class ExpressionMutator:
    """Replace one gene of a LinearGenome

    A head gene becomes a function or a terminal (p=0.5); a tail gene becomes
    a terminal.
    """

    def __call__(self, parent, rng, log=None):
        log = log or _no_log
        mutant = parent.clone()
        index = int(rng.randint(0, len(mutant)))
        if mutant.is_head(index):
            gene = random_head_gene(rng, mutant.primitives, mutant.num_inputs,
                                    mutant.labels)
        else:
            gene = random_tail_gene(rng, mutant.num_inputs, mutant.labels)
        log(f'Gene {index} changed from {mutant.genes[index].label} to '
            f'{gene.label}', display=['db'])
        mutant.set_gene(index, gene)
        return mutant


#++++++++++++++++++++++++++++
#   Crossover               |
#++++++++++++++++++++++++++++

class SimpleExpressionCrossover:
    """One-point crossover of two LinearGenomes of the same shape

    The genes up to and including a random point come from one parent and the
    rest from the other; which parent supplies the left part is a coin flip.
    Head and tail positions line up, so the child keeps a terminal-only tail.
    """

    def __call__(self, c1, c2, rng, log=None):
        log = log or _no_log
        if len(c1) != len(c2) or c1.head_length != c2.head_length:
            raise ValueError('Crossover requires genomes of the same shape')
        point = int(rng.randint(0, len(c1)))
        left, right = (c1, c2) if rng.rand() < 0.5 else (c2, c1)
        genes = ([g.copy() for g in left.genes[:point + 1]] +
                 [g.copy() for g in right.genes[point + 1:]])
        log(f'Crossover at gene {point}', display=['db'])
        return LinearGenome(genes, left.head_length, left.num_inputs,
                            left.primitives, left.labels)


#++++++++++++++++++++++++++++
#   Selection               |
#++++++++++++++++++++++++++++

class SequentialSelector:
    """Walk through the population in order, wrapping around at the end"""

    def __init__(self):
        self.index = -1

    def __call__(self, population, rng=None):
        if self.index >= len(population) - 1:
            self.index = -1
        self.index += 1
        return population[self.index]


class RandomUniformSelector:
    """Return a member of the population chosen uniformly at random"""

    def __call__(self, population, rng):
        return population[int(rng.randint(0, len(population)))]
