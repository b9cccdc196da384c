"""
Single-objective strategies

Both strategies minimise the `fitness` produced by one Objective.
  - CartesianGeneticProgramming: the classic (1+lambda) CGP loop
  - GeneExpressionProgramming: crossover with the best genome, then mutation
"""

import math

from .algorithm import EvolutionaryAlgorithm


def _key(chromosome):
    fitness = chromosome.fitness
    return math.inf if fitness is None or math.isnan(fitness) else fitness


class CartesianGeneticProgramming(EvolutionaryAlgorithm):
    """Keep the fittest genome; refill every other slot with its mutants"""

    def __init__(self, factory, objective=None, lambda_=4, **kwargs):
        if lambda_ < 1:
            raise ValueError(f'lambda_ must be at least 1, got {lambda_}')
        self.lambda_ = lambda_
        super().__init__(factory, objective, **kwargs)

    def evolve(self, population):
        if not population:
            raise ValueError('Cannot evolve an empty population')
        best = min(self.elitism(population), key=_key)
        self.log(f'Best fitness: {best.fitness}', display=['i', 'g'])
        return [best] + [self.mutate(best) for _ in population[1:]]

    def mutate(self, chromosome):
        """Return the best of lambda mutants if not worse, else chromosome"""
        if not self.mutators:
            raise ValueError('A mutator is required to mutate genomes')
        children = []
        for _ in range(self.lambda_):
            child = self.get_mutator(0)(chromosome, self.rng, self.log)
            self.evaluate(child)
            children.append(child)
        best = min(children, key=_key)
        if self.objective.is_not_worse(_key(best), _key(chromosome)):
            return best
        return chromosome


class GeneExpressionProgramming(EvolutionaryAlgorithm):
    """Cross each genome with the best (p=crossover_probability), then mutate
    it (p=mutation_probability), keeping mutants which are not worse"""

    def evolve(self, population):
        if not population:
            raise ValueError('Cannot evolve an empty population')
        new_population = self.elitism(population)
        best = min(new_population, key=_key)
        for i, chromosome in enumerate(new_population):
            if (self.rng.rand() <= self.crossover_probability and
                    chromosome is not best):
                new_population[i] = self.crossover(best, chromosome)
            if self.rng.rand() <= self.mutation_probability:
                new_population[i] = self.mutate(new_population[i])
        return new_population

    def crossover(self, c1, c2):
        if not self.crossovers:
            raise ValueError('A crossover is required for crossover')
        child = self.get_crossover(0)(c1, c2, self.rng, self.log)
        self.evaluate(child)
        return child

    def mutate(self, chromosome):
        if not self.mutators:
            raise ValueError('A mutator is required to mutate genomes')
        child = self.get_mutator(0)(chromosome, self.rng, self.log)
        self.evaluate(child)
        if self.objective.is_not_worse(_key(child), _key(chromosome)):
            return child
        return chromosome
