import math

from .algorithm import MultiObjectiveEvolutionaryAlgorithm


class SEAMO(MultiObjectiveEvolutionaryAlgorithm):
    """Simple Evolutionary Algorithm for Multi-objective Optimisation

    Every member of the population serves as a parent once per generation.
    The offspring of two parents replaces the first parent it dominates; if
    it dominates none but would be a new global best, it replaces a parent
    which is not itself a global best.
    """

    def evolve(self, population):
        """Return the next generation of population"""
        new_population = self.elitism(population)
        if not new_population:
            raise ValueError('Cannot evolve an empty population')
        objective = self.objective
        self.log(f'\nEvolve a population of {len(new_population)} genomes ...',
                 display=['i'])

        for _ in range(len(new_population)):
            # One parent per selector, and at least two
            parents = [self.get_selector(j)(new_population, self.rng)
                       for j in range(max(len(self.selectors), 2))]

            offspring = self.crossover(parents[0].clone(), parents[1].clone())
            offspring = self.mutate(offspring.clone())

            # The list of parents may grow while it is walked
            j = 0
            while j < len(parents):
                parent = parents[j]
                if self.is_dominated_by(objective, parent, offspring):
                    if self.replace_parent(new_population, parent, offspring):
                        break
                elif self.should_replace(new_population, parent, offspring):
                    if not self.is_global_best(parent):
                        if self.replace_parent(new_population, parent,
                                               offspring):
                            break
                    elif len(parents) <= len(new_population):
                        selector = self.get_selector(len(parents) - 1)
                        parents.append(selector(new_population, self.rng))
                j += 1
        return new_population


class ElitistSEAMO(SEAMO):
    """SEAMO with a stochastic elitist filter before each generation

    Members are ranked by descending fitness (NaN first, as it orders above
    every value) and the member of rank r survives with probability 1/r;
    global bests always survive. The survivors are padded with fresh random
    genomes to the original size, and the globals are recomputed for the
    rebuilt population.
    """

    def elitism(self, population):
        def sort_key(c):
            fitness = c.fitness
            return math.inf if fitness is None or math.isnan(fitness) else fitness
        ranked = sorted(population, key=sort_key, reverse=True)

        survivors = []
        for rank, chromosome in enumerate(ranked, start=1):
            if self.is_global_best(chromosome) or self.rng.rand() < 1 / rank:
                survivors.append(chromosome)
        n_fresh = len(population) - len(survivors)
        self.log(f'{len(survivors)} genomes survive elitism; adding '
                 f'{n_fresh} random genomes', display=['i', 'db'])
        new_population = survivors + [self.factory.generate(self.rng)
                                      for _ in range(n_fresh)]

        # Modifies the shared globals and archive
        self.recompute_globals(new_population)
        return new_population
