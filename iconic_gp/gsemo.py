from .algorithm import MultiObjectiveEvolutionaryAlgorithm
from .operators import RandomUniformSelector


class GSEMO(MultiObjectiveEvolutionaryAlgorithm):
    """Global Simple Evolutionary Multi-objective Optimizer

    The population is the current non-dominated front, so its size varies.
    Each generation mutates one random parent, then applies round j of
    further mutation (j = 2 .. parent size) with probability 1/j. A
    non-dominated offspring joins the front and removes every member it
    dominates.
    """

    def __init__(self, factory, objective=None, lambda_=1, **kwargs):
        super().__init__(factory, objective, lambda_, **kwargs)
        self.default_selectors = [RandomUniformSelector(),
                                  RandomUniformSelector()]

    def evolve(self, population):
        """Return the next generation of population"""
        new_population = self.elitism(population)
        if not new_population:
            raise ValueError('Cannot evolve an empty population')
        objective = self.objective

        parent = self.get_selector(0)(new_population, self.rng)
        offspring = self.mutate(parent.clone())
        for j in range(2, parent.size() + 1):
            if 1 / j >= self.rng.rand():
                offspring = self.mutate(offspring)

        for member in new_population:
            if self.is_dominated_by(objective, offspring, member):
                self.log('Offspring is dominated and discarded', display=['db'])
                return new_population

        survivors = [member for member in new_population
                     if not self.is_dominated_by(objective, member, offspring)]
        self.log(f'Offspring replaces {len(new_population) - len(survivors)} '
                 f'dominated genomes', display=['db'])
        survivors.append(offspring)
        self.update_globals(offspring)
        return survivors
