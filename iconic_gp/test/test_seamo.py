import math

import pytest
import numpy as np

from iconic_gp import SEAMO, ElitistSEAMO, CartesianSingleActiveMutator, \
                      GraphGenomeFactory


@pytest.fixture(params=[SEAMO, ElitistSEAMO])
def strategy(request, graph_factory, objective):
    algorithm = request.param(graph_factory, objective, random_state=1000)
    algorithm.add_mutator(CartesianSingleActiveMutator())
    return algorithm

def best_error(algorithm):
    return algorithm.globals[algorithm.goals[0]][0]

def test_population_size_fixed(strategy):
    strategy.initialise_population(12)
    for _ in range(5):
        population = strategy.step()
        assert len(population) == 12
        assert all(not c.dirty for c in population)

def test_globals(strategy):
    strategy.initialise_population(12)
    before = best_error(strategy)
    for _ in range(5):
        strategy.step()
        after = best_error(strategy)
        assert after <= before + 1e-6
        before = after
        for value, holder in strategy.globals.values():
            assert not math.isnan(value)
            assert holder in strategy.archive

def test_offspring_replaces_dominated(graph_factory, objective, make_scored,
                                      monkeypatch):
    algorithm = SEAMO(graph_factory, objective, random_state=1000)
    population = [make_scored(1., 5.), make_scored(2., 3.),
                  make_scored(3., 1.)]
    for c in population:
        algorithm.update_globals(c)
    monkeypatch.setattr(algorithm, 'mutate', lambda c: make_scored(.5, 1.))
    new_population = algorithm.evolve(population)
    assert len(new_population) == 3
    assert all(c.score['mean_squared_error'] == .5 for c in new_population)
    assert not any(c in population for c in new_population)
    assert algorithm.globals[algorithm.goals[0]][0] == .5

def test_global_best_keeps_place(graph_factory, objective, make_scored,
                                 monkeypatch):
    algorithm = SEAMO(graph_factory, objective, random_state=1000)
    smallest = make_scored(3., 1.)
    population = [make_scored(1., 5.), make_scored(2., 3.), smallest]
    for c in population:
        algorithm.update_globals(c)
    monkeypatch.setattr(algorithm, 'mutate', lambda c: make_scored(.5, 10.))
    new_population = algorithm.evolve(list(population))
    assert len(new_population) == 3
    # Neither dominated nor replaceable: it holds the best size
    assert any(c is smallest for c in new_population)
    assert any(c.score['mean_squared_error'] == .5 for c in new_population)
    assert algorithm.globals[algorithm.goals[0]][0] == .5

def test_offspring_not_better(graph_factory, objective, make_scored,
                              monkeypatch):
    algorithm = SEAMO(graph_factory, objective, random_state=1000)
    population = [make_scored(1., 5.), make_scored(2., 3.),
                  make_scored(3., 1.)]
    for c in population:
        algorithm.update_globals(c)
    monkeypatch.setattr(algorithm, 'mutate', lambda c: make_scored(9., 9.))
    new_population = algorithm.evolve(list(population))
    assert new_population == population

def test_elitism(graph_factory, objective):
    algorithm = ElitistSEAMO(graph_factory, objective, random_state=1000)
    population = algorithm.initialise_population(15)
    holders = [holder for _, holder in algorithm.globals.values()]
    fittest = algorithm.fittest()
    new_population = algorithm.elitism(population)
    assert len(new_population) == 15
    assert any(c is fittest for c in new_population)
    for holder in holders:
        assert any(c is holder for c in new_population)
    assert all(not c.dirty for c in new_population)

def test_elitism_fresh_genomes(objective, primitives):
    """A large population of mostly weak members gets refilled"""
    factory = GraphGenomeFactory(1, 2, 3, 1, 3, primitives)
    algorithm = ElitistSEAMO(factory, objective, random_state=0)
    population = algorithm.initialise_population(40)
    new_population = algorithm.elitism(population)
    assert len(new_population) == 40
    assert not all(any(c is p for p in population) for c in new_population)

class FixedDraws:
    """rand() always returns `value`; integer draws come from a real rng"""

    def __init__(self, value, seed=0):
        self.value = value
        self.rng = np.random.RandomState(seed)

    def rand(self):
        return self.value

    def randint(self, *args):
        return self.rng.randint(*args)

def test_elitism_rank_one_is_highest(graph_factory, objective, make_scored):
    algorithm = ElitistSEAMO(graph_factory, objective)
    algorithm.rng = FixedDraws(.99)  # only rank 1 survives (1/1 > .99)
    members = [make_scored(1., 5.), make_scored(5., 5.), make_scored(9., 5.)]
    new_population = algorithm.elitism(members)
    assert len(new_population) == 3
    assert new_population[0] is members[2]
    assert not any(c is members[0] or c is members[1]
                   for c in new_population)

def test_elitism_nan_ranks_first(graph_factory, objective, make_scored):
    algorithm = ElitistSEAMO(graph_factory, objective)
    algorithm.rng = FixedDraws(.4)  # ranks 1 and 2 survive
    members = [make_scored(1., 5.), make_scored(math.nan, 5.),
               make_scored(9., 5.), make_scored(5., 5.)]
    new_population = algorithm.elitism(members)
    assert len(new_population) == 4
    assert new_population[0] is members[1]
    assert new_population[1] is members[2]
    assert not any(c is members[0] or c is members[3]
                   for c in new_population)
