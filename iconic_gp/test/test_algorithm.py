import math
from unittest.mock import MagicMock

import pytest
import numpy as np

from iconic_gp import SEAMO, GSEMO, CartesianSingleActiveMutator, \
                      CacheableObjective, SequentialSelector, \
                      RandomUniformSelector


@pytest.fixture
def algorithm(graph_factory, objective):
    algorithm = SEAMO(graph_factory, objective, random_state=1000)
    algorithm.add_mutator(CartesianSingleActiveMutator())
    return algorithm

@pytest.fixture
def error(algorithm):
    return algorithm.goals[0]

@pytest.fixture
def size(algorithm):
    return algorithm.goals[1]

@pytest.mark.parametrize('kwargs', [
    dict(lambda_=0),
    dict(crossover_probability=1.5),
    dict(mutation_probability=-0.1),
])
def test_config_errors(graph_factory, objective, kwargs):
    with pytest.raises(ValueError):
        SEAMO(graph_factory, objective, **kwargs)

def test_objective_cache(graph_factory, objective, golden_genome):
    algorithm = SEAMO(graph_factory, objective, cache=True)
    assert algorithm.objective is objective
    assert isinstance(algorithm._objective, CacheableObjective)
    fitness = algorithm.evaluate(golden_genome)
    assert golden_genome.fitness == fitness
    assert not golden_genome.dirty
    assert algorithm.goals == objective.goals

def test_objective_setter_keeps_cache(graph_factory, objective):
    algorithm = SEAMO(graph_factory, objective, cache=True)
    algorithm.objective = objective
    assert algorithm.objective is objective
    assert isinstance(algorithm._objective, CacheableObjective)
    assert algorithm._objective.objective is objective

    late = SEAMO(graph_factory, cache=True)
    late.objective = objective
    assert isinstance(late._objective, CacheableObjective)

    uncached = SEAMO(graph_factory, objective)
    uncached.objective = objective
    assert uncached._objective is objective
    uncached.set_objective(objective, cache=True)
    assert isinstance(uncached._objective, CacheableObjective)
    assert uncached.cache

def test_evaluate(algorithm, golden_genome):
    fitness = algorithm.evaluate(golden_genome)
    assert golden_genome.fitness == fitness
    assert golden_genome.score['mean_squared_error'] == fitness
    assert golden_genome.score['size'] == 6.
    assert not golden_genome.dirty

def test_evaluate_requires_objective(graph_factory, golden_genome):
    with pytest.raises(ValueError):
        SEAMO(graph_factory).evaluate(golden_genome)

def test_initialise_population(algorithm):
    population = algorithm.initialise_population(10)
    assert len(population) == 10
    assert all(not c.dirty and c.fitness is not None for c in population)
    assert set(algorithm.globals) == set(algorithm.goals)
    for value, holder in algorithm.globals.values():
        assert not math.isnan(value)
        assert holder in algorithm.archive
        assert any(holder is c for c in population)
    with pytest.raises(ValueError):
        algorithm.initialise_population(0)

def test_is_dominated_by(algorithm, objective, make_scored):
    a = make_scored(1., 5.)
    b = make_scored(2., 3.)
    better = make_scored(.5, 3.)
    assert not algorithm.is_dominated_by(objective, a, b)
    assert not algorithm.is_dominated_by(objective, b, a)
    assert algorithm.is_dominated_by(objective, a, better)
    assert algorithm.is_dominated_by(objective, b, better)
    assert not algorithm.is_dominated_by(objective, better, a)

def test_mutual_dominance(algorithm, objective, make_scored):
    a = make_scored(1., 5.)
    twin = make_scored(1. + 1e-7, 5.)
    assert algorithm.is_dominated_by(objective, a, twin)
    assert algorithm.is_dominated_by(objective, twin, a)

def test_nan_dominance(algorithm, objective, make_scored):
    a = make_scored(1., 5.)
    broken = make_scored(math.nan, 1.)
    assert not algorithm.is_dominated_by(objective, a, broken)
    assert not algorithm.is_dominated_by(objective, broken, a)

def test_get_non_dominated(algorithm, make_scored):
    a = make_scored(1., 5.)
    b = make_scored(2., 3.)
    twin = make_scored(1., 5.)
    worse = make_scored(3., 6.)
    front = algorithm.get_non_dominated([a, b, twin, worse])
    assert front == [a, b]

def test_update_globals(algorithm, error, size, make_scored):
    a = make_scored(1., 5.)
    b = make_scored(2., 3.)
    for c in (a, b):
        algorithm.update_globals(c)
    assert algorithm.globals[error] == (1., a)
    assert algorithm.globals[size] == (3., b)
    better = make_scored(.5, 3.)
    algorithm.update_globals(better)
    assert algorithm.globals[error] == (.5, better)
    assert algorithm.globals[size] == (3., better)
    # Replaced holders stay archived
    assert algorithm.archive == {a, b, better}

def test_nan_never_global_best(graph_factory, objective, make_scored, capsys):
    algorithm = SEAMO(graph_factory, objective, display='i')
    error = algorithm.goals[0]
    broken = make_scored(math.nan, 1.)
    assert not algorithm.add_global(error, broken, math.nan)
    assert 'cannot be a global best' in capsys.readouterr().out
    algorithm.update_globals(broken)
    assert error not in algorithm.globals
    assert algorithm.globals[algorithm.goals[1]] == (1., broken)
    assert not math.isnan(algorithm.globals[algorithm.goals[1]][0])

def test_is_global_best(algorithm, make_scored):
    a = make_scored(1., 5.)
    b = make_scored(2., 3.)
    for c in (a, b):
        algorithm.update_globals(c)
    assert algorithm.is_global_best(a)
    assert algorithm.is_global_best(b)
    assert algorithm.is_global_best(make_scored(1., 9.))
    assert not algorithm.is_global_best(make_scored(3., 6.))
    assert not algorithm.is_global_best(make_scored(math.nan, 6.))

def test_should_replace(algorithm, make_scored):
    a = make_scored(1., 5.)
    b = make_scored(2., 3.)
    population = [a, b]
    for c in population:
        algorithm.update_globals(c)
    assert not algorithm.should_replace(population, b, a)
    assert algorithm.should_replace(population, b, make_scored(.5, 9.))
    assert not algorithm.should_replace(population, b, make_scored(3., 6.))

def test_replace_parent(algorithm, error, make_scored):
    a = make_scored(1., 5.)
    b = make_scored(2., 3.)
    better = make_scored(.5, 3.)
    population = [a, b]
    assert algorithm.replace_parent(population, a, better)
    assert population == [better, b]
    assert algorithm.globals[error] == (.5, better)
    assert not algorithm.replace_parent(population, a, better)

def test_mutate(algorithm, objective, golden_genome):
    mutator = MagicMock(side_effect=CartesianSingleActiveMutator())
    algorithm.mutators = [mutator]
    algorithm.lambda_ = 4
    algorithm.evaluate(golden_genome)
    for _ in range(10):
        result = algorithm.mutate(golden_genome)
        assert not result.dirty
        if result is not golden_genome:
            assert not algorithm.is_dominated_by(objective, result,
                                                 golden_genome)
    assert mutator.call_count == 40

def test_mutate_requires_mutator(graph_factory, objective, golden_genome):
    with pytest.raises(ValueError):
        SEAMO(graph_factory, objective).mutate(golden_genome)

def test_crossover_without_operator(algorithm, make_scored):
    a, b = make_scored(1., 5.), make_scored(2., 3.)
    assert algorithm.crossover(a, b) is a

def test_default_selectors(algorithm, graph_factory, objective):
    assert isinstance(algorithm.get_selector(0), SequentialSelector)
    assert isinstance(algorithm.get_selector(1), RandomUniformSelector)
    assert isinstance(algorithm.get_selector(5), RandomUniformSelector)
    selector = MagicMock()
    algorithm.add_selector(selector)
    assert algorithm.get_selector(0) is selector
    gsemo = GSEMO(graph_factory, objective)
    assert isinstance(gsemo.get_selector(0), RandomUniformSelector)

def test_fittest(algorithm, make_scored):
    population = [make_scored(math.nan, 1.), make_scored(2., 3.),
                  make_scored(1., 5.)]
    assert algorithm.fittest(population) is population[2]

def test_step_requires_population(algorithm):
    with pytest.raises(ValueError):
        algorithm.step()
