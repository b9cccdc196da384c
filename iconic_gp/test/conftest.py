import pytest
import numpy as np

from iconic_gp import get_primitives, GraphGenome, GraphGenomeFactory, \
                      Dataset, DefaultMultiObjective, DefaultObjective, \
                      MeanSquaredError, SizeObjective


@pytest.fixture
def rng():
    return np.random.RandomState(1000)

@pytest.fixture
def primitives():
    """Add, Sub, Mul, Div, Sin: max arity 2"""
    return get_primitives(['+', '-', '*', '/', 'sin'])

@pytest.fixture
def golden_genome(primitives):
    """Two inputs and four interior nodes in a single row

    node 2: (f0)+(f0)   node 3: (f0)-(f1)
    node 4: sin(node 2) node 5: (f1)/(node 3)
    """
    return GraphGenome([0, 1, 0, 0, 0, 1, 0, 1, 4, 2, 3, 3, 1, 3],
                       [4, 2, 5], num_inputs=2, columns=4, rows=1,
                       levels_back=4, primitives=primitives)

@pytest.fixture
def dataset():
    """y = f0 * f1 + f0 over a small grid"""
    X = np.array([[a, b] for a in np.linspace(-1, 1, 5)
                  for b in np.linspace(-1, 1, 4)])
    y = X[:, 0] * X[:, 1] + X[:, 0]
    return Dataset.from_X_y(X, y)

@pytest.fixture
def mock_log():
    def handler(*args, **kwargs):
        pass
    return handler

@pytest.fixture
def objective(dataset):
    """Error then size, with fitness taken from the error"""
    return DefaultMultiObjective([
        DefaultObjective(MeanSquaredError(), dataset),
        SizeObjective(),
    ])

@pytest.fixture
def graph_factory(primitives):
    return GraphGenomeFactory(1, 2, columns=6, rows=1, levels_back=6,
                              primitives=primitives)

@pytest.fixture
def make_scored(golden_genome):
    """Return clean genomes with preset error and size"""
    def scored(error, size):
        genome = golden_genome.clone()
        genome.score = {'mean_squared_error': error, 'size': size,
                        'fitness': error}
        genome.dirty = False
        return genome
    return scored
