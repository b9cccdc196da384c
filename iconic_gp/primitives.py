"""
Primitive Library

Genomes in Iconic (graph and linear) are built from a pool of fixed-arity
functions. Each function gene of a genome stores an index into that pool, so
the pool is shared by the factory, the genomes it builds and the mutators.

This module includes:
  - Primitive (dataclass): label, arity and numpy implementation
  - primitive_lib (list): Primitive objects for all supported functions
  - get_primitive (func): return the Primitive for a label (e.g. '*')
  - get_primitives (func): return a pool of Primitives from a list of labels
  - max_arity (func): the largest arity in a pool
"""


from dataclasses import dataclass
from typing import List
import numpy as np

@dataclass
class Primitive:
    """Include all attributes required for a function gene"""
    label: str                # The string representation used in expression
    arity: int                # Number of arguments
    numpy_func: callable      # Vectorised implementation
    description: str = ''
    infix: bool = False       # Render as '(a)+(b)' rather than '+((a),(b))'

    def __repr__(self):
        return f'<Primitive label={self.label!r} arity={self.arity}>'

    def __call__(self, *args):
        return self.numpy_func(*args)

    def format(self, args, ws=''):
        """Return the expression of this primitive applied to args"""
        if self.infix and len(args) == 2:
            return f'{args[0]}{ws}{self.label}{ws}{args[1]}'
        sep = f',{ws}'
        return f'{self.label}({sep.join(args)})'

# Custom Function definitions to avoid nan/inf values:
def np_protected_divide(a: np.ndarray, b: np.ndarray):
    """If the denominator is within 0.001 of 0, return 1"""
    a, b = np.broadcast_arrays(np.asarray(a, dtype=np.float64),
                               np.asarray(b, dtype=np.float64))
    small = np.abs(b) < 0.001
    c = np.ones(a.shape)
    c[~small] = a[~small] / b[~small]
    return c

def np_safe_sqrt(a: np.ndarray):
    """For sqrt(-a), return -sqrt(abs(a))"""
    a = np.asarray(a, dtype=np.float64)
    negative = np.less(a, 0)
    square_root = np.sqrt(np.abs(a))
    square_root[negative] *= -1
    return square_root

# Function definitions. Labels follow sympy's names so that expressions can be
# simplified for display.
primitive_lib = [
    # Arithmetic
    Primitive('+', 2, np.add, 'Addition', infix=True),
    Primitive('-', 2, np.subtract, 'Subtraction', infix=True),
    Primitive('*', 2, np.multiply, 'Multiplication', infix=True),
    Primitive('/', 2, np_protected_divide, 'Protected division', infix=True),
    Primitive('**', 2, np.float_power, 'Power', infix=True),
    Primitive('Max', 2, np.maximum, 'Maximum'),
    Primitive('Min', 2, np.minimum, 'Minimum'),
    Primitive('neg', 1, np.negative, 'Negation'),
    # Math
    Primitive('abs', 1, np.abs, 'Absolute value'),
    Primitive('square', 1, np.square, 'Square'),
    Primitive('sqrt', 1, np_safe_sqrt, 'Signed square root'),
    Primitive('exp', 1, np.exp, 'Exponential'),
    Primitive('log', 1, np.log, 'Natural logarithm'),
    Primitive('sin', 1, np.sin, 'Sine'),
    Primitive('cos', 1, np.cos, 'Cosine'),
    Primitive('tan', 1, np.tan, 'Tangent'),
    Primitive('tanh', 1, np.tanh, 'Hyperbolic tangent'),
]

def get_primitive(label: str) -> Primitive:
    """Return the Primitive for a function label"""
    for primitive in primitive_lib:
        if primitive.label == label:
            return primitive
    raise ValueError(f'Primitive not found for label: {label}')

def get_primitives(labels: List[str]=None) -> List[Primitive]:
    """Return a pool of Primitives; the arithmetic set by default"""
    labels = ['+', '-', '*', '/'] if labels is None else labels
    return [get_primitive(label) for label in labels]

def max_arity(primitives: List[Primitive]) -> int:
    """Return the largest arity of a pool of primitives"""
    if not primitives:
        raise ValueError('The primitive pool must not be empty')
    return max(p.arity for p in primitives)
