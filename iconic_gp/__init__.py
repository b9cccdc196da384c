from .primitives import Primitive, primitive_lib, get_primitive, \
                        get_primitives, max_arity
from .gene import Gene
from .genome import Genome, GenomeFactory
from .graph import GraphGenome, GraphGenomeFactory, node_to_index
from .linear import LinearGenome, LinearGenomeFactory, tail_length
from .operators import CartesianSingleActiveMutator, ExpressionMutator, \
                       SimpleExpressionCrossover, SequentialSelector, \
                       RandomUniformSelector
from .dataset import Dataset
from .objective import Objective, ErrorFunction, MeanSquaredError, \
                       ErrorBasedObjective, DefaultObjective, SizeObjective, \
                       MultiObjective, DefaultMultiObjective, \
                       SimpleMultiObjective, CacheableObjective
from .algorithm import EvolutionaryAlgorithm, \
                       MultiObjectiveEvolutionaryAlgorithm
from .seamo import SEAMO, ElitistSEAMO
from .gsemo import GSEMO
from .single import CartesianGeneticProgramming, GeneExpressionProgramming
from .deme import Deme, run_demes
from .regressor import SymbolicRegressor

__version__ = "1.0.0"
