"""
Demes

A Deme owns one algorithm and its population and runs it generation by
generation. Stopping is cooperative: `stop()` sets a flag which `run()` checks
before each generation, so a generation in progress always completes.
Demes share no genomes or caches and may run on separate threads.
"""

import math
import threading
from concurrent.futures import ThreadPoolExecutor


class Deme:

    def __init__(self, algorithm, population_size=100, name=None):
        if population_size < 1:
            raise ValueError(f'population_size must be positive, got '
                             f'{population_size}')
        self.algorithm = algorithm
        self.population_size = population_size
        self.name = name or 'deme'
        self.gen_id = 0
        self.history = []
        self._stop = threading.Event()

    def __repr__(self):
        return (f'<Deme {self.name}: generation {self.gen_id}, '
                f'{len(self.algorithm.population)} genomes>')

    def log(self, msg, display={'i', 'g', 'm', 'db'}):
        self.algorithm.log(msg, display)

    def stop(self):
        """Request the run to end after the current generation"""
        self.log(f'Stop requested for {self.name}', display=['i', 'g', 'db'])
        self._stop.set()

    @property
    def stopped(self):
        return self._stop.is_set()

    def run(self, gen_max):
        """Evolve for up to gen_max generations; return the population"""
        algorithm = self.algorithm
        if not algorithm.population:
            algorithm.initialise_population(self.population_size)
            self.log_history()
        for _ in range(gen_max):
            if self._stop.is_set():
                break
            algorithm.step()
            self.gen_id += 1
            self.log_history()
        self._stop.clear()
        return algorithm.population

    def log_history(self):
        """Add the population size and best value of each goal to history"""
        algorithm = self.algorithm
        population = algorithm.population
        record = dict(generation=self.gen_id, population=len(population))
        goals = getattr(algorithm, 'goals', [algorithm.objective])
        for goal in goals:
            values = [c.score.get(goal.label, math.nan) for c in population]
            values = [v for v in values if not math.isnan(v)]
            record[goal.label] = min(values) if values else math.nan
        self.history.append(record)
        summary = ', '.join(f'{k}: {v}' for k, v in record.items())
        self.log(f'{self.name} {summary}', display=['i', 'g'])


def run_demes(demes, gen_max, max_workers=None):
    """Run independent demes, one per worker thread; return populations"""
    with ThreadPoolExecutor(max_workers=max_workers or len(demes)) as pool:
        futures = [pool.submit(deme.run, gen_max) for deme in demes]
        return [f.result() for f in futures]
