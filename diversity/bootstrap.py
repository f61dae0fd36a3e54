from typing import *

import numpy
import pandas
from loguru import logger
from tqdm import tqdm

from diversity import alphadiversity, rarefaction, taxongroups
from diversity.alphadiversity import RICHNESS, SIMPSON
from diversity.taxongroups import TaxonGroup

DEFAULT_TRIALS = 100
DEFAULT_SEED = 3


def reduce_trials(values: numpy.ndarray) -> numpy.ndarray:
	"""
		Averages over the first (trial) axis while ignoring missing values.
		Cells which are missing in every trial stay missing.
	"""
	values = numpy.asarray(values, dtype = float)
	present = ~numpy.isnan(values)
	counts = present.sum(axis = 0)
	totals = numpy.where(present, values, 0.0).sum(axis = 0)
	means = numpy.full(counts.shape, numpy.nan)
	numpy.divide(totals, counts, out = means, where = counts > 0)
	return means


class DiversityEstimate:
	""" The per-sample mean of each diversity metric for each taxon group."""

	def __init__(self, richness: numpy.ndarray, evenness: numpy.ndarray, groups: List[str], samples: List[str]):
		# Both arrays are indexed as [group, sample]
		self.richness = richness
		self.evenness = evenness
		self.groups = list(groups)
		self.samples = list(samples)

	def values(self, metric: str) -> numpy.ndarray:
		if metric == RICHNESS:
			return self.richness
		elif metric == SIMPSON:
			return self.evenness
		else:
			message = f"Unknown diversity metric '{metric}'. Expected one of {alphadiversity.METRICS}"
			raise ValueError(message)

	def wide(self, metric: str) -> pandas.DataFrame:
		""" A table indexed by sample with one column per taxon group."""
		table = pandas.DataFrame(self.values(metric).T, index = self.samples, columns = self.groups)
		table.index.name = 'sample'
		return table

	def table(self) -> pandas.DataFrame:
		""" Long-form table with columns `sample`, `group`, `metric`, `value`."""
		tables = list()
		for metric in alphadiversity.METRICS:
			table = self.wide(metric).reset_index().melt(id_vars = 'sample', var_name = 'group', value_name = 'value')
			table['metric'] = metric
			tables.append(table)
		return pandas.concat(tables, ignore_index = True)[['sample', 'group', 'metric', 'value']]


class TrialStack:
	""" Holds the diversity metrics calculated for every trial. Arrays are indexed as [trial, group, sample]."""

	def __init__(self, trials: int, groups: List[str], samples: List[str]):
		self.groups = list(groups)
		self.samples = list(samples)
		shape = (trials, len(self.groups), len(self.samples))
		self.richness = numpy.zeros(shape, dtype = int)
		self.evenness = numpy.full(shape, numpy.nan)

	def record(self, trial: int, group_index: int, richness: numpy.ndarray, evenness: numpy.ndarray):
		self.richness[trial, group_index] = richness
		self.evenness[trial, group_index] = evenness

	def reduce(self) -> DiversityEstimate:
		return DiversityEstimate(
			richness = reduce_trials(self.richness),
			evenness = reduce_trials(self.evenness),
			groups = self.groups,
			samples = self.samples
		)

	def table(self) -> pandas.DataFrame:
		""" Long-form table of every trial value. Mostly useful for checking the spread of the estimates."""
		trials, groups, samples = self.richness.shape
		index = pandas.MultiIndex.from_product([range(trials), self.groups, self.samples], names = ['trial', 'group', 'sample'])
		table = pandas.DataFrame(
			{
				RICHNESS: self.richness.reshape(-1),
				SIMPSON:  self.evenness.reshape(-1)
			},
			index = index
		)
		return table.reset_index()


class BootstrapDiversity:
	"""
		Estimates the richness and Simpson's evenness of each taxon group by repeatedly rarefying the community table.
	Parameters
	----------
	groups: List[TaxonGroup]
		The taxon groups to evaluate. Fixed for the lifetime of the object.
	trials: int
		The number of rarefaction trials.
	seed: int
		Seeds a single random generator which is consumed by all trials, in order.
	depth: Optional[int]
		The number of reads to draw per sample. Defaults to the smallest sample total.
	"""

	def __init__(self, groups: List[TaxonGroup] = None, trials: int = DEFAULT_TRIALS, seed: Optional[int] = DEFAULT_SEED,
			depth: Optional[int] = None, progress: bool = False):
		if groups is None:
			groups = taxongroups.DEFAULT_GROUPS
		if trials < 1:
			message = f"The number of trials must be positive, got {trials}"
			raise ValueError(message)
		if depth is not None and depth < 1:
			message = f"The rarefaction depth must be positive, got {depth}"
			raise ValueError(message)
		self.groups = list(groups)
		self.trials = trials
		self.seed = seed
		self.depth = depth
		self.progress = progress

	def get_depth(self, table: pandas.DataFrame) -> int:
		if self.depth is not None:
			return self.depth
		return rarefaction.minimum_depth(table)

	def run_trials(self, table: pandas.DataFrame, lineage: pandas.DataFrame) -> TrialStack:
		"""
			Runs every trial and returns the value of each metric for every trial, group, and sample.
		Parameters
		----------
		table: pandas.DataFrame
			The community table. Rows are taxa, columns are samples.
		lineage: pandas.DataFrame
			The taxonomic lineage of each taxon, indexed by taxon.
		"""
		missing = table.index.difference(lineage.index)
		if len(missing) > 0:
			message = f"{len(missing)} taxa in the community table do not have a lineage (ex. {list(missing[:5])})"
			raise ValueError(message)
		lineage = lineage.loc[table.index]
		# Configuration problems should surface before any resampling is done.
		masks = taxongroups.group_masks(self.groups, lineage)
		proportions = rarefaction.sample_proportions(table.values.T)
		depth = self.get_depth(table)
		if depth < 1:
			message = f"The rarefaction depth must be positive, got {depth}"
			raise ValueError(message)

		group_names = [group.name for group in self.groups]
		samples = list(table.columns)
		stack = TrialStack(self.trials, group_names, samples)

		logger.info(f"Rarefying {len(samples)} samples to {depth} reads over {self.trials} trials (seed = {self.seed})")
		rng = numpy.random.default_rng(self.seed)
		for trial in tqdm(range(self.trials), total = self.trials, disable = not self.progress):
			rarefied = rarefaction.rarefy_table(proportions, depth, rng)
			for group_index, mask in enumerate(masks):
				richness, evenness = alphadiversity.calculate_alpha_diversity(rarefied[:, mask])
				stack.record(trial, group_index, richness, evenness)
			logger.trace(f"Finished trial {trial}")
		return stack

	def run(self, table: pandas.DataFrame, lineage: pandas.DataFrame) -> DiversityEstimate:
		return self.run_trials(table, lineage).reduce()


def estimate_diversity(table: pandas.DataFrame, lineage: pandas.DataFrame, groups: List[TaxonGroup] = None,
		trials: int = DEFAULT_TRIALS, seed: Optional[int] = DEFAULT_SEED, depth: Optional[int] = None) -> DiversityEstimate:
	""" Convenience wrapper around `BootstrapDiversity`."""
	estimator = BootstrapDiversity(groups, trials = trials, seed = seed, depth = depth)
	return estimator.run(table, lineage)
