from pathlib import Path
from typing import *

import pandas
from loguru import logger

import projectoutput
import utilities
from association import tester
from association.regression import RegressionSummary
from diversity import alphadiversity, bootstrap, taxongroups
from diversity.alphadiversity import SIMPSON
from diversity.bootstrap import BootstrapDiversity, DiversityEstimate
from diversity.taxongroups import TaxonGroup
from projectpaths import Filenames

LOG_COVARIATES = ['Chla', 'Phycocyanin', 'TP', 'Turbidity']
DEFAULT_COVARIATES = ['log_Chla', 'pH', 'log_Phycocyanin', 'log_TP', 'log_Turbidity']
# (group, metric) pairs fit with a quadratic rather than a linear model.
DEFAULT_ORDERS: Dict[Tuple[str, str], int] = {('Alphaproteobacteria', SIMPSON): 2}


class DiversityAnalysis:
	def __init__(self, groups: List[TaxonGroup] = None, trials: int = bootstrap.DEFAULT_TRIALS, seed: Optional[int] = bootstrap.DEFAULT_SEED,
			depth: Optional[int] = None, metrics: List[str] = None, covariates: List[str] = None, log_covariates: List[str] = None,
			orders: Dict[Tuple[str, str], int] = None, progress: bool = False):
		self.groups = groups if groups is not None else taxongroups.DEFAULT_GROUPS
		self.metrics = metrics if metrics is not None else alphadiversity.METRICS
		self.covariates = covariates if covariates is not None else DEFAULT_COVARIATES
		self.log_covariates = log_covariates if log_covariates is not None else LOG_COVARIATES
		self.orders = orders if orders is not None else DEFAULT_ORDERS

		unknown = [i for i in self.metrics if i not in alphadiversity.METRICS]
		if unknown:
			message = f"Unknown diversity metrics {unknown}. Expected one of {alphadiversity.METRICS}"
			raise ValueError(message)

		self.estimator = BootstrapDiversity(self.groups, trials = trials, seed = seed, depth = depth, progress = progress)

	@property
	def group_names(self) -> List[str]:
		return [group.name for group in self.groups]

	def prepare_metadata(self, metadata: pandas.DataFrame) -> pandas.DataFrame:
		""" Adds the log-transformed covariates and checks that every requested covariate is available."""
		metadata = utilities.log_transform(metadata, [i for i in self.log_covariates if i in metadata.columns])
		missing = [i for i in self.covariates if i not in metadata.columns]
		if missing:
			message = f"The covariates {missing} are not available. Available columns: {list(metadata.columns)}"
			raise ValueError(message)
		return metadata

	def join(self, estimate: DiversityEstimate, metadata: pandas.DataFrame) -> Dict[str, pandas.DataFrame]:
		""" Pairs the estimates for each metric with the sample metadata."""
		return {metric: utilities.join_sample_metadata(estimate.wide(metric), metadata) for metric in self.metrics}

	def associate(self, estimate: DiversityEstimate, metadata: pandas.DataFrame) -> Tuple[pandas.DataFrame, Dict[Tuple[str, str, str], RegressionSummary]]:
		metadata = self.prepare_metadata(metadata)
		joined_tables = self.join(estimate, metadata)
		return tester.associate_all(joined_tables, self.group_names, self.covariates, orders = self.orders)

	def parameters(self, depth: int) -> Dict[str, Any]:
		return {
			'depth':      depth,
			'trials':     self.estimator.trials,
			'seed':       self.estimator.seed,
			'groups':     {group.name: repr(group.filter) for group in self.groups},
			'metrics':    self.metrics,
			'covariates': self.covariates,
			'orders':     [{'group': group, 'metric': metric, 'order': order} for (group, metric), order in sorted(self.orders.items())]
		}

	def run(self, table: pandas.DataFrame, lineage: pandas.DataFrame, metadata: pandas.DataFrame, project_folder: Path = None,
			save_trials: bool = False) -> Tuple[DiversityEstimate, pandas.DataFrame]:
		"""
			Estimates the diversity of each group, then tests each estimate against the environmental covariates.
		Parameters
		----------
		table: pandas.DataFrame
			The community table. Rows are taxa, columns are samples.
		lineage: pandas.DataFrame
			Indexed by taxon. Should include every rank used by the taxon groups.
		metadata: pandas.DataFrame
			Indexed by sample.
		project_folder: Path
			Where to save the output tables. Nothing is saved if this is not given.
		"""
		logger.info("Estimating diversity...")
		stack = self.estimator.run_trials(table, lineage)
		estimate = stack.reduce()

		logger.info("Testing associations...")
		results, models = self.associate(estimate, metadata)

		if project_folder is not None:
			logger.info(f"Saving tables to {project_folder}...")
			filenames = Filenames(project_folder)
			projectoutput.save_estimates(estimate, filenames)
			if save_trials:
				projectoutput.save_trials(stack, filenames.filename_table_trials)
			projectoutput.save_associations(results, filenames.filename_table_associations, filenames.filename_table_associations_display)
			projectoutput.save_regressions(models, filenames)
			projectoutput.save_parameters(self.parameters(self.estimator.get_depth(table)), filenames.filename_parameters)

		return estimate, results
