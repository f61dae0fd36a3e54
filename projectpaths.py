from pathlib import Path
from typing import *

import utilities


class Filenames:
	""" Holds the filenames for the output tables.

		Output File Stucture
		{folder}/
			data/
				diversity.estimates.tsv
				diversity.{metric}.tsv
				diversity.trials.tsv
				associations.tsv
				associations.display.tsv
				parameters.json
				regression/
					regression.{group}.{metric}.{covariate}.txt
	"""

	def __init__(self, folder: Path):
		self.table_format = '.tsv'
		folder = utilities.checkdir(folder)
		self.folder_data = utilities.checkdir(folder / "data")

		# Tables
		"""
			The estimates table has the mean of each metric over all trials.
			Columns:
			- `sample`: str
			- `group`: str
			- `metric`: {'Richness', 'Simpson'}
			- `value`: float (missing when the metric was never defined for the sample)
		"""
		self.filename_table_estimates = self.folder_data / ("diversity.estimates" + self.table_format)
		# Every trial value. Only saved when requested since it is `trials` times larger than the estimates table.
		self.filename_table_trials = self.folder_data / ("diversity.trials" + self.table_format)

		"""
			The association table has one row for each group, metric, and covariate.
			Columns:
			- `group`, `metric`, `covariate`: str
			- `order`: int (1 for the linear model)
			- `nobs`: int
			- `pvalue`, `pvalue_adjusted`: float (the adjusted value is corrected within each metric/covariate batch)
			- `rsquared`, `rsquared_adj`: float
			- `status`: {'ok', 'insufficient_data'}
		"""
		self.filename_table_associations = self.folder_data / ("associations" + self.table_format)
		# Same as the association table, rounded for presentation.
		self.filename_table_associations_display = self.folder_data / ("associations.display" + self.table_format)
		self.filename_parameters = self.folder_data / "parameters.json"

		# Summaries of each fitted regression model.
		self.folder_regression = utilities.checkdir(self.folder_data / "regression")

	def filename_table_metric(self, metric: str) -> Path:
		""" The wide (sample x group) table for a single metric."""
		return self.folder_data / (f"diversity.{metric}" + self.table_format)

	def filename_regression(self, group: str, metric: str, covariate: str) -> Path:
		return self.folder_regression / f"regression.{group}.{metric}.{covariate}.txt"
