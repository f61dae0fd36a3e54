from pathlib import Path
from typing import *

import numpy
import pandas
from loguru import logger

from diversity import taxongroups
from diversity.taxongroups import TaxonGroup


class ValidateTables:
	# makes sure the input tables are formatted correctly.
	def __init__(self, groups: List[TaxonGroup] = None):
		self.groups = groups if groups is not None else taxongroups.DEFAULT_GROUPS
		# Samples with fewer reads than this are reported, since they will set a very low rarefaction depth.
		self.minimum_reads = 1000

	@staticmethod
	def read_table(filename: Union[str, Path]) -> pandas.DataFrame:
		""" Reads a table and uses the first column as the index."""
		filename = Path(filename)
		if filename.suffix == '.csv':
			table = pandas.read_csv(filename, index_col = 0)
		elif filename.suffix in {'.tsv', '.txt'}:
			table = pandas.read_csv(filename, sep = '\t', index_col = 0)
		elif filename.suffix == '.xlsx' or filename.suffix == '.xls':
			table = pandas.read_excel(filename, index_col = 0)
		else:
			message = f"Cannot determine the filetype of '{filename}'"
			raise ValueError(message)
		table.index = table.index.astype(str)
		return table

	def _load(self, table: Union[Path, pandas.DataFrame]) -> pandas.DataFrame:
		if not isinstance(table, pandas.DataFrame):
			# Assume it is a Pathlike object
			table = self.read_table(table)
		return table

	def check_counts(self, table: Union[Path, pandas.DataFrame]) -> pandas.DataFrame:
		""" The community table should only contain non-negative whole numbers. Rows are taxa, columns are samples."""
		table = self._load(table)
		numeric = table.apply(pandas.to_numeric, errors = 'coerce')
		if numeric.isna().values.any():
			bad_columns = numeric.columns[numeric.isna().any()].tolist()
			message = f"The community table has missing or non-numeric counts in {bad_columns}"
			raise ValueError(message)
		if (numeric.values < 0).any():
			message = "The community table has negative counts."
			raise ValueError(message)
		if not numpy.allclose(numeric.values, numpy.round(numeric.values)):
			message = "The community table should only contain whole-number read counts."
			raise ValueError(message)
		if table.index.duplicated().any():
			message = f"The community table has duplicate taxa: {table.index[table.index.duplicated()].unique().tolist()}"
			raise ValueError(message)
		numeric = numeric.round().astype(int)

		totals = numeric.sum(axis = 0)
		empty = totals[totals == 0].index.tolist()
		if empty:
			message = f"The samples {empty} do not have any reads."
			raise ValueError(message)
		for sample, total in totals[totals < self.minimum_reads].items():
			logger.warning(f"The sample '{sample}' only has {total} reads ({total} < {self.minimum_reads})")
		return numeric

	def check_lineage(self, lineage: Union[Path, pandas.DataFrame], table: pandas.DataFrame) -> pandas.DataFrame:
		""" Every taxon needs a lineage, and the lineage needs every rank referenced by the taxon groups."""
		lineage = self._load(lineage)
		missing = table.index.difference(lineage.index)
		if len(missing) > 0:
			message = f"{len(missing)} taxa are missing from the lineage table (ex. {missing[:5].tolist()})"
			raise ValueError(message)
		lineage = lineage.loc[~lineage.index.duplicated()]
		taxongroups.validate_groups(self.groups, lineage)
		return lineage.loc[table.index]

	@staticmethod
	def check_metadata(metadata: Union[Path, pandas.DataFrame], table: pandas.DataFrame, covariates: List[str]) -> pandas.DataFrame:
		""" The metadata needs exactly one row for every sample in the community table, and every requested covariate."""
		if not isinstance(metadata, pandas.DataFrame):
			metadata = ValidateTables.read_table(metadata)
		missing_columns = [i for i in covariates if i not in metadata.columns]
		if missing_columns:
			message = f"The sample metadata is missing the covariates {missing_columns}. Available columns: {list(metadata.columns)}"
			raise ValueError(message)
		if metadata.index.duplicated().any():
			message = f"The sample metadata has duplicate sample ids: {metadata.index[metadata.index.duplicated()].unique().tolist()}"
			raise ValueError(message)
		missing_samples = [i for i in table.columns if i not in metadata.index]
		if missing_samples:
			message = f"The samples {missing_samples} are not in the sample metadata."
			raise ValueError(message)
		extra = metadata.index.difference(table.columns)
		if len(extra) > 0:
			logger.info(f"Ignoring {len(extra)} metadata rows without counts: {extra.tolist()}")
		return metadata.loc[list(table.columns)]
