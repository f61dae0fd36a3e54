from pathlib import Path
from typing import *

import numpy
import pandas
from loguru import logger

LOG_PREFIX = 'log_'


def checkdir(path: Union[str, Path]) -> Path:
	path = Path(path)
	if not path.exists():
		path.mkdir(parents = True)
	return path


def parse_list(value: Optional[str]) -> Optional[List[str]]:
	""" Splits a comma-separated commandline value."""
	if value is None:
		return None
	return [i.strip() for i in value.split(',') if i.strip()]


def log_transform(metadata: pandas.DataFrame, columns: List[str]) -> pandas.DataFrame:
	"""
		Adds a log10-transformed copy of each column in `columns`, named `log_{column}`.
		Non-positive values can't be log-transformed and are treated as missing.
	"""
	table = metadata.copy()
	for column in columns:
		values = pandas.to_numeric(table[column], errors = 'coerce')
		nonpositive = values <= 0
		if nonpositive.any():
			logger.warning(f"{nonpositive.sum()} values of '{column}' are not positive and will be missing after the log transform.")
		table[LOG_PREFIX + column] = numpy.log10(values.where(~nonpositive))
	return table


def join_sample_metadata(estimates: pandas.DataFrame, metadata: pandas.DataFrame) -> pandas.DataFrame:
	"""
		Pairs the diversity estimates for each sample with the metadata for that sample.
		Both tables must be indexed by sample and describe exactly the same samples.
	"""
	if metadata.index.duplicated().any():
		duplicates = metadata.index[metadata.index.duplicated()].unique().tolist()
		message = f"The sample metadata has duplicate sample ids: {duplicates}"
		raise ValueError(message)
	missing_metadata = estimates.index.difference(metadata.index)
	missing_samples = metadata.index.difference(estimates.index)
	if len(missing_metadata) > 0 or len(missing_samples) > 0:
		message = f"The samples do not match the sample metadata. Without metadata: {missing_metadata.tolist()}; without counts: {missing_samples.tolist()}"
		raise ValueError(message)

	overlap = estimates.columns.intersection(metadata.columns)
	if len(overlap) > 0:
		message = f"The metadata columns {overlap.tolist()} have the same names as taxon groups."
		raise ValueError(message)
	return estimates.merge(metadata, left_index = True, right_index = True, how = 'left')
