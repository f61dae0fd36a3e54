import json
from pathlib import Path
from typing import *

import pandas
from loguru import logger

from association import display
from association.regression import RegressionSummary
from diversity.alphadiversity import METRICS
from diversity.bootstrap import DiversityEstimate, TrialStack
from projectpaths import Filenames


def save_estimates(estimate: DiversityEstimate, filenames: Filenames):
	estimate.table().to_csv(filenames.filename_table_estimates, sep = "\t", index = False)
	for metric in METRICS:
		estimate.wide(metric).to_csv(filenames.filename_table_metric(metric), sep = "\t")


def save_trials(stack: TrialStack, filename: Path):
	stack.table().to_csv(filename, sep = "\t", index = False)


def save_associations(results: pandas.DataFrame, filename: Path, filename_display: Path):
	results.to_csv(filename, sep = "\t", index = False)
	display.format_results(results).to_csv(filename_display, sep = "\t", index = False)


def save_regression(regression: RegressionSummary, filename: Path):
	filename.write_text(str(regression.model.summary()))


def save_regressions(models: Dict[Tuple[str, str, str], RegressionSummary], filenames: Filenames):
	logger.debug(f"Saving {len(models)} regression summaries to {filenames.folder_regression}")
	for (group, metric, covariate), regression in models.items():
		save_regression(regression, filenames.filename_regression(group, metric, covariate))


def save_parameters(parameters: Dict[str, Any], filename: Path):
	filename.write_text(json.dumps(parameters, indent = 4, sort_keys = True))
