import argparse
import sys
from pathlib import Path
from typing import *

from loguru import logger

import utilities
from diversity import alphadiversity, bootstrap
from diversity.workflow import DEFAULT_COVARIATES, DEFAULT_ORDERS, LOG_COVARIATES, DiversityAnalysis
from validation import ValidateTables


def get_run_label() -> str:
	""" Generates the name of an output folder based on the current date and time."""
	import datetime
	current_date = datetime.datetime.now()
	date = str(current_date.date())
	time = current_date.time()
	time_string = f"{time.hour}_{time.minute}_{time.second}"

	label = date + 'T' + time_string
	return label


def parse_order(value: str) -> Tuple[str, str]:
	""" Parses a 'GROUP:METRIC' commandline value."""
	try:
		group, metric = value.split(':')
	except ValueError:
		message = f"Expected a value formatted as GROUP:METRIC, got '{value}'"
		raise argparse.ArgumentTypeError(message)
	if metric not in alphadiversity.METRICS:
		message = f"Unknown metric '{metric}'. Expected one of {alphadiversity.METRICS}"
		raise argparse.ArgumentTypeError(message)
	return group, metric


def create_parser(args: List[str] = None) -> argparse.Namespace:
	parser = argparse.ArgumentParser(
		description = "Estimates the richness and Simpson's evenness of taxon groups by repeated rarefaction and tests them against environmental covariates."
	)

	parser.add_argument(
		"counts",
		help = "The community table. The first column holds the taxon ids, every other column is a sample.",
		type = Path
	)
	parser.add_argument(
		"lineage",
		help = "The taxonomy of each taxon. The first column holds the taxon ids, followed by the ranks (Kingdom, Phylum, Class, ...)",
		type = Path
	)
	parser.add_argument(
		"metadata",
		help = "The sample metadata. The first column holds the sample ids, followed by the environmental covariates.",
		type = Path
	)
	parser.add_argument(
		"--output",
		help = "The folder to save all of the output files. If not given, an output folder will be generated next to the community table.",
		type = Path,
		default = None
	)
	parser.add_argument(
		"--trials",
		help = "The number of rarefaction trials.",
		type = int,
		default = bootstrap.DEFAULT_TRIALS
	)
	parser.add_argument(
		"--seed",
		help = "Seeds the random number generator shared by every trial.",
		type = int,
		default = bootstrap.DEFAULT_SEED
	)
	parser.add_argument(
		"--depth",
		help = "The number of reads to draw from each sample. Defaults to the smallest sample total.",
		type = int,
		default = None
	)
	parser.add_argument(
		"--metrics",
		help = "Comma-separated list of the metrics to test.",
		type = str,
		default = ",".join(alphadiversity.METRICS)
	)
	parser.add_argument(
		"--covariates",
		help = "Comma-separated list of the covariates to test. Log-transformed covariates are prefixed with 'log_'.",
		type = str,
		default = ",".join(DEFAULT_COVARIATES)
	)
	parser.add_argument(
		"--log-covariates",
		help = "Comma-separated list of the metadata columns to log-transform.",
		type = str,
		default = ",".join(LOG_COVARIATES),
		dest = "logcovariates"
	)
	parser.add_argument(
		"--quadratic",
		help = "Fits a quadratic model for the given GROUP:METRIC pair. Can be used more than once. Overrides the default pairs.",
		type = parse_order,
		action = "append",
		default = None
	)
	parser.add_argument(
		"--save-trials",
		help = "Also saves the value of every metric for every trial.",
		action = "store_true",
		dest = "savetrials"
	)
	parser.add_argument(
		"--progress",
		help = "Shows a progress bar while running the trials.",
		action = "store_true"
	)
	parser.add_argument(
		"--verbose",
		help = "Logs every message, including the trace messages for each trial.",
		action = "store_true"
	)

	if args:
		args = parser.parse_args(args)
	else:
		args = parser.parse_args()
	args.metrics = utilities.parse_list(args.metrics)
	args.covariates = utilities.parse_list(args.covariates)
	args.logcovariates = utilities.parse_list(args.logcovariates)
	if args.quadratic is None:
		args.orders = dict(DEFAULT_ORDERS)
	else:
		args.orders = {key: 2 for key in args.quadratic}
	if args.output is None:
		args.output = args.counts.parent / f"diversity.{get_run_label()}"
	return args


def main(args: List[str] = None):
	args = create_parser(args)
	if args.verbose:
		logger.remove()  # Need to remove the default sink so that the logger doesn't print messages twice.
		logger.add(sys.stderr, level = "TRACE")

	analysis = DiversityAnalysis(
		trials = args.trials,
		seed = args.seed,
		depth = args.depth,
		metrics = args.metrics,
		covariates = args.covariates,
		log_covariates = args.logcovariates,
		orders = args.orders,
		progress = args.progress
	)

	validator = ValidateTables(analysis.groups)
	table = validator.check_counts(args.counts)
	lineage = validator.check_lineage(args.lineage, table)
	# Log-transformed covariates are generated from the raw metadata columns.
	required = args.logcovariates + [i for i in args.covariates if not i.startswith(utilities.LOG_PREFIX)]
	metadata = validator.check_metadata(args.metadata, table, required)

	analysis.run(table, lineage, metadata, project_folder = args.output, save_trials = args.savetrials)


if __name__ == "__main__":
	main()
