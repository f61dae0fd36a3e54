import argparse
import json
from pathlib import Path

import numpy
import pandas
import pytest

import rundiversity
from association import tester
from diversity.alphadiversity import RICHNESS, SIMPSON
from diversity.workflow import DEFAULT_COVARIATES, DiversityAnalysis
from projectpaths import Filenames
from constants import SAMPLES, generate_count_table, generate_lineage_table, generate_metadata_table


@pytest.fixture
def table() -> pandas.DataFrame:
	return generate_count_table()


@pytest.fixture
def lineage() -> pandas.DataFrame:
	return generate_lineage_table()


@pytest.fixture
def metadata() -> pandas.DataFrame:
	return generate_metadata_table()


@pytest.fixture
def analysis() -> DiversityAnalysis:
	return DiversityAnalysis(trials = 5, seed = 3)


def test_prepare_metadata(analysis, metadata):
	result = analysis.prepare_metadata(metadata)
	for covariate in DEFAULT_COVARIATES:
		assert covariate in result.columns
	assert result['log_TP'].tolist() == pytest.approx(numpy.log10(metadata['TP']).tolist())


def test_prepare_metadata_with_a_missing_covariate(analysis, metadata):
	with pytest.raises(ValueError, match = "Turbidity"):
		analysis.prepare_metadata(metadata.drop(columns = ['Turbidity']))


def test_unknown_metric():
	with pytest.raises(ValueError):
		DiversityAnalysis(metrics = ['Shannon'])


def test_run_without_saving(analysis, table, lineage, metadata):
	estimate, results = analysis.run(table, lineage, metadata)

	assert estimate.samples == SAMPLES
	assert len(results) == 2 * len(DEFAULT_COVARIATES) * 9
	assert set(results['status']) == {tester.STATUS_OK}

	quadratic = results[(results['group'] == 'Alphaproteobacteria') & (results['metric'] == SIMPSON)]
	assert quadratic['order'].tolist() == [2] * len(DEFAULT_COVARIATES)
	assert (results[results['metric'] == RICHNESS]['order'] == 1).all()


def test_run_saves_the_tables(tmp_path, analysis, table, lineage, metadata):
	folder = tmp_path / "output"
	estimate, results = analysis.run(table, lineage, metadata, project_folder = folder, save_trials = True)
	filenames = Filenames(folder)

	estimates_table = pandas.read_csv(filenames.filename_table_estimates, sep = "\t")
	assert len(estimates_table) == 2 * 9 * len(SAMPLES)

	richness_table = pandas.read_csv(filenames.filename_table_metric(RICHNESS), sep = "\t", index_col = 0)
	assert list(richness_table.index) == SAMPLES

	trials_table = pandas.read_csv(filenames.filename_table_trials, sep = "\t")
	assert trials_table['trial'].nunique() == 5

	associations = pandas.read_csv(filenames.filename_table_associations, sep = "\t")
	assert len(associations) == len(results)
	display_table = pandas.read_csv(filenames.filename_table_associations_display, sep = "\t", dtype = str)
	assert 'p' in display_table.columns

	assert len(list(filenames.folder_regression.glob("regression.*.txt"))) == len(results)
	assert filenames.filename_regression('Bacteria', RICHNESS, 'pH').exists()

	parameters = json.loads(filenames.filename_parameters.read_text())
	assert parameters['trials'] == 5
	assert parameters['seed'] == 3
	assert parameters['depth'] == int(table.sum().min())
	assert parameters['orders'] == [{'group': 'Alphaproteobacteria', 'metric': SIMPSON, 'order': 2}]


def test_create_parser_defaults(tmp_path):
	args = rundiversity.create_parser(['counts.tsv', 'lineage.tsv', 'metadata.tsv', '--output', str(tmp_path)])

	assert args.counts == Path('counts.tsv')
	assert args.output == tmp_path
	assert args.trials == 100
	assert args.seed == 3
	assert args.depth is None
	assert args.metrics == [RICHNESS, SIMPSON]
	assert args.covariates == DEFAULT_COVARIATES
	assert args.orders == {('Alphaproteobacteria', SIMPSON): 2}


def test_create_parser_options():
	args = rundiversity.create_parser([
		'counts.tsv', 'lineage.tsv', 'metadata.tsv',
		'--trials', '10',
		'--depth', '500',
		'--covariates', 'pH,log_TP',
		'--quadratic', 'Bacteria:Richness',
		'--quadratic', 'Cyanobacteria:Simpson',
		'--save-trials'
	])
	assert args.trials == 10
	assert args.depth == 500
	assert args.covariates == ['pH', 'log_TP']
	assert args.orders == {('Bacteria', RICHNESS): 2, ('Cyanobacteria', SIMPSON): 2}
	assert args.savetrials
	assert args.output.name.startswith('diversity.')


@pytest.mark.parametrize("value", ["Bacteria", "Bacteria:Shannon", "a:b:c"])
def test_parse_order_with_invalid_values(value):
	with pytest.raises(argparse.ArgumentTypeError):
		rundiversity.parse_order(value)


def test_main(tmp_path, table, lineage, metadata):
	table.to_csv(tmp_path / "counts.tsv", sep = "\t")
	lineage.to_csv(tmp_path / "lineage.tsv", sep = "\t")
	metadata.to_csv(tmp_path / "metadata.tsv", sep = "\t")
	folder = tmp_path / "output"

	rundiversity.main([
		str(tmp_path / "counts.tsv"), str(tmp_path / "lineage.tsv"), str(tmp_path / "metadata.tsv"),
		'--output', str(folder),
		'--trials', '3'
	])
	filenames = Filenames(folder)
	assert filenames.filename_table_estimates.exists()
	associations = pandas.read_csv(filenames.filename_table_associations, sep = "\t")
	assert len(associations) == 2 * len(DEFAULT_COVARIATES) * 9
