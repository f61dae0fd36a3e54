from typing import *

import pandas
from loguru import logger

from association import correction, regression
from association.regression import InsufficientDataError, RegressionSummary

STATUS_OK = 'ok'
STATUS_INSUFFICIENT = 'insufficient_data'

COLUMNS = ['group', 'metric', 'covariate', 'order', 'nobs', 'pvalue', 'pvalue_adjusted', 'rsquared', 'rsquared_adj', 'status']

ModelKey = Tuple[str, str, str]  # (group, metric, covariate)


def associate_group(table: pandas.DataFrame, group: str, metric: str, covariate: str, order: int = 1) -> Tuple[Dict[str, Any], Optional[RegressionSummary]]:
	"""
		Regresses the diversity estimate of a single group against a covariate.
		Returns the result row and the fitted model, which is `None` if there was not enough data to fit the model.
	"""
	row = {'group': group, 'metric': metric, 'covariate': covariate, 'order': order}
	try:
		summary = regression.fit_regression(table, group, covariate, order = order)
	except InsufficientDataError as exception:
		logger.warning(f"Skipping {group} ({metric} ~ {covariate}): {exception}")
		row.update(nobs = exception.observations, pvalue = None, rsquared = None, rsquared_adj = None, status = STATUS_INSUFFICIENT)
		return row, None

	row.update(
		nobs = summary.nobs,
		pvalue = summary.pvalue,
		rsquared = summary.rsquared,
		rsquared_adj = summary.rsquared_adj,
		status = STATUS_OK
	)
	return row, summary


def associate_groups(table: pandas.DataFrame, groups: List[str], metric: str, covariate: str,
		orders: Dict[str, int] = None) -> Tuple[pandas.DataFrame, Dict[ModelKey, RegressionSummary]]:
	"""
		Tests every group against a single covariate for a single metric, then corrects the p-values for multiple comparisons.
	Parameters
	----------
	table: pandas.DataFrame
		Indexed by sample. Has one column per group (the diversity estimate for `metric`) and a column for `covariate`.
	groups: List[str]
		The group columns to test. These form one batch for the FDR correction.
	orders: Dict[str,int]
		Maps a group to the order of the model to fit for that group. Groups not listed use the linear model.
	"""
	if orders is None:
		orders = dict()
	if covariate not in table.columns:
		message = f"The covariate '{covariate}' is not in the table. Available columns: {list(table.columns)}"
		raise ValueError(message)

	rows = list()
	models = dict()
	for group in groups:
		row, summary = associate_group(table, group, metric, covariate, order = orders.get(group, 1))
		rows.append(row)
		if summary is not None:
			models[group, metric, covariate] = summary

	results = pandas.DataFrame(rows)
	results['pvalue'] = results['pvalue'].astype(float)
	results['pvalue_adjusted'] = correction.fdr_correct(results['pvalue'])
	for column in ['rsquared', 'rsquared_adj']:
		results[column] = results[column].astype(float)
	return results[COLUMNS], models


def associate_all(joined_tables: Dict[str, pandas.DataFrame], groups: List[str], covariates: List[str],
		orders: Dict[Tuple[str, str], int] = None) -> Tuple[pandas.DataFrame, Dict[ModelKey, RegressionSummary]]:
	"""
		Runs `associate_groups` for every metric and covariate. The FDR correction is applied separately to each (metric, covariate) batch.
	Parameters
	----------
	joined_tables: Dict[str, pandas.DataFrame]
		Maps each metric to the table of diversity estimates for that metric joined with the sample metadata.
	orders: Dict[Tuple[str,str], int]
		Maps (group, metric) to the model order. Defaults to the linear model.
	"""
	if orders is None:
		orders = dict()
	tables = list()
	models = dict()
	for metric, table in joined_tables.items():
		metric_orders = {group: order for (group, order_metric), order in orders.items() if order_metric == metric}
		for covariate in covariates:
			logger.info(f"Testing {len(groups)} groups: {metric} ~ {covariate}")
			batch, batch_models = associate_groups(table, groups, metric, covariate, orders = metric_orders)
			tables.append(batch)
			models.update(batch_models)
	results = pandas.concat(tables, ignore_index = True) if tables else pandas.DataFrame(columns = COLUMNS)
	return results, models
