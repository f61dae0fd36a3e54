from typing import *

import numpy
import pandas
import statsmodels.api as sm
from loguru import logger
from statsmodels.regression import linear_model

MINIMUM_OBSERVATIONS = 3


class InsufficientDataError(ValueError):
	""" Raised when there are too few paired observations to fit a regression."""

	def __init__(self, observations: int, required: int, label: str = ""):
		self.observations = observations
		self.required = required
		message = f"Need at least {required} paired observations to fit the regression{label}, got {observations}"
		super().__init__(message)


class RegressionSummary(NamedTuple):
	order: int
	nobs: int
	pvalue: float
	rsquared: float
	rsquared_adj: float
	model: linear_model.RegressionResultsWrapper


def required_observations(order: int) -> int:
	""" Every fit needs at least one residual degree of freedom."""
	return max(MINIMUM_OBSERVATIONS, order + 2)


def design_matrix(covariate: pandas.Series, order: int) -> pandas.DataFrame:
	""" Columns are `const`, `x`, `x^2`, ... up to `order`."""
	columns = {'x': covariate}
	for power in range(2, order + 1):
		columns[f'x^{power}'] = covariate ** power
	return sm.add_constant(pandas.DataFrame(columns), has_constant = 'add')


def fit_regression(table: pandas.DataFrame, response: str, covariate: str, order: int = 1) -> RegressionSummary:
	"""
		Fits `response ~ covariate` (or a polynomial in `covariate` when `order` > 1) with ordinary least squares.
	Parameters
	----------
	table: pandas.DataFrame
		Should contain both `response` and `covariate` columns. Rows missing either value are ignored.
	order: int; default 1
		1 for the linear model, 2 for `response ~ covariate + covariate^2`, etc.

	Returns
	-------
	RegressionSummary
		`pvalue` is the p-value of the slope for the linear model and the p-value of the model F-test otherwise.
		The two are identical for the linear model.
	"""
	if order < 1:
		message = f"The model order must be at least 1, got {order}"
		raise ValueError(message)
	paired = pandas.DataFrame({column: pandas.to_numeric(table[column], errors = 'coerce') for column in [response, covariate]})
	paired = paired.replace([numpy.inf, -numpy.inf], numpy.nan).dropna()

	required = required_observations(order)
	if len(paired) < required:
		raise InsufficientDataError(len(paired), required, f" '{response} ~ {covariate}'")

	exog = design_matrix(paired[covariate], order)
	regression = linear_model.OLS(paired[response], exog).fit()

	if order == 1:
		pvalue = regression.pvalues['x']
	else:
		pvalue = regression.f_pvalue
	logger.debug(f"{response} ~ {covariate} (order {order}): n = {int(regression.nobs)}, p = {pvalue}, r2 = {regression.rsquared}")
	return RegressionSummary(
		order = order,
		nobs = int(regression.nobs),
		pvalue = float(pvalue),
		rsquared = float(regression.rsquared),
		rsquared_adj = float(regression.rsquared_adj),
		model = regression
	)
