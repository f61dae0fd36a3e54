"""
	Formats the association results for reports and figure annotations.
	A p-value which rounds to 0.000 is shown as "< 0.001". This is only a display convention for values too small
	to show at three decimals, not a significance threshold.
"""
import math
from typing import *

import pandas

DECIMALS = 3
SMALLEST_PVALUE = "< 0.001"
MISSING = "NA"


def _is_missing(value: Optional[float]) -> bool:
	return value is None or (isinstance(value, float) and math.isnan(value))


def format_value(value: Optional[float], decimals: int = DECIMALS) -> str:
	if _is_missing(value):
		return MISSING
	return f"{round(float(value), decimals):.{decimals}f}"


def format_pvalue(value: Optional[float], decimals: int = DECIMALS) -> str:
	if _is_missing(value):
		return MISSING
	rounded = round(float(value), decimals)
	if rounded == 0:
		return SMALLEST_PVALUE
	return f"{rounded:.{decimals}f}"


def format_results(results: pandas.DataFrame) -> pandas.DataFrame:
	"""
		Adds the `p` and `r2` display columns to the association table.
		Higher-order models are reported with their adjusted R2.
	"""
	table = results.copy()
	table['p'] = table['pvalue_adjusted'].apply(format_pvalue)
	r2 = table['rsquared'].where(table['order'] <= 1, table['rsquared_adj'])
	table['r2'] = r2.apply(format_value)
	table['r2_label'] = table['order'].apply(lambda order: 'R2' if order <= 1 else 'adjusted R2')
	return table[['group', 'metric', 'covariate', 'order', 'nobs', 'p', 'r2', 'r2_label', 'status']]
