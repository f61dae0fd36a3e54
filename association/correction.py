from typing import *

import numpy
import pandas
from statsmodels.stats.multitest import multipletests

FDR_METHOD = 'fdr_bh'


def fdr_correct(pvalues: pandas.Series, method: str = FDR_METHOD) -> pandas.Series:
	"""
		Applies the Benjamini-Hochberg correction to a single batch of p-values.
		Missing p-values are left out of the batch and stay missing.
	"""
	pvalues = pandas.Series(pvalues, dtype = float)
	corrected = pandas.Series(numpy.nan, index = pvalues.index, dtype = float)
	present = pvalues.notna()
	if present.any():
		_, adjusted, _, _ = multipletests(pvalues[present].values, method = method)
		corrected[present] = adjusted
	return corrected
