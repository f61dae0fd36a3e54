from .correction import fdr_correct
from .display import format_pvalue, format_results, format_value
from .regression import InsufficientDataError, RegressionSummary, fit_regression
from .tester import associate_all, associate_group, associate_groups
