import numpy
import pandas
import pytest

from association import regression
from association.regression import InsufficientDataError


@pytest.fixture
def linear_table() -> pandas.DataFrame:
	rng = numpy.random.default_rng(5)
	x = numpy.linspace(0, 10, 20)
	y = 2 * x + 1 + rng.normal(0, 0.5, len(x))
	return pandas.DataFrame({'Bacteria': y, 'log_Chla': x})


@pytest.fixture
def quadratic_table() -> pandas.DataFrame:
	rng = numpy.random.default_rng(6)
	x = numpy.linspace(-3, 3, 25)
	y = 0.9 - 0.05 * x ** 2 + rng.normal(0, 0.01, len(x))
	return pandas.DataFrame({'Alphaproteobacteria': y, 'pH': x})


def test_linear_regression(linear_table):
	result = regression.fit_regression(linear_table, 'Bacteria', 'log_Chla')

	assert result.order == 1
	assert result.nobs == 20
	assert result.rsquared > 0.95
	assert result.pvalue < 0.001
	assert result.model.params['x'] == pytest.approx(2, abs = 0.2)
	# The slope test and the F-test are equivalent for a single covariate.
	assert result.pvalue == pytest.approx(result.model.f_pvalue)


def test_regression_ignores_missing_rows(linear_table):
	table = linear_table.copy()
	table.loc[[0, 1], 'Bacteria'] = numpy.nan
	table.loc[5, 'log_Chla'] = numpy.nan
	result = regression.fit_regression(table, 'Bacteria', 'log_Chla')
	assert result.nobs == 17


@pytest.mark.parametrize("rows", [0, 1, 2])
def test_insufficient_data(linear_table, rows):
	table = linear_table.iloc[:rows]
	with pytest.raises(InsufficientDataError) as exception:
		regression.fit_regression(table, 'Bacteria', 'log_Chla')
	assert exception.value.observations == rows
	assert exception.value.required == 3


def test_insufficient_paired_data(linear_table):
	table = linear_table.iloc[:5].copy()
	table.loc[[0, 1, 2], 'log_Chla'] = numpy.nan
	with pytest.raises(InsufficientDataError):
		regression.fit_regression(table, 'Bacteria', 'log_Chla')


def test_quadratic_regression(quadratic_table):
	linear = regression.fit_regression(quadratic_table, 'Alphaproteobacteria', 'pH', order = 1)
	quadratic = regression.fit_regression(quadratic_table, 'Alphaproteobacteria', 'pH', order = 2)

	assert linear.rsquared < 0.2
	assert quadratic.order == 2
	assert quadratic.rsquared > 0.9
	assert quadratic.rsquared_adj < quadratic.rsquared
	assert quadratic.pvalue == pytest.approx(quadratic.model.f_pvalue)
	assert list(quadratic.model.params.index) == ['const', 'x', 'x^2']


def test_quadratic_regression_needs_a_residual_degree_of_freedom(quadratic_table):
	assert regression.required_observations(1) == 3
	assert regression.required_observations(2) == 4
	with pytest.raises(InsufficientDataError):
		regression.fit_regression(quadratic_table.iloc[:3], 'Alphaproteobacteria', 'pH', order = 2)


def test_invalid_order(linear_table):
	with pytest.raises(ValueError):
		regression.fit_regression(linear_table, 'Bacteria', 'log_Chla', order = 0)


def test_insufficient_data_is_a_value_error():
	assert issubclass(InsufficientDataError, ValueError)
	assert "2" in str(InsufficientDataError(2, 3))
