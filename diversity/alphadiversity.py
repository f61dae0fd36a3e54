from typing import *

import numpy

RICHNESS = 'Richness'
SIMPSON = 'Simpson'
METRICS = [RICHNESS, SIMPSON]


def observed_richness(counts: numpy.ndarray) -> numpy.ndarray:
	""" Number of taxa with at least one read in each sample (row)."""
	return (numpy.asarray(counts) > 0).sum(axis = 1)


def inverse_simpson(counts: numpy.ndarray) -> numpy.ndarray:
	""" 1 / sum(p_i^2) for each sample (row). Samples without reads are missing."""
	counts = numpy.asarray(counts, dtype = float)
	totals = counts.sum(axis = 1)
	squares = (counts ** 2).sum(axis = 1)
	result = numpy.full(len(counts), numpy.nan)
	# sum(p_i^2) = sum(n_i^2) / N^2
	numpy.divide(totals ** 2, squares, out = result, where = squares > 0)
	return result


def simpson_evenness(counts: numpy.ndarray) -> numpy.ndarray:
	"""
		Inverse-Simpson index divided by the observed richness.
		The evenness of a sample with no observed taxa is undefined and reported as missing (nan) rather than 0.
	"""
	richness = observed_richness(counts)
	invsimpson = inverse_simpson(counts)
	result = numpy.full(len(richness), numpy.nan)
	numpy.divide(invsimpson, richness, out = result, where = richness > 0)
	return result


def calculate_alpha_diversity(counts: numpy.ndarray) -> Tuple[numpy.ndarray, numpy.ndarray]:
	""" Returns the (richness, evenness) pair for each sample in a samples x taxa count matrix."""
	return observed_richness(counts), simpson_evenness(counts)
