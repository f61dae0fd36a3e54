from typing import *

import numpy
import pandas
from loguru import logger


def minimum_depth(table: pandas.DataFrame) -> int:
	""" The smallest total read count among the samples (columns) of the community table."""
	totals = table.sum(axis = 0)
	depth = int(totals.min())
	logger.debug(f"Sample totals range from {depth} ({totals.idxmin()}) to {int(totals.max())} ({totals.idxmax()})")
	return depth


def sample_proportions(counts: numpy.ndarray) -> numpy.ndarray:
	"""
		Converts a samples x taxa count matrix into the per-sample relative abundance of each taxon.
		Every sample must have at least one read.
	"""
	counts = numpy.asarray(counts, dtype = float)
	totals = counts.sum(axis = 1, keepdims = True)
	if (totals <= 0).any():
		message = f"Cannot rarefy samples without any reads (sample rows {numpy.flatnonzero(totals.ravel() <= 0).tolist()})"
		raise ValueError(message)
	return counts / totals


def rarefy_table(proportions: numpy.ndarray, depth: int, rng: numpy.random.Generator) -> numpy.ndarray:
	"""
		Draws `depth` reads with replacement from each sample's observed taxon distribution.
	Parameters
	----------
	proportions: numpy.ndarray
		samples x taxa matrix of relative abundances. Each row should sum to 1.
	depth: int
		The number of reads to draw for every sample.
	rng: numpy.random.Generator
		Shared by all trials so that the full sequence of draws is reproducible from a single seed.

	Returns
	-------
	numpy.ndarray
		samples x taxa integer matrix where every row sums to `depth`.
	"""
	return rng.multinomial(depth, proportions)
