from typing import *

import numpy
import pandas
from loguru import logger
from toolz import itertoolz

RANKS = ['Kingdom', 'Phylum', 'Class', 'Order', 'Family', 'Genus']


class TaxonGroupError(ValueError):
	""" Raised when a taxon group cannot be applied to the lineage table."""


class InclusionFilter(NamedTuple):
	""" Selects the taxa whose lineage at `rank` is one of `values`."""
	rank: str
	values: Tuple[str, ...]

	def ranks(self) -> List[str]:
		return [self.rank]

	def select(self, lineage: pandas.DataFrame) -> pandas.Series:
		return lineage[self.rank].isin(self.values)


class ExclusionFilter(NamedTuple):
	"""
		Selects every taxon except the ones whose lineage at `rank` equals `excluded`.
		`within` optionally restricts the selection to an enclosing group first (ex. all Bacteria).
	"""
	rank: str
	excluded: str
	within: Optional[InclusionFilter] = None

	def ranks(self) -> List[str]:
		if self.within is None:
			return [self.rank]
		return [self.rank] + self.within.ranks()

	def select(self, lineage: pandas.DataFrame) -> pandas.Series:
		# Taxa without a value at `rank` are never excluded.
		selected = lineage[self.rank] != self.excluded
		if self.within is not None:
			selected = selected & self.within.select(lineage)
		return selected


TaxonFilter = Union[InclusionFilter, ExclusionFilter]


class TaxonGroup(NamedTuple):
	name: str
	filter: TaxonFilter


def include(name: str, rank: str, *values: str) -> TaxonGroup:
	""" Shortcut for a group defined by inclusion. The group name is used as the value if no values are given."""
	if not values:
		values = (name,)
	return TaxonGroup(name, InclusionFilter(rank, tuple(values)))


BACTERIA = InclusionFilter('Kingdom', ('Bacteria',))

DEFAULT_GROUPS: List[TaxonGroup] = [
	include('Bacteria', 'Kingdom'),
	TaxonGroup('NcBacteria', ExclusionFilter('Class', 'Cyanobacteriia', within = BACTERIA)),
	include('Cyanobacteria', 'Phylum'),
	include('Proteobacteria', 'Phylum'),
	include('Alphaproteobacteria', 'Class'),
	include('Gammaproteobacteria', 'Class'),
	include('Bacteroidota', 'Phylum'),
	include('Actinobacteriota', 'Phylum'),
	include('Verrucomicrobiota', 'Phylum'),
]


def validate_groups(groups: List[TaxonGroup], lineage: pandas.DataFrame) -> None:
	""" Makes sure the group list can be applied to the lineage table. Should be called before any resampling is done."""
	if not groups:
		raise TaxonGroupError("At least one taxon group is required.")

	duplicates = [name for name, count in itertoolz.frequencies(group.name for group in groups).items() if count > 1]
	if duplicates:
		message = f"Taxon group names must be unique. Found duplicates: {duplicates}"
		raise TaxonGroupError(message)

	for group in groups:
		missing = [rank for rank in group.filter.ranks() if rank not in lineage.columns]
		if missing:
			message = f"The group '{group.name}' references the rank(s) {missing}, which are not in the lineage table ({list(lineage.columns)})"
			raise TaxonGroupError(message)


def group_masks(groups: List[TaxonGroup], lineage: pandas.DataFrame) -> numpy.ndarray:
	"""
		Generates a boolean matrix with one row per group and one column per taxon.
	Parameters
	----------
	groups: List[TaxonGroup]
	lineage: pandas.DataFrame
		Indexed by taxon, in the same order as the rows of the community table.
	"""
	validate_groups(groups, lineage)
	masks = list()
	for group in groups:
		mask = group.filter.select(lineage).fillna(False).astype(bool).values
		logger.debug(f"Group '{group.name}' selects {mask.sum()} of {len(mask)} taxa.")
		if not mask.any():
			logger.warning(f"The group '{group.name}' does not match any taxon in the lineage table.")
		masks.append(mask)
	return numpy.vstack(masks)
