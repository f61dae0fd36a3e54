from .alphadiversity import METRICS, RICHNESS, SIMPSON
from .bootstrap import BootstrapDiversity, DiversityEstimate, TrialStack, estimate_diversity, reduce_trials
from .taxongroups import DEFAULT_GROUPS, ExclusionFilter, InclusionFilter, TaxonGroup, TaxonGroupError
