"""Pipeline modules for exemplar-based grading."""

from .quality import QualityScorer, compute_quality_score
from .exemplars import ExemplarSelector, normalize_category, select_exemplars
from .benchmarks import BenchmarkExtractor, extract_benchmarks
from .rules import RuleGenerator, generate_rules
from .grader import Grader, ListingGrader, grade
from .orchestrator import run_batch

__all__ = [
    "QualityScorer",
    "compute_quality_score",
    "ExemplarSelector",
    "normalize_category",
    "select_exemplars",
    "BenchmarkExtractor",
    "extract_benchmarks",
    "RuleGenerator",
    "generate_rules",
    "Grader",
    "ListingGrader",
    "grade",
    "run_batch",
]
