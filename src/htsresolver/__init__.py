"""hts-duty-resolver - US import duty rates for HTS codes."""

from .models import Confidence, HTSEntry, ResultSource
from .normalizer import generate_search_variants, is_plausible, normalize
from .resolver import DutyRateResolver, get_duty_rate, get_resolver

__version__ = "0.1.0"

__all__ = [
    "Confidence",
    "DutyRateResolver",
    "HTSEntry",
    "ResultSource",
    "generate_search_variants",
    "get_duty_rate",
    "get_resolver",
    "is_plausible",
    "normalize",
    "__version__",
]
