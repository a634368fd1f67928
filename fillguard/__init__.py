"""Static detection of Array fill() calls that share one reference-type value."""

from .api import (  # noqa: F401
    check_source,
    check_file,
    classify_expression,
    find_fill_calls,
)
from .classifier import TypeClassifier, Verdict  # noqa: F401
from .config import FillOptions, InvalidOptionsError, load_options  # noqa: F401
