"""Indexed search-and-reduction loops that return evidence with their results."""

__all__ = [
    "AllLoop",
    "AnyLoop",
    "DataFile",
    "DataFileError",
    "DependentRange",
    "DerivedRange",
    "EmptyDomainError",
    "IncomparableValueError",
    "IndexRange",
    "Loop",
    "LoopError",
    "LoopKind",
    "LoopReport",
    "MaxLoop",
    "MinLoop",
    "ProdLoop",
    "ProductSpace",
    "Secret",
    "SiftLoop",
    "SumLoop",
    "ValueTypeError",
    "VectorLoop",
    "as_space",
    "by",
    "check_ordered_type",
    "compose_evidence",
    "evaluate",
    "evaluate_all",
    "evaluate_any",
    "evaluate_max",
    "evaluate_min",
    "evaluate_prod",
    "evaluate_sift",
    "evaluate_sum",
    "evaluate_vector",
    "export_report_to_toml",
    "load_data_file",
    "packed",
    "resolve_evidence",
    "span",
]

from ._errors import EmptyDomainError, IncomparableValueError, LoopError, ValueTypeError
from ._eval import (
    evaluate,
    evaluate_all,
    evaluate_any,
    evaluate_max,
    evaluate_min,
    evaluate_prod,
    evaluate_sift,
    evaluate_sum,
    evaluate_vector,
)
from ._io import DataFileError, export_report_to_toml, load_data_file
from ._loops import (
    AllLoop,
    AnyLoop,
    Loop,
    LoopKind,
    MaxLoop,
    MinLoop,
    ProdLoop,
    SiftLoop,
    SumLoop,
    VectorLoop,
    check_ordered_type,
)
from ._models import DataFile, LoopReport
from ._secret import Secret, compose_evidence, resolve_evidence
from ._space import DependentRange, DerivedRange, IndexRange, ProductSpace, as_space, by, packed, span
