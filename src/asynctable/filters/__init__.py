"""Backend-agnostic scan filters and their translation into backend filters."""

from asynctable.filters.base import ScanFilter
from asynctable.filters.column import (
    ColumnPrefixFilter,
    ColumnRangeFilter,
    FirstKeyOnlyFilter,
    KeyOnlyFilter,
)
from asynctable.filters.compare import (
    CompareFilter,
    CompareOp,
    FamilyFilter,
    QualifierFilter,
    RowFilter,
    ValueFilter,
)
from asynctable.filters.comparators import (
    BinaryComparator,
    BinaryPrefixComparator,
    FilterComparator,
    RegexStringComparator,
    SubstringComparator,
)
from asynctable.filters.filter_list import FilterList, FilterListOperator
from asynctable.filters.regex import KeyRegexpFilter

__all__ = [
    "BinaryComparator",
    "BinaryPrefixComparator",
    "ColumnPrefixFilter",
    "ColumnRangeFilter",
    "CompareFilter",
    "CompareOp",
    "FamilyFilter",
    "FilterComparator",
    "FilterList",
    "FilterListOperator",
    "FirstKeyOnlyFilter",
    "KeyOnlyFilter",
    "KeyRegexpFilter",
    "QualifierFilter",
    "RegexStringComparator",
    "RowFilter",
    "ScanFilter",
    "SubstringComparator",
    "ValueFilter",
]
