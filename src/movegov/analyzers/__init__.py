"""movegov analyzers - deterministic contract analysis.

Every analyzer is a pure function of its input and explicit configuration;
no I/O happens here.

Analyzers:
- Scanner: Lexical fact extraction from Move source text
- Normalized reader: Fact extraction from a normalized-module descriptor
- Classifier: Governability policies and parameter roles
- Catalog builder: Ordered governable actions with shared dispatch slots
"""

from movegov.analyzers.base import (
    CatalogConflictError,
    DescriptorError,
    EmptyCatalogError,
    FactSource,
    ModuleHeaderNotFoundError,
    MoveGovError,
    RPCError,
    StructuralError,
    UnknownActionError,
)
from movegov.analyzers.catalog import CatalogBuilder, build_catalog
from movegov.analyzers.classifier import (
    FunctionSignals,
    assign_role,
    classify,
    classify_functions,
    compute_signals,
)
from movegov.analyzers.normalized import (
    GovernanceInfo,
    NormalizedModuleReader,
    find_governance_module,
    read_normalized_module,
)
from movegov.analyzers.scanner import MoveSourceScanner, extract_module_info, scan_contract

__all__ = [
    "CatalogBuilder",
    "CatalogConflictError",
    "DescriptorError",
    "EmptyCatalogError",
    "FactSource",
    "FunctionSignals",
    "GovernanceInfo",
    "ModuleHeaderNotFoundError",
    "MoveGovError",
    "MoveSourceScanner",
    "NormalizedModuleReader",
    "RPCError",
    "StructuralError",
    "UnknownActionError",
    "assign_role",
    "build_catalog",
    "classify",
    "classify_functions",
    "compute_signals",
    "extract_module_info",
    "find_governance_module",
    "read_normalized_module",
    "scan_contract",
]
