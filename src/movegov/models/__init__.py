"""movegov data models.

This module exports the entities shared by every analysis stage:
- Contract facts: ModuleInfo, FunctionInfo, StructInfo, ParameterInfo, ...
- Governance catalog: GovernableAction, AdditionalParamInfo, ActionCatalog
- ParseResult: The pipeline's output
"""

from movegov.models.contract import (
    ConstantDef,
    ContractFacts,
    EntryPoint,
    EventStruct,
    FieldInfo,
    FunctionInfo,
    ImportedModule,
    ModuleInfo,
    ParameterInfo,
    StateStruct,
    StructInfo,
)
from movegov.models.governance import (
    ActionCatalog,
    AdditionalParamInfo,
    ClassificationPolicy,
    GovernableAction,
    ParameterRole,
    ParseResult,
    RoledParameter,
)

__all__ = [
    "ActionCatalog",
    "AdditionalParamInfo",
    "ClassificationPolicy",
    "ConstantDef",
    "ContractFacts",
    "EntryPoint",
    "EventStruct",
    "FieldInfo",
    "FunctionInfo",
    "GovernableAction",
    "ImportedModule",
    "ModuleInfo",
    "ParameterInfo",
    "ParameterRole",
    "ParseResult",
    "RoledParameter",
    "StateStruct",
    "StructInfo",
]
