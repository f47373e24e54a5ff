"""Governance catalog entities.

- ParameterRole: Role a parameter plays when an action is dispatched
- RoledParameter: A source parameter paired with its role
- GovernableAction: One action a proposal can perform
- AdditionalParamInfo: A shared object parameter of the dispatch function
- ActionCatalog: Ordered actions plus the dispatch function's object slots
- ParseResult: What one pipeline run hands back to its caller
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from movegov.models.contract import ContractFacts, FunctionInfo, ModuleInfo, ParameterInfo


class ParameterRole(Enum):
    """Role of a function parameter in generated dispatch code."""

    CONTEXT = "context"
    CLOCK = "clock"
    MAIN_STATE = "main_state"
    GOVERNANCE_SYSTEM = "governance_system"
    AUXILIARY_OBJECT = "auxiliary_object"
    VALUE = "value"

    @property
    def is_reserved(self) -> bool:
        """Return True for roles stripped from an action's payload."""
        return self in {
            ParameterRole.CONTEXT,
            ParameterRole.CLOCK,
            ParameterRole.MAIN_STATE,
            ParameterRole.GOVERNANCE_SYSTEM,
        }


class ClassificationPolicy(Enum):
    """Governability policy selected by the caller."""

    STRICT = "strict"
    BROAD = "broad"


@dataclass(frozen=True)
class RoledParameter:
    """A source parameter with the role the classifier assigned to it."""

    parameter: ParameterInfo
    role: ParameterRole

    @property
    def name(self) -> str:
        return self.parameter.name

    @property
    def type(self) -> str:
        return self.parameter.type


@dataclass
class GovernableAction:
    """An entry point selected to be gated behind a vote.

    Attributes:
        name: Original function name (unique within a catalog)
        parameters: Value parameters, which become the variant payload
        description: Human-readable description
        source_parameters: Every original parameter with its role, in order
    """

    name: str
    parameters: list[ParameterInfo] = field(default_factory=list)
    description: str | None = None
    source_parameters: list[RoledParameter] = field(default_factory=list)

    @property
    def variant_name(self) -> str:
        """Union variant tag: the action name with its first letter upper-cased."""
        return self.name[:1].upper() + self.name[1:]

    @property
    def needs_clock(self) -> bool:
        return any(p.role is ParameterRole.CLOCK for p in self.source_parameters)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
        }
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass
class AdditionalParamInfo:
    """An object parameter threaded through the dispatch function.

    Attributes:
        name: Synthesized parameter name in the dispatch signature
        type: Declared type (``&mut`` when any referencing action needs it)
        origin: The first action parameter that introduced this object
        type_key: Normalized type path used for de-duplication
    """

    name: str
    type: str
    origin: ParameterInfo
    type_key: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "type": self.type, "origin": self.origin.name}


@dataclass
class ActionCatalog:
    """Ordered governable actions and the shared dispatch-function slots.

    Attributes:
        actions: Actions in source declaration (or selection) order
        additional_params: De-duplicated auxiliary object parameters
        main_struct: Name of the contract's primary state struct
        needs_clock: Whether any action needs a clock argument
        local_types: Struct names declared by the analyzed module, which the
            generated module must qualify with the module name
    """

    actions: list[GovernableAction] = field(default_factory=list)
    additional_params: list[AdditionalParamInfo] = field(default_factory=list)
    main_struct: str = "AppObject"
    needs_clock: bool = False
    local_types: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.actions)

    def __bool__(self) -> bool:
        return bool(self.actions)

    def additional_param_for(self, type_key: str) -> AdditionalParamInfo | None:
        """Return the shared parameter for a normalized type key."""
        for param in self.additional_params:
            if param.type_key == type_key:
                return param
        return None


@dataclass
class ParseResult:
    """Output of one pipeline run.

    Attributes:
        module_info: Identity of the analyzed module
        governable_actions: Catalog actions (empty in discovery mode)
        entry_points: Unfiltered public functions (discovery mode)
        governance_contract: Generated governance module text
        token_contract: Generated governance token module text
        main_struct: Primary state struct name used for dispatch
        facts: Full scan facts, when available
    """

    module_info: ModuleInfo
    governable_actions: list[GovernableAction] = field(default_factory=list)
    entry_points: list[FunctionInfo] = field(default_factory=list)
    governance_contract: str | None = None
    token_contract: str | None = None
    main_struct: str | None = None
    facts: ContractFacts | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape consumed by the HTTP layer."""
        data: dict[str, Any] = {
            "moduleInfo": self.module_info.to_dict(),
            "governableActions": [a.to_dict() for a in self.governable_actions],
        }
        if self.entry_points:
            data["entryPoints"] = [
                {
                    "name": f.name,
                    "parameters": [p.to_dict() for p in f.parameters],
                    "description": f.description,
                }
                for f in self.entry_points
            ]
        if self.main_struct is not None:
            data["mainStruct"] = self.main_struct
        if self.governance_contract is not None:
            data["governanceContract"] = self.governance_contract
        if self.token_contract is not None:
            data["tokenContract"] = self.token_contract
        return data
