"""Structural facts extracted from a Move contract.

These entities are produced by a fact source (the lexical scanner or the
normalized-module reader) and are read-only once a pass has finished:
- ModuleInfo: Package and module identity
- ParameterInfo: One declared function parameter
- FunctionInfo: A public function with its parameters and body facts
- StructInfo: A struct with abilities and fields
- ConstantDef, EventStruct, ImportedModule: Auxiliary facts
- ContractFacts: Everything one pass found
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ModuleInfo:
    """Identity of the analyzed contract.

    Attributes:
        package_name: Package (named address) part of the module header
        module_name: Module part of the module header
        address: On-chain address when known (chain path only)
    """

    package_name: str
    module_name: str
    address: str | None = None

    @property
    def qualified_name(self) -> str:
        """Return ``package::module``."""
        return f"{self.package_name}::{self.module_name}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "packageName": self.package_name,
            "moduleName": self.module_name,
        }
        if self.address is not None:
            data["address"] = self.address
        return data


@dataclass(frozen=True)
class ParameterInfo:
    """A declared function parameter.

    Attributes:
        name: Parameter name (synthesized on the chain path)
        type: Raw type text, including ``&``/``&mut`` markers and generics
        is_mutable: Whether the binding was declared ``mut name: T``
    """

    name: str
    type: str
    is_mutable: bool = False

    @property
    def is_reference(self) -> bool:
        """Return True if the type is a reference (``&T`` or ``&mut T``)."""
        return self.type.lstrip().startswith("&")

    @property
    def is_mutable_reference(self) -> bool:
        """Return True if the type is a mutable reference."""
        return self.type.replace(" ", "").startswith("&mut")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "type": self.type}


@dataclass
class FunctionInfo:
    """A public function discovered in the contract (an entry point candidate).

    Attributes:
        name: Function name
        parameters: Declared parameters, in declaration order
        is_entry: Whether the function is declared ``public entry``
        type_parameters: Raw generic parameter text (e.g. ``<T: store>``)
        return_type: Declared return type, if any
        body: Function body text; None when the source is not available
        modifies: Identifiers the body appears to mutate, in first-seen order
        description: Doc comment or inferred description
        governance_candidate: Classification outcome, set by the classifier
    """

    name: str
    parameters: list[ParameterInfo] = field(default_factory=list)
    is_entry: bool = False
    type_parameters: str | None = None
    return_type: str | None = None
    body: str | None = None
    modifies: list[str] = field(default_factory=list)
    description: str | None = None
    governance_candidate: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
            "isEntry": self.is_entry,
            "returnType": self.return_type,
            "modifies": list(self.modifies),
            "description": self.description,
            "governanceCandidate": self.governance_candidate,
        }


# Scanned public functions are the entry point candidates
EntryPoint = FunctionInfo


@dataclass(frozen=True)
class FieldInfo:
    """A struct field."""

    name: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "type": self.type}


@dataclass
class StructInfo:
    """A struct declaration.

    Attributes:
        name: Struct name
        abilities: Declared abilities (``key``, ``store``, ``copy``, ``drop``)
        fields: Fields in declaration order (empty if unparsable)
    """

    name: str
    abilities: list[str] = field(default_factory=list)
    fields: list[FieldInfo] = field(default_factory=list)

    @property
    def has_key(self) -> bool:
        """Return True if the struct can be stored on-chain as an object."""
        return "key" in self.abilities

    @property
    def is_resource(self) -> bool:
        """Return True for key structs that cannot be copied."""
        return self.has_key and "copy" not in self.abilities

    @property
    def is_event(self) -> bool:
        """Return True for copy + drop structs without key (the event shape)."""
        return "copy" in self.abilities and "drop" in self.abilities and not self.has_key

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "abilities": list(self.abilities),
            "fields": [f.to_dict() for f in self.fields],
            "isResource": self.is_resource,
        }


# Structs carrying ``key`` are the contract's state structs
StateStruct = StructInfo


@dataclass(frozen=True)
class ConstantDef:
    """A ``const`` declaration."""

    name: str
    type: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "type": self.type, "value": self.value}


@dataclass
class EventStruct:
    """A struct with the event ability shape (copy, drop)."""

    name: str
    fields: list[FieldInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "fields": [f.to_dict() for f in self.fields]}


@dataclass(frozen=True)
class ImportedModule:
    """A ``use`` declaration.

    Attributes:
        package: Package part (e.g. ``sui``)
        module: Module part (e.g. ``table``)
        symbols: Imported symbols, ``("*",)`` when the whole module is used
    """

    package: str
    module: str
    symbols: tuple[str, ...] = ("*",)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"package": self.package, "module": self.module, "symbols": list(self.symbols)}


@dataclass
class ContractFacts:
    """All facts produced by one scan of a contract.

    Attributes:
        module: Module identity (required root fact)
        functions: Public functions in declaration order
        structs: All structs in declaration order
        events: Event-shaped structs
        constants: Constant declarations
        imports: ``use`` declarations
        source: The scanned text; None when facts came from a descriptor
    """

    module: ModuleInfo
    functions: list[FunctionInfo] = field(default_factory=list)
    structs: list[StructInfo] = field(default_factory=list)
    events: list[EventStruct] = field(default_factory=list)
    constants: list[ConstantDef] = field(default_factory=list)
    imports: list[ImportedModule] = field(default_factory=list)
    source: str | None = None

    @property
    def state_structs(self) -> list[StructInfo]:
        """Structs with the ``key`` ability."""
        return [s for s in self.structs if s.has_key]

    @property
    def entry_functions(self) -> list[FunctionInfo]:
        """Functions declared ``public entry``."""
        return [f for f in self.functions if f.is_entry]

    def find_function(self, name: str) -> FunctionInfo | None:
        """Look up a function by exact name."""
        for func in self.functions:
            if func.name == name:
                return func
        return None

    def main_struct_name(self, default: str = "AppObject") -> str:
        """Return the contract's primary state struct name.

        The first struct with ``key`` wins, then the first struct of any kind,
        then ``default``.
        """
        for struct in self.structs:
            if struct.has_key:
                return struct.name
        if self.structs:
            return self.structs[0].name
        return default

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "moduleInfo": self.module.to_dict(),
            "functions": [f.to_dict() for f in self.functions],
            "stateStructs": [s.to_dict() for s in self.state_structs],
            "events": [e.to_dict() for e in self.events],
            "constants": [c.to_dict() for c in self.constants],
            "importedModules": [i.to_dict() for i in self.imports],
        }
