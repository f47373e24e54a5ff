"""Fact source for normalized Move module descriptors.

A normalized-module descriptor is the already-structured view of a
published package returned by ``sui_getNormalizedMoveModulesByPackage``:
a mapping of module name to ``{address, structs, exposedFunctions, enums}``.

Descriptors carry types but no parameter names and no function bodies:
- Types are rendered as Move type text (``&mut coin::Coin<sui::SUI>``)
- Parameter names are synthesized from their types
- Function bodies are None, so body-derived signals are unobservable
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from movegov.analyzers.base import DescriptorError, FactSource
from movegov.analyzers.descriptions import describe_signature
from movegov.models.contract import (
    ContractFacts,
    EventStruct,
    FieldInfo,
    FunctionInfo,
    ModuleInfo,
    ParameterInfo,
    StructInfo,
)

logger = logging.getLogger(__name__)

_PRIMITIVES = {"bool", "u8", "u16", "u32", "u64", "u128", "u256", "address", "signer"}
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass
class GovernanceInfo:
    """A deployed governance module located inside a package descriptor.

    Attributes:
        module_name: Name of the module exposing ``create_proposal``
        create_proposal: Descriptor of the ``create_proposal`` function
        proposal_kind: Descriptor of the ``ProposalKind`` enum, if declared
    """

    module_name: str
    create_proposal: dict[str, Any]
    proposal_kind: dict[str, Any] | None = None


def render_type(descriptor_type: Any) -> str:
    """Render a descriptor type as Move type text.

    Args:
        descriptor_type: Type node (``"U64"``, ``{"Struct": ...}``,
            ``{"Reference": ...}``, ``{"MutableReference": ...}``,
            ``{"Vector": ...}`` or ``{"TypeParameter": n}``)

    Returns:
        Type text, or ``"unknown"`` for unrecognised nodes
    """
    if isinstance(descriptor_type, str):
        lowered = descriptor_type.lower()
        return lowered if lowered in _PRIMITIVES else descriptor_type

    if not isinstance(descriptor_type, dict):
        return "unknown"

    if "Struct" in descriptor_type:
        struct = descriptor_type["Struct"]
        base = f"{struct.get('module')}::{struct.get('name')}"
        type_arguments = struct.get("typeArguments") or []
        if type_arguments:
            rendered = ", ".join(render_type(arg) for arg in type_arguments)
            return f"{base}<{rendered}>"
        return base

    if "MutableReference" in descriptor_type:
        return f"&mut {render_type(descriptor_type['MutableReference'])}"

    if "Reference" in descriptor_type:
        return f"&{render_type(descriptor_type['Reference'])}"

    if "Vector" in descriptor_type:
        return f"vector<{render_type(descriptor_type['Vector'])}>"

    if "TypeParameter" in descriptor_type:
        return f"T{descriptor_type['TypeParameter']}"

    return "unknown"


def snake_case(name: str) -> str:
    """``GovernanceSystem`` -> ``governance_system``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def synthesize_parameter_name(type_text: str, index: int, main_struct: str | None = None) -> str:
    """Pick a readable parameter name from a type.

    Args:
        type_text: Rendered Move type
        index: Position of the parameter in the signature
        main_struct: Primary state struct name, named after itself

    Returns:
        Parameter name
    """
    if "tx_context::TxContext" in type_text:
        return "ctx"
    if main_struct and re.search(rf"::{re.escape(main_struct)}\b", type_text):
        return snake_case(main_struct)
    if "Coin" in type_text:
        return "payment"
    if "Clock" in type_text:
        return "clock"
    if type_text == "address":
        return f"recipient_{index}"
    if type_text == "u64":
        return f"amount_{index}"
    if "GovernanceCapability" in type_text:
        return "governance_cap"
    return f"param_{index}"


def convert_parameters(
    descriptor_parameters: list[Any],
    main_struct: str | None = None,
) -> list[ParameterInfo]:
    """Convert descriptor parameter types into named parameters.

    Repeated synthesized names get a numeric suffix so every name in a
    signature is unique.
    """
    parameters: list[ParameterInfo] = []
    seen: dict[str, int] = {}

    for index, descriptor_type in enumerate(descriptor_parameters):
        type_text = render_type(descriptor_type)
        name = synthesize_parameter_name(type_text, index, main_struct)

        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0

        parameters.append(ParameterInfo(name=name, type=type_text))

    return parameters


def _render_returns(returns: list[str]) -> str | None:
    if not returns:
        return None
    if len(returns) == 1:
        return returns[0]
    return "(" + ", ".join(returns) + ")"


def find_governance_module(modules: dict[str, Any]) -> GovernanceInfo | None:
    """Locate the module of a package that exposes ``create_proposal``.

    Args:
        modules: Package descriptor (module name -> module descriptor)

    Returns:
        GovernanceInfo, or None if no module exposes ``create_proposal``
    """
    for module_name, module_data in modules.items():
        functions = (module_data or {}).get("exposedFunctions") or {}
        if "create_proposal" in functions:
            enums = module_data.get("enums") or {}
            return GovernanceInfo(
                module_name=module_name,
                create_proposal=functions["create_proposal"],
                proposal_kind=enums.get("ProposalKind"),
            )
    return None


class NormalizedModuleReader(FactSource[dict[str, Any]]):
    """Extracts contract facts from a normalized package descriptor.

    Attributes:
        module_name: Module to read; the first module of the package if None
    """

    def __init__(self, module_name: str | None = None) -> None:
        super().__init__("normalized-module")
        self.module_name = module_name

    def extract(self, data: dict[str, Any]) -> ContractFacts:
        """Read one module of a package descriptor.

        Args:
            data: Package descriptor (module name -> module descriptor)

        Returns:
            ContractFacts with ``source`` set to None

        Raises:
            DescriptorError: If the descriptor is empty, malformed, or lacks
                the requested module
        """
        if not isinstance(data, dict) or not data:
            raise DescriptorError("No modules found in package")

        module_name = self.module_name or next(iter(data))
        module_data = data.get(module_name)
        if not isinstance(module_data, dict):
            available = ", ".join(data)
            raise DescriptorError(
                f"Module '{module_name}' not found in package (available: {available})"
            )

        structs = self.read_structs(module_data)
        main_struct = next((s.name for s in structs if s.has_key), None)

        facts = ContractFacts(
            module=ModuleInfo(
                package_name=module_name.lower(),
                module_name=module_name,
                address=module_data.get("address"),
            ),
            functions=self.read_functions(module_data, main_struct),
            structs=structs,
            events=[EventStruct(name=s.name, fields=list(s.fields)) for s in structs if s.is_event],
            source=None,
        )

        logger.debug(
            "Read descriptor module %s: %d functions, %d structs",
            module_name,
            len(facts.functions),
            len(facts.structs),
        )
        return facts

    def read_structs(self, module_data: dict[str, Any]) -> list[StructInfo]:
        """Read struct descriptors; abilities are lower-cased to source spelling."""
        structs: list[StructInfo] = []

        for name, struct_data in (module_data.get("structs") or {}).items():
            abilities = (struct_data.get("abilities") or {}).get("abilities") or []
            structs.append(
                StructInfo(
                    name=name,
                    abilities=[str(a).lower() for a in abilities],
                    fields=[
                        FieldInfo(name=f.get("name", ""), type=render_type(f.get("type")))
                        for f in struct_data.get("fields") or []
                    ],
                )
            )

        return structs

    def read_functions(
        self,
        module_data: dict[str, Any],
        main_struct: str | None = None,
    ) -> list[FunctionInfo]:
        """Read public function descriptors."""
        functions: list[FunctionInfo] = []

        for name, function_data in (module_data.get("exposedFunctions") or {}).items():
            if function_data.get("visibility") != "Public":
                logger.debug("Skipping non-public function %s", name)
                continue

            parameters = convert_parameters(function_data.get("parameters") or [], main_struct)
            returns = [render_type(r) for r in function_data.get("return") or []]
            type_parameters = function_data.get("typeParameters") or []

            functions.append(
                FunctionInfo(
                    name=name,
                    parameters=parameters,
                    is_entry=bool(function_data.get("isEntry")),
                    type_parameters=(
                        "<" + ", ".join(f"T{i}" for i in range(len(type_parameters))) + ">"
                        if type_parameters
                        else None
                    ),
                    return_type=_render_returns(returns),
                    body=None,
                    description=describe_signature(name, parameters),
                )
            )

        return functions


def read_normalized_module(
    modules: dict[str, Any],
    module_name: str | None = None,
) -> ContractFacts:
    """Read contract facts from a package descriptor.

    Convenience function wrapping NormalizedModuleReader.
    """
    return NormalizedModuleReader(module_name).extract(modules)
