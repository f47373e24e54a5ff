"""Action catalog builder.

Turns classified functions into the ordered catalog the template engine
consumes. For each function:
1. Every parameter is assigned a role (see ``classifier.assign_role``)
2. Value parameters become the action's union-variant payload
3. Auxiliary object parameters are hoisted into the dispatch function,
   de-duplicated by normalized type path across all actions

Declaration order is preserved throughout, so identical input always yields
an identical catalog.
"""

import logging
from collections import Counter

from movegov.analyzers.base import CatalogConflictError
from movegov.analyzers.classifier import (
    assign_role,
    normalize_type_key,
    strip_reference,
)
from movegov.config import CatalogConfig
from movegov.models.contract import FunctionInfo, ParameterInfo
from movegov.models.governance import (
    ActionCatalog,
    AdditionalParamInfo,
    GovernableAction,
    ParameterRole,
    RoledParameter,
)

logger = logging.getLogger(__name__)

# Names the generated dispatch function already binds
RESERVED_DISPATCH_NAMES = ("self", "proposal_id", "proposal", "app_object", "clock", "ctx")


def unique_name(base: str, taken: set[str]) -> str:
    """Return ``base`` or the first free ``base_1``, ``base_2``, ..."""
    if base not in taken:
        return base
    counter = 1
    while f"{base}_{counter}" in taken:
        counter += 1
    return f"{base}_{counter}"


def check_conflicts(functions: list[FunctionInfo]) -> None:
    """Reject duplicate action names and colliding variant tags.

    Raises:
        CatalogConflictError: If two functions share a name, or two names
            map to the same variant tag after capitalisation
    """
    names = Counter(f.name for f in functions)
    duplicates = [name for name, count in names.items() if count > 1]
    if duplicates:
        raise CatalogConflictError(duplicates)

    variants: dict[str, list[str]] = {}
    for function in functions:
        tag = function.name[:1].upper() + function.name[1:]
        variants.setdefault(tag, []).append(function.name)

    collisions = [name for group in variants.values() if len(group) > 1 for name in group]
    if collisions:
        raise CatalogConflictError(
            collisions,
            f"Governable actions collide after capitalisation: {', '.join(collisions)}",
        )


class CatalogBuilder:
    """Builds an ActionCatalog from governable functions.

    Attributes:
        config: Parameter role markers
    """

    def __init__(self, config: CatalogConfig | None = None) -> None:
        self.config = config or CatalogConfig()

    def build(
        self,
        functions: list[FunctionInfo],
        main_struct: str = "AppObject",
        local_types: tuple[str, ...] = (),
    ) -> ActionCatalog:
        """Build the catalog.

        An empty function list yields an empty catalog; generation is what
        refuses it.

        Args:
            functions: Governable functions in declaration order
            main_struct: Name of the contract's primary state struct
            local_types: Struct names declared by the analyzed module

        Returns:
            ActionCatalog

        Raises:
            CatalogConflictError: On duplicate names or variant-tag collisions
        """
        check_conflicts(functions)

        catalog = ActionCatalog(main_struct=main_struct, local_types=tuple(local_types))
        taken = set(RESERVED_DISPATCH_NAMES)

        for function in functions:
            roled = [
                RoledParameter(param, assign_role(param, main_struct, self.config))
                for param in function.parameters
            ]

            for entry in roled:
                if entry.role is ParameterRole.AUXILIARY_OBJECT:
                    self._register_auxiliary(catalog, entry.parameter, taken)

            action = GovernableAction(
                name=function.name,
                parameters=[e.parameter for e in roled if e.role is ParameterRole.VALUE],
                description=function.description,
                source_parameters=roled,
            )
            catalog.actions.append(action)
            logger.debug(
                "Action %s: %d value parameter(s), roles %s",
                action.name,
                len(action.parameters),
                [e.role.value for e in roled],
            )

        catalog.needs_clock = any(a.needs_clock for a in catalog.actions)

        logger.info(
            "Built catalog: %d action(s), %d shared object parameter(s)",
            len(catalog.actions),
            len(catalog.additional_params),
        )
        return catalog

    def _register_auxiliary(
        self,
        catalog: ActionCatalog,
        parameter: ParameterInfo,
        taken: set[str],
    ) -> AdditionalParamInfo:
        """Add an object parameter to the dispatch slots, or reuse an existing one."""
        type_key = normalize_type_key(parameter.type)
        existing = catalog.additional_param_for(type_key)

        if existing is not None:
            declared = existing.type.replace(" ", "")
            is_shared_ref = declared.startswith("&") and not declared.startswith("&mut")
            if parameter.is_mutable_reference and is_shared_ref:
                existing.type = f"&mut {strip_reference(existing.type)}"
            return existing

        name = unique_name(parameter.name, taken)
        taken.add(name)
        shared = AdditionalParamInfo(
            name=name,
            type=parameter.type,
            origin=parameter,
            type_key=type_key,
        )
        catalog.additional_params.append(shared)
        return shared


def build_catalog(
    functions: list[FunctionInfo],
    main_struct: str = "AppObject",
    config: CatalogConfig | None = None,
    local_types: tuple[str, ...] = (),
) -> ActionCatalog:
    """Build an action catalog.

    Convenience function wrapping CatalogBuilder.

    Args:
        functions: Governable functions in declaration order
        main_struct: Name of the contract's primary state struct
        config: Parameter role markers
        local_types: Struct names declared by the analyzed module

    Returns:
        ActionCatalog
    """
    return CatalogBuilder(config).build(functions, main_struct, local_types)
