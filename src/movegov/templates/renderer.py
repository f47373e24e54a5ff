"""Move module generation from an action catalog.

Renders the governance module and its governance token with Jinja2.
All output is deterministic: the context is built from ordered lists only,
so identical input always produces byte-identical text.

The governance module contains, in fixed order:
1. Boilerplate constants, records and events (catalog independent)
2. The ``ProposalKind`` union, one variant per catalog action
3. ``create_proposal`` with a discriminant switch over the variants
4. Voting, finalization and cancellation
5. ``execute_proposal`` dispatching each variant to its original function
6. Read-only getters
"""

import logging
from dataclasses import dataclass
from typing import Any

from jinja2 import Environment, PackageLoader

from movegov import __version__
from movegov.analyzers.base import EmptyCatalogError
from movegov.analyzers.catalog import RESERVED_DISPATCH_NAMES
from movegov.analyzers.classifier import normalize_type_key
from movegov.models.contract import ModuleInfo
from movegov.models.governance import ActionCatalog, GovernableAction, ParameterRole
from movegov.renderers.filters import join_fields, move_string, qualify_type, variant_name

logger = logging.getLogger(__name__)

TOKEN_DECIMALS = 8
TOKEN_SYMBOL = "GOV"


@dataclass
class GeneratedModules:
    """The pair of Move modules produced for one catalog.

    Attributes:
        governance: Governance module text
        token: Governance token module text
    """

    governance: str
    token: str


class GovernanceRenderer:
    """Renders governance and token modules for a governed Move module.

    Usage:
        renderer = GovernanceRenderer()
        text = renderer.render_governance(module_info, catalog)
    """

    def __init__(self) -> None:
        self._env = Environment(
            loader=PackageLoader("movegov", "templates"),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        self._env.filters["move_string"] = move_string

    def render_governance(
        self,
        module_info: ModuleInfo,
        catalog: ActionCatalog,
        main_struct: str | None = None,
        template_name: str = "governance.move.j2",
    ) -> str:
        """Render the governance module.

        Args:
            module_info: Identity of the governed module
            catalog: Governable actions
            main_struct: Primary state struct (defaults to the catalog's)
            template_name: Template file to use

        Returns:
            Move source text

        Raises:
            EmptyCatalogError: If the catalog has no actions
        """
        if not catalog.actions:
            raise EmptyCatalogError()

        template = self._env.get_template(template_name)
        context = self._build_governance_context(
            module_info, catalog, main_struct or catalog.main_struct
        )
        rendered = template.render(**context)

        logger.info(
            "Rendered governance module for %s (%d actions, %d characters)",
            module_info.qualified_name,
            len(catalog.actions),
            len(rendered),
        )
        return rendered

    def render_token(
        self,
        module_info: ModuleInfo,
        template_name: str = "govtoken.move.j2",
    ) -> str:
        """Render the governance token module."""
        template = self._env.get_template(template_name)
        rendered = template.render(
            version=__version__,
            package=module_info.package_name,
            module=module_info.module_name,
            module_path=module_info.qualified_name,
            decimals=TOKEN_DECIMALS,
            symbol=TOKEN_SYMBOL,
            token_name=f"{module_info.module_name} Governance Token",
            token_description=f"Voting power for {module_info.qualified_name} governance",
        )
        logger.debug("Rendered token module for %s", module_info.qualified_name)
        return rendered

    def render(
        self,
        module_info: ModuleInfo,
        catalog: ActionCatalog,
        main_struct: str | None = None,
    ) -> GeneratedModules:
        """Render both modules.

        Raises:
            EmptyCatalogError: If the catalog has no actions
        """
        return GeneratedModules(
            governance=self.render_governance(module_info, catalog, main_struct),
            token=self.render_token(module_info),
        )

    def _build_governance_context(
        self,
        module_info: ModuleInfo,
        catalog: ActionCatalog,
        main_struct: str,
    ) -> dict[str, Any]:
        """Build the template rendering context.

        Args:
            module_info: Identity of the governed module
            catalog: Governable actions
            main_struct: Primary state struct name

        Returns:
            Template context dictionary
        """
        module = module_info.module_name
        local_types = catalog.local_types

        dispatch_params = [
            {"name": p.name, "type": qualify_type(p.type, module, local_types)}
            for p in catalog.additional_params
        ]
        if catalog.needs_clock:
            dispatch_params.append({"name": "clock", "type": "&Clock"})

        # Names a variant binding must not shadow inside execute_proposal
        scope = set(RESERVED_DISPATCH_NAMES) | {p.name for p in catalog.additional_params}

        variants: list[dict[str, Any]] = []
        creation_params: list[dict[str, str]] = []
        creation_arms: list[dict[str, Any]] = []
        dispatch_arms: list[dict[str, str]] = []

        for index, action in enumerate(catalog.actions):
            tag = variant_name(action.name)
            fields = join_fields(action.parameters, module, local_types)

            variants.append(
                {
                    "name": tag,
                    "declaration": f"{tag} {{ {fields} }}" if action.parameters else tag,
                    "description": action.description or action.name,
                }
            )

            for param in action.parameters:
                creation_params.append(
                    {
                        "name": f"{param.name}_{index}",
                        "type": qualify_type(param.type, module, local_types),
                        "action": action.name,
                    }
                )

            assignments = ", ".join(f"{p.name}: {p.name}_{index}" for p in action.parameters)
            creation_arms.append(
                {
                    "index": index,
                    "variant": tag,
                    "construct": (
                        f"ProposalKind::{tag} {{ {assignments} }}"
                        if action.parameters
                        else f"ProposalKind::{tag}"
                    ),
                }
            )

            dispatch_arms.append(self._dispatch_arm(module, action, catalog, scope))

        return {
            "version": __version__,
            "package": module_info.package_name,
            "module": module,
            "module_path": module_info.qualified_name,
            "main_struct": main_struct,
            "main_struct_type": f"{module_info.package_name}::{module}::{main_struct}",
            "variants": variants,
            "max_kind": len(catalog.actions) - 1,
            "creation_params": creation_params,
            "creation_arms": creation_arms,
            "dispatch_params": dispatch_params,
            "dispatch_arms": dispatch_arms,
        }

    def _dispatch_arm(
        self,
        module: str,
        action: GovernableAction,
        catalog: ActionCatalog,
        scope: set[str],
    ) -> dict[str, str]:
        """Build one ``execute_proposal`` match arm.

        The original parameter order is rebuilt from each parameter's role.
        """
        tag = variant_name(action.name)

        binders: dict[str, str] = {}
        bindings: list[str] = []
        for param in action.parameters:
            if param.name in scope:
                binders[param.name] = f"{param.name}_value"
                bindings.append(f"{param.name}: {binders[param.name]}")
            else:
                binders[param.name] = param.name
                bindings.append(param.name)

        arguments: list[str] = []
        for entry in action.source_parameters:
            if entry.role is ParameterRole.CONTEXT:
                arguments.append("ctx")
            elif entry.role is ParameterRole.CLOCK:
                arguments.append("clock")
            elif entry.role is ParameterRole.MAIN_STATE:
                arguments.append("app_object")
            elif entry.role is ParameterRole.GOVERNANCE_SYSTEM:
                arguments.append("self")
            elif entry.role is ParameterRole.AUXILIARY_OBJECT:
                shared = catalog.additional_param_for(normalize_type_key(entry.type))
                arguments.append(shared.name if shared is not None else entry.name)
            else:
                arguments.append(f"*{binders[entry.name]}")

        pattern = f"ProposalKind::{tag}"
        if bindings:
            pattern += f" {{ {', '.join(bindings)} }}"

        return {
            "variant": tag,
            "pattern": pattern,
            "function": action.name,
            "call": f"{module}::{action.name}({', '.join(arguments)})",
        }


def generate_governance_contract(
    module_info: ModuleInfo,
    catalog: ActionCatalog,
    main_struct: str | None = None,
) -> str:
    """Generate the governance module text for a catalog.

    Convenience function wrapping GovernanceRenderer.

    Raises:
        EmptyCatalogError: If the catalog has no actions
    """
    return GovernanceRenderer().render_governance(module_info, catalog, main_struct)


def generate_token_contract(module_info: ModuleInfo) -> str:
    """Generate the governance token module text."""
    return GovernanceRenderer().render_token(module_info)
