"""Governance generation pipeline orchestrator.

Composes the analysis stages into one pass:

    facts (scan or descriptor) -> classify -> catalog -> generate

Driving modes:
- ``from_source``: facts come from Move source text
- ``from_descriptor``: facts come from a normalized-module descriptor
- ``from_package``: fetches the descriptor over JSON-RPC, then as above
- ``discover``: lists every public function without the governability filter

Each call builds its own facts, catalog and context; nothing is shared
between calls, so one pipeline may serve concurrent callers.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from movegov.analyzers.base import EmptyCatalogError, UnknownActionError
from movegov.analyzers.catalog import CatalogBuilder
from movegov.analyzers.classifier import classify_functions
from movegov.analyzers.normalized import NormalizedModuleReader
from movegov.analyzers.scanner import MoveSourceScanner
from movegov.config import MoveGovConfig
from movegov.models.contract import ContractFacts, FunctionInfo
from movegov.models.governance import ClassificationPolicy, ParseResult
from movegov.rpc.client import SuiRPCClient
from movegov.templates.renderer import GovernanceRenderer
from movegov.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PipelineOptions:
    """Options for controlling one pipeline run.

    Attributes:
        policy: Classification policy (config default if None)
        selected_actions: Explicit action names; bypasses the classifier
        main_struct: Override for the primary state struct name
        module_name: Module to read from a multi-module descriptor
        generate: Render the Move modules (False stops after the catalog)
    """

    policy: ClassificationPolicy | None = None
    selected_actions: list[str] = field(default_factory=list)
    main_struct: str | None = None
    module_name: str | None = None
    generate: bool = True


class GovernancePipeline:
    """Runs scan, classification, catalog building and generation.

    Usage:
        pipeline = GovernancePipeline(config)
        result = pipeline.from_source(contract_text)
        print(result.governance_contract)
    """

    def __init__(self, config: MoveGovConfig | None = None) -> None:
        """Initialize the pipeline.

        Args:
            config: movegov configuration (uses defaults if None)
        """
        self.config = config or MoveGovConfig()
        self._scanner = MoveSourceScanner()
        self._catalog_builder = CatalogBuilder(self.config.catalog)
        self._renderer = GovernanceRenderer()

    def from_source(
        self,
        contract_text: str,
        options: PipelineOptions | None = None,
    ) -> ParseResult:
        """Generate governance for Move source text.

        Args:
            contract_text: Raw Move source
            options: Run options

        Returns:
            ParseResult with the catalog actions and generated modules

        Raises:
            ModuleHeaderNotFoundError: If the source has no module header
            EmptyCatalogError: If no action qualifies and generation is on
            CatalogConflictError: If action names collide
            UnknownActionError: If a selected action does not exist
        """
        facts = self._scanner.extract(contract_text)
        return self._run(facts, options or PipelineOptions())

    def from_descriptor(
        self,
        modules: dict[str, Any],
        options: PipelineOptions | None = None,
    ) -> ParseResult:
        """Generate governance for a normalized package descriptor.

        Args:
            modules: Package descriptor (module name -> module descriptor)
            options: Run options (``module_name`` picks the module)

        Returns:
            ParseResult

        Raises:
            DescriptorError: If the descriptor is empty or lacks the module
            EmptyCatalogError: If no action qualifies and generation is on
        """
        options = options or PipelineOptions()
        facts = NormalizedModuleReader(options.module_name).extract(modules)
        return self._run(facts, options)

    def from_package(
        self,
        package_id: str,
        options: PipelineOptions | None = None,
        client: SuiRPCClient | None = None,
    ) -> ParseResult:
        """Fetch a package descriptor over JSON-RPC and generate governance.

        The fetch is the only I/O and happens before the pure pipeline runs.

        Args:
            package_id: Package object ID
            options: Run options
            client: RPC client (one is created from config if None)

        Returns:
            ParseResult

        Raises:
            RPCError: If the fetch fails
        """
        if client is not None:
            modules = client.get_normalized_move_modules_by_package(package_id)
        else:
            with SuiRPCClient(self.config.rpc) as owned_client:
                modules = owned_client.get_normalized_move_modules_by_package(package_id)

        return self.from_descriptor(modules, options)

    def discover(self, contract_text: str) -> ParseResult:
        """List every public function without the governability filter.

        The entry points are meant for manual curation; pass the chosen
        names back as ``PipelineOptions.selected_actions``.

        Raises:
            ModuleHeaderNotFoundError: If the source has no module header
        """
        facts = self._scanner.extract(contract_text)
        logger.info(
            "Discovered %d public function(s) in %s",
            len(facts.functions),
            facts.module.qualified_name,
        )
        return ParseResult(
            module_info=facts.module,
            entry_points=list(facts.functions),
            main_struct=facts.main_struct_name(),
            facts=facts,
        )

    def analyze(
        self,
        contract_text: str,
        policy: ClassificationPolicy | None = None,
    ) -> ParseResult:
        """Scan and classify without generating code."""
        return self.from_source(contract_text, PipelineOptions(policy=policy, generate=False))

    def _select(self, facts: ContractFacts, options: PipelineOptions) -> list[FunctionInfo]:
        """Pick the functions that become catalog actions."""
        if options.selected_actions:
            known = {f.name: f for f in facts.functions}
            unknown = [name for name in options.selected_actions if name not in known]
            if unknown:
                raise UnknownActionError(unknown)

            selected = [known[name] for name in options.selected_actions]
            for function in selected:
                function.governance_candidate = True
            logger.info("Using %d user-selected action(s)", len(selected))
            return selected

        policy = options.policy or self.config.classifier.policy
        return classify_functions(facts, policy, self.config.classifier)

    def _run(self, facts: ContractFacts, options: PipelineOptions) -> ParseResult:
        """Run classification, catalog building and generation on facts."""
        main_struct = options.main_struct or facts.main_struct_name()
        functions = self._select(facts, options)

        catalog = self._catalog_builder.build(
            functions,
            main_struct=main_struct,
            local_types=tuple(s.name for s in facts.structs),
        )

        result = ParseResult(
            module_info=facts.module,
            governable_actions=list(catalog.actions),
            main_struct=main_struct,
            facts=facts,
        )

        if not options.generate:
            return result

        if not catalog:
            raise EmptyCatalogError()

        modules = self._renderer.render(facts.module, catalog, main_struct)
        result.governance_contract = modules.governance
        result.token_contract = modules.token

        logger.structured(
            logging.INFO,
            f"Generated governance for {facts.module.qualified_name}",
            module=facts.module.qualified_name,
            actions=[a.name for a in catalog.actions],
            main_struct=main_struct,
        )
        return result
