"""Governability classification for contract functions.

A function is scored on independent lexical signals:
- Name keyword: the name contains a mutation verb (``set``, ``mint``, ...)
- Capability guard: a parameter looks like an admin/capability object
- Governance context: a parameter looks like a governance object
- State mutation: the body assigns, accesses fields or calls modules
- Mutating call: the body contains a known Sui mutation call
- Entry: the function is ``public entry``
- Getter: the name starts with ``get_``, ``is_`` or ``has_``

Two policies combine the signals differently and are selected by the caller:

- strict: ``(keyword or mutating call) and mutation and not capability and
  params <= max``, entry functions only
- broad: strict, or ``keyword and mutation``, or ``governance context
  and mutation``, or ``entry and mutation``

Getters are rejected by both. A capability-guarded function is rejected by
strict but a governance-typed parameter qualifies it under broad.

This module also assigns each parameter the role it plays when an action
is dispatched (context, clock, main state, governance system, auxiliary
object, or plain value).
"""

import logging
import re
from dataclasses import dataclass

from movegov.config import CatalogConfig, ClassifierConfig
from movegov.models.contract import ContractFacts, FunctionInfo, ParameterInfo
from movegov.models.governance import ClassificationPolicy, ParameterRole

logger = logging.getLogger(__name__)

_STATE_MUTATION_MARKERS = (".", "=", "::")
_GENERIC_ARGS = re.compile(r"<.*>", re.DOTALL)


@dataclass(frozen=True)
class FunctionSignals:
    """Signals observed for one function.

    Attributes:
        has_keyword: Name contains a mutation verb for the active policy
        requires_capability: A parameter looks like an admin/capability guard
        has_governance_context: A parameter or the name refers to governance
        has_state_mutation: The body appears to change state
        has_mutating_call: The body calls a known mutating framework function
        is_entry: Declared ``public entry``
        is_getter: Name starts with a getter prefix
        parameter_count: Number of declared parameters
    """

    has_keyword: bool
    requires_capability: bool
    has_governance_context: bool
    has_state_mutation: bool
    has_mutating_call: bool
    is_entry: bool
    is_getter: bool
    parameter_count: int


def find_function_body(source: str, function_name: str) -> str | None:
    """Locate a function body in source text by name.

    Used when a FunctionInfo carries no body of its own. The body ends at the
    first closing brace, matching the scanner's best-effort contract.
    """
    pattern = re.compile(
        rf"\bfun\s+{re.escape(function_name)}\s*(?:<[^(]*?>)?\s*\([^)]*\)[^{{]*\{{([\s\S]*?)\}}"
    )
    match = pattern.search(source)
    return match.group(1) if match else None


def compute_signals(
    function: FunctionInfo,
    source: str | None = None,
    policy: ClassificationPolicy = ClassificationPolicy.STRICT,
    config: ClassifierConfig | None = None,
) -> FunctionSignals:
    """Compute the classification signals for a function.

    Args:
        function: Function to score
        source: Full contract text, consulted when the function has no body
        policy: Policy whose keyword vocabulary applies
        config: Heuristic vocabularies (defaults if None)

    Returns:
        FunctionSignals
    """
    config = config or ClassifierConfig()
    name = function.name.lower()

    keywords = (
        config.strict_keywords if policy is ClassificationPolicy.STRICT else config.broad_keywords
    )
    has_keyword = any(keyword in name for keyword in keywords)

    requires_capability = any(
        any(marker in param.type for marker in config.capability_type_markers)
        or any(marker in param.name for marker in config.capability_name_markers)
        for param in function.parameters
    )

    has_governance_context = "governance" in name or any(
        any(marker in param.type for marker in config.governance_type_markers)
        or any(marker in param.name.lower() for marker in config.governance_name_markers)
        for param in function.parameters
    )

    body = function.body
    if body is None and source is not None:
        body = find_function_body(source, function.name)

    if body is None:
        # No source text (descriptor-derived function): mutation cannot be observed
        has_state_mutation = True
        has_mutating_call = False
    else:
        has_mutating_call = any(call in body for call in config.mutating_calls)
        has_state_mutation = has_mutating_call or any(
            marker in body for marker in _STATE_MUTATION_MARKERS
        )

    return FunctionSignals(
        has_keyword=has_keyword,
        requires_capability=requires_capability,
        has_governance_context=has_governance_context,
        has_state_mutation=has_state_mutation,
        has_mutating_call=has_mutating_call,
        is_entry=function.is_entry,
        is_getter=function.name.startswith(config.getter_prefixes),
        parameter_count=len(function.parameters),
    )


def is_strict_governable(signals: FunctionSignals, config: ClassifierConfig) -> bool:
    """Apply the strict policy to computed signals."""
    if signals.is_getter or not signals.is_entry:
        return False
    return (
        (signals.has_keyword or signals.has_mutating_call)
        and signals.has_state_mutation
        and not signals.requires_capability
        and signals.parameter_count <= config.max_parameters
    )


def is_broad_governable(
    strict_signals: FunctionSignals,
    broad_signals: FunctionSignals,
    config: ClassifierConfig,
) -> bool:
    """Apply the broad policy.

    Args:
        strict_signals: Signals computed with the strict vocabulary
        broad_signals: Signals computed with the broad vocabulary
        config: Heuristic vocabularies
    """
    if broad_signals.is_getter:
        return False
    if is_strict_governable(strict_signals, config):
        return True
    if broad_signals.has_keyword and broad_signals.has_state_mutation:
        return True
    if broad_signals.has_governance_context and broad_signals.has_state_mutation:
        return True
    return broad_signals.is_entry and broad_signals.has_state_mutation


def classify(
    function: FunctionInfo,
    source: str | None = None,
    policy: ClassificationPolicy = ClassificationPolicy.STRICT,
    config: ClassifierConfig | None = None,
) -> bool:
    """Decide whether a function is a governable action.

    Pure function of its inputs: repeated calls give the same answer.

    Args:
        function: Function to classify
        source: Full contract text (used when the function has no body)
        policy: STRICT or BROAD
        config: Heuristic vocabularies (defaults if None)

    Returns:
        True if the function qualifies under the policy
    """
    config = config or ClassifierConfig()
    strict_signals = compute_signals(function, source, ClassificationPolicy.STRICT, config)

    if policy is ClassificationPolicy.STRICT:
        result = is_strict_governable(strict_signals, config)
        logger.debug("strict %s -> %s (%s)", function.name, result, strict_signals)
        return result

    broad_signals = compute_signals(function, source, ClassificationPolicy.BROAD, config)
    result = is_broad_governable(strict_signals, broad_signals, config)
    logger.debug("broad %s -> %s (%s)", function.name, result, broad_signals)
    return result


def classify_functions(
    facts: ContractFacts,
    policy: ClassificationPolicy = ClassificationPolicy.STRICT,
    config: ClassifierConfig | None = None,
) -> list[FunctionInfo]:
    """Classify every function of a scan and return the governable ones.

    Sets ``governance_candidate`` on each function of ``facts``.

    Args:
        facts: Facts from one scan (not shared across calls)
        policy: STRICT or BROAD
        config: Heuristic vocabularies

    Returns:
        Governable functions in declaration order
    """
    governable: list[FunctionInfo] = []
    for function in facts.functions:
        function.governance_candidate = classify(function, facts.source, policy, config)
        if function.governance_candidate:
            governable.append(function)

    logger.info(
        "Classified %d of %d functions as governable (%s policy)",
        len(governable),
        len(facts.functions),
        policy.value,
    )
    return governable


# =============================================================================
# Parameter roles
# =============================================================================


def strip_reference(type_text: str) -> str:
    """Remove leading ``&`` / ``&mut`` markers from a type."""
    stripped = type_text.strip()
    if stripped.startswith("&"):
        stripped = stripped[1:].lstrip()
        if stripped.startswith("mut "):
            stripped = stripped[4:].lstrip()
    return stripped


def base_type_name(type_text: str) -> str:
    """Return the bare struct name of a type.

    ``&mut 0x2::coin::Coin<SUI>`` becomes ``Coin``.
    """
    bare = _GENERIC_ARGS.sub("", strip_reference(type_text)).strip()
    return bare.rsplit("::", 1)[-1].strip()


def normalize_type_key(type_text: str) -> str:
    """Return the de-duplication key for an object type.

    The key is the lower-cased full type path with reference markers and
    whitespace removed, so ``&AdminCap`` and ``&mut AdminCap`` share a key.
    """
    return "".join(strip_reference(type_text).split()).lower()


def assign_role(
    parameter: ParameterInfo,
    main_struct: str,
    config: CatalogConfig | None = None,
) -> ParameterRole:
    """Decide the role a parameter plays in generated dispatch code.

    Args:
        parameter: Parameter to inspect
        main_struct: Name of the contract's primary state struct
        config: Role markers (defaults if None)

    Returns:
        ParameterRole
    """
    config = config or CatalogConfig()
    lowered = parameter.type.lower()

    if any(marker in lowered for marker in config.context_markers):
        return ParameterRole.CONTEXT
    if any(marker in lowered for marker in config.clock_markers):
        return ParameterRole.CLOCK

    base = base_type_name(parameter.type)
    if base in config.governance_system_types:
        return ParameterRole.GOVERNANCE_SYSTEM
    if base == main_struct:
        return ParameterRole.MAIN_STATE
    if parameter.is_reference or any(m in parameter.type for m in config.capability_markers):
        return ParameterRole.AUXILIARY_OBJECT
    return ParameterRole.VALUE
