"""movegov configuration system.

Configuration is YAML-based with minimal CLI overrides (--policy, --output, --rpc-url).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.movegov/config.yaml
3. ./movegov.yaml

Every vocabulary the analyzers use lives here and is passed into each call
explicitly; the analyzers hold no module-level tunables.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from movegov.models.governance import ClassificationPolicy

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass(frozen=True)
class OutputConfig:
    """Output configuration.

    Attributes:
        directory: Directory generated modules are written to
        governance_filename: File name for the governance module
        token_filename: File name for the governance token module
    """

    directory: str = "."
    governance_filename: str = "generated_governance.move"
    token_filename: str = "generated_govtoken.move"


@dataclass(frozen=True)
class ClassifierConfig:
    """Vocabularies and limits for the governability heuristics.

    Attributes:
        policy: Default policy (strict or broad)
        max_parameters: Strict policy rejects functions with more parameters
        strict_keywords: Mutation verbs recognised by the strict policy
        broad_keywords: Mutation verbs recognised by the broad policy
        capability_type_markers: Type fragments marking an already-gated function
        capability_name_markers: Parameter-name fragments marking the same
        governance_type_markers: Type fragments marking a governance parameter
        governance_name_markers: Parameter-name fragments marking the same
        getter_prefixes: Function-name prefixes that are never governable
        mutating_calls: Call fragments that always count as state mutation
    """

    policy: ClassificationPolicy = ClassificationPolicy.STRICT
    max_parameters: int = 5
    strict_keywords: tuple[str, ...] = (
        "set",
        "update",
        "change",
        "modify",
        "create",
        "add",
        "remove",
        "delete",
        "mint",
        "burn",
        "transfer",
        "increment",
        "decrement",
        "pause",
        "toggle",
    )
    broad_keywords: tuple[str, ...] = (
        "set",
        "update",
        "change",
        "modify",
        "create",
        "add",
        "remove",
        "delete",
        "increment",
        "decrement",
        "pause",
        "unpause",
        "toggle",
        "enable",
        "disable",
        "configure",
        "register",
        "unregister",
    )
    capability_type_markers: tuple[str, ...] = ("Cap", "Admin")
    capability_name_markers: tuple[str, ...] = ("admin", "authority")
    governance_type_markers: tuple[str, ...] = ("Governance", "Gov")
    governance_name_markers: tuple[str, ...] = ("governance", "gov")
    getter_prefixes: tuple[str, ...] = ("get_", "is_", "has_")
    mutating_calls: tuple[str, ...] = (
        "table::add",
        "table::remove",
        "transfer::transfer",
        "transfer::public_transfer",
        "dynamic_field::add",
        "dynamic_field::remove",
    )

    def __post_init__(self) -> None:
        """Validate classifier configuration."""
        if self.max_parameters < 1:
            raise ValueError(f"max_parameters must be positive (got {self.max_parameters})")


@dataclass(frozen=True)
class CatalogConfig:
    """Markers used to assign parameter roles while building a catalog.

    Attributes:
        context_markers: Lower-case type fragments of the transaction context
        clock_markers: Lower-case type fragments of the clock object
        governance_system_types: Base type names of the governance system object
        capability_markers: Type fragments that make a by-value parameter an object
    """

    context_markers: tuple[str, ...] = ("txcontext",)
    clock_markers: tuple[str, ...] = ("clock",)
    governance_system_types: tuple[str, ...] = ("GovernanceSystem",)
    capability_markers: tuple[str, ...] = ("Cap",)


@dataclass(frozen=True)
class RPCConfig:
    """Blockchain read endpoint configuration.

    Attributes:
        url: JSON-RPC endpoint URL
        timeout: Request timeout in seconds
    """

    url: str = "https://rpc-testnet.suiscan.xyz:443"
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate RPC configuration."""
        if self.timeout <= 0:
            raise ValueError(f"RPC timeout must be positive (got {self.timeout})")


@dataclass
class MoveGovConfig:
    """Top-level movegov configuration.

    Attributes:
        output: Output location and file names
        classifier: Governability heuristics
        catalog: Parameter role markers
        rpc: Blockchain read endpoint
    """

    output: OutputConfig = field(default_factory=OutputConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    rpc: RPCConfig = field(default_factory=RPCConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax, e.g. ``url: "${SUI_RPC_URL}"``.

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.movegov/config.yaml
    2. ./movegov.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".movegov" / "config.yaml",
        start_path / "movegov.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def parse_policy(value: str | ClassificationPolicy) -> ClassificationPolicy:
    """Parse a policy name into a ClassificationPolicy.

    Raises:
        ValueError: If the name is not a known policy
    """
    if isinstance(value, ClassificationPolicy):
        return value
    try:
        return ClassificationPolicy(str(value).strip().lower())
    except ValueError:
        valid = {p.value for p in ClassificationPolicy}
        raise ValueError(f"Invalid classification policy: {value}. Valid: {valid}") from None


def _vocabulary(data: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Read a list-valued option as a tuple, keeping the default when absent."""
    if key not in data or data[key] is None:
        return default
    values = data[key]
    if isinstance(values, str):
        values = [values]
    return tuple(str(v) for v in values)


def load_config_from_dict(data: dict[str, Any]) -> MoveGovConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        MoveGovConfig instance
    """
    data = substitute_env_vars(data)

    config = MoveGovConfig()

    if "output" in data:
        output_data = data["output"] or {}
        defaults = config.output
        config.output = OutputConfig(
            directory=output_data.get("directory", defaults.directory),
            governance_filename=output_data.get(
                "governance_filename", defaults.governance_filename
            ),
            token_filename=output_data.get("token_filename", defaults.token_filename),
        )

    if "classifier" in data:
        cls_data = data["classifier"] or {}
        defaults = config.classifier
        config.classifier = ClassifierConfig(
            policy=parse_policy(cls_data.get("policy", defaults.policy)),
            max_parameters=int(cls_data.get("max_parameters", defaults.max_parameters)),
            strict_keywords=_vocabulary(cls_data, "strict_keywords", defaults.strict_keywords),
            broad_keywords=_vocabulary(cls_data, "broad_keywords", defaults.broad_keywords),
            capability_type_markers=_vocabulary(
                cls_data, "capability_type_markers", defaults.capability_type_markers
            ),
            capability_name_markers=_vocabulary(
                cls_data, "capability_name_markers", defaults.capability_name_markers
            ),
            governance_type_markers=_vocabulary(
                cls_data, "governance_type_markers", defaults.governance_type_markers
            ),
            governance_name_markers=_vocabulary(
                cls_data, "governance_name_markers", defaults.governance_name_markers
            ),
            getter_prefixes=_vocabulary(cls_data, "getter_prefixes", defaults.getter_prefixes),
            mutating_calls=_vocabulary(cls_data, "mutating_calls", defaults.mutating_calls),
        )

    if "catalog" in data:
        cat_data = data["catalog"] or {}
        defaults = config.catalog
        config.catalog = CatalogConfig(
            context_markers=_vocabulary(cat_data, "context_markers", defaults.context_markers),
            clock_markers=_vocabulary(cat_data, "clock_markers", defaults.clock_markers),
            governance_system_types=_vocabulary(
                cat_data, "governance_system_types", defaults.governance_system_types
            ),
            capability_markers=_vocabulary(
                cat_data, "capability_markers", defaults.capability_markers
            ),
        )

    if "rpc" in data:
        rpc_data = data["rpc"] or {}
        config.rpc = RPCConfig(
            url=rpc_data.get("url", config.rpc.url),
            timeout=float(rpc_data.get("timeout", config.rpc.timeout)),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> MoveGovConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        MoveGovConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = MoveGovConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# movegov configuration

# Where generated modules are written
output:
  directory: "."
  governance_filename: "generated_governance.move"
  token_filename: "generated_govtoken.move"

# Governability heuristics
classifier:
  policy: "strict"       # strict: gated/capability functions are skipped
                         # broad: governance-typed parameters qualify a function
  max_parameters: 5
  getter_prefixes: ["get_", "is_", "has_"]
  # strict_keywords: ["set", "update", "change", ...]
  # capability_type_markers: ["Cap", "Admin"]

# Parameter role markers used when building the action catalog
catalog:
  governance_system_types: ["GovernanceSystem"]
  capability_markers: ["Cap"]

# Blockchain read endpoint (fetch command)
rpc:
  url: "https://rpc-testnet.suiscan.xyz:443"
  # url: "${SUI_RPC_URL}"
  timeout: 30
'''
