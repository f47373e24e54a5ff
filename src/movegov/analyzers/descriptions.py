"""Function description extraction.

A function's description is, in order of preference:
1. The ``//`` or ``///`` comment block directly above its declaration
2. A phrase inferred from a keyword in its name, annotated with the
   authorisation style its body uses
3. A generic fallback
"""

import re

from movegov.models.contract import ParameterInfo

# Ordered: the first keyword contained in the function name wins
FUNCTION_DESCRIPTORS: tuple[tuple[str, str], ...] = (
    # State modification functions
    ("set", "Sets or updates a value"),
    ("update", "Updates a value or state"),
    ("change", "Changes a value or state"),
    ("modify", "Modifies a value or state"),
    ("create", "Creates a new resource or entry"),
    ("add", "Adds a new item or value"),
    ("remove", "Removes an item or value"),
    ("delete", "Deletes an item or resource"),
    ("increment", "Increments a counter or value"),
    ("decrement", "Decrements a counter or value"),
    # Governance/admin functions
    ("pause", "Pauses functionality or operations"),
    ("unpause", "Resumes functionality or operations"),
    ("freeze", "Freezes functionality or operations"),
    ("unfreeze", "Unfreezes functionality or operations"),
    ("enable", "Enables a feature or functionality"),
    ("disable", "Disables a feature or functionality"),
    ("configure", "Configures parameters or settings"),
    ("register", "Registers a new component or entity"),
    ("unregister", "Unregisters a component or entity"),
    ("setup", "Sets up or initializes functionality"),
    ("mint", "Creates new tokens or assets"),
    ("burn", "Destroys tokens or assets"),
    ("transfer", "Transfers ownership or control"),
    ("withdraw", "Withdraws funds or resources"),
    ("deposit", "Deposits funds or resources"),
    ("stake", "Stakes tokens or resources"),
    ("unstake", "Unstakes tokens or resources"),
    ("claim", "Claims rewards or resources"),
    ("propose", "Creates a governance proposal"),
    ("vote", "Casts a vote on a proposal"),
    ("execute", "Executes an approved action"),
    ("cancel", "Cancels an operation or action"),
    ("admin", "Administrative function"),
    ("govern", "Governance-related function"),
    ("list", "Lists an item or resource"),
    ("buy", "Purchases an item or resource"),
    ("sell", "Sells an item or resource"),
)

# Descriptor vocabulary for functions read from a normalized-module descriptor
SIGNATURE_DESCRIPTORS: tuple[tuple[str, str], ...] = (
    ("create", "Creates a new resource or entity"),
    ("donate", "Makes a donation to the campaign"),
    ("transfer_funds", "Transfers funds from the campaign"),
    ("transfer_governance", "Transfers governance capability to another address"),
    ("withdraw_funds", "Withdraws funds from the campaign"),
    ("set", "Sets or updates a value"),
    ("update", "Updates a value or state"),
    ("change", "Changes a value or state"),
    ("modify", "Modifies a value or state"),
    ("add", "Adds a new item or value"),
    ("remove", "Removes an item or value"),
    ("delete", "Deletes an item or resource"),
    ("pause", "Pauses functionality or operations"),
    ("unpause", "Resumes functionality or operations"),
    ("enable", "Enables a feature or functionality"),
    ("disable", "Disables a feature or functionality"),
    ("mint", "Creates new tokens or assets"),
    ("burn", "Destroys tokens or assets"),
)

DEFAULT_DESCRIPTION = "Executes a state change in the contract"
GOVERNANCE_SUFFIX = "(requires governance approval)"

_AUTHORIZED_ASSERT = re.compile(r"assert!\s*\(\s*is_authorized")
_ADMIN_SENDER_ASSERT = re.compile(
    r"assert!\s*\(\s*(?:tx_context::)?sender\s*\(\s*ctx\s*\)\s*==\s*[A-Za-z0-9_]+\.admin"
)
_ATTRIBUTE_LINE = re.compile(r"^#\[.*\]$")


def extract_doc_comment(source: str, offset: int) -> str | None:
    """Collect the comment block directly above a declaration.

    Attribute lines (``#[...]``) between the comments and the declaration
    are skipped.

    Args:
        source: Raw Move source
        offset: Index where the declaration starts

    Returns:
        Comment lines joined with spaces, or None if there is no comment
    """
    line_start = source.rfind("\n", 0, offset) + 1
    preceding = source[:line_start].split("\n")
    if preceding and preceding[-1] == "":
        preceding.pop()

    comment_lines: list[str] = []
    for line in reversed(preceding):
        stripped = line.strip()
        if stripped.startswith("//"):
            comment_lines.append(stripped.lstrip("/").strip())
        elif _ATTRIBUTE_LINE.match(stripped) and not comment_lines:
            continue
        else:
            break

    text = " ".join(line for line in reversed(comment_lines) if line)
    return text or None


def infer_description(
    function_name: str,
    body: str | None = None,
    descriptors: tuple[tuple[str, str], ...] = FUNCTION_DESCRIPTORS,
) -> str:
    """Infer a description from the function name and body.

    Args:
        function_name: Function name
        body: Function body, used to detect authorisation checks
        descriptors: Ordered (keyword, description) pairs

    Returns:
        Description string
    """
    body = body or ""
    requires_capability = bool(_AUTHORIZED_ASSERT.search(body))
    requires_admin = bool(_ADMIN_SENDER_ASSERT.search(body))

    lowered = function_name.lower()
    for keyword, description in descriptors:
        if keyword in lowered:
            if requires_capability:
                return f"{description} {GOVERNANCE_SUFFIX}"
            elif requires_admin:
                return f"{description} (admin-only function)"
            return f"{description} (auto-detected)"

    if requires_capability:
        return f"Executes a governance-controlled operation {GOVERNANCE_SUFFIX}"
    elif requires_admin:
        return "Executes an admin-only operation"

    return DEFAULT_DESCRIPTION


def describe_function(
    function_name: str,
    source: str,
    offset: int,
    body: str | None = None,
) -> str:
    """Describe a scanned function: doc comment first, inference second."""
    return extract_doc_comment(source, offset) or infer_description(function_name, body)


def describe_signature(
    function_name: str,
    parameters: list[ParameterInfo],
    descriptors: tuple[tuple[str, str], ...] = SIGNATURE_DESCRIPTORS,
) -> str:
    """Describe a function known only by name and parameter types.

    Exact keyword matches win over substring matches. A governance
    capability parameter adds the governance-approval note.
    """
    governed = any("GovernanceCapability" in p.type for p in parameters)
    table = dict(descriptors)

    if function_name in table:
        return table[function_name]

    lowered = function_name.lower()
    for keyword, description in descriptors:
        if keyword in lowered:
            return f"{description} {GOVERNANCE_SUFFIX}" if governed else description

    if governed:
        return f"Executes a governance-controlled operation {GOVERNANCE_SUFFIX}"
    return DEFAULT_DESCRIPTION
