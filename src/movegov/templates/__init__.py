"""movegov template rendering.

Jinja2-based rendering of the generated Move modules. Templates are
designed to produce identical output for identical input.
"""

from movegov.templates.renderer import (
    GeneratedModules,
    GovernanceRenderer,
    generate_governance_contract,
    generate_token_contract,
)

__all__ = [
    "GeneratedModules",
    "GovernanceRenderer",
    "generate_governance_contract",
    "generate_token_contract",
]
