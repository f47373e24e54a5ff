"""movegov - Governance code generator for Move contracts.

movegov reads a Move module (source text, or the normalized descriptor of a
published package), picks the entry points that are safe to gate behind a
vote, and generates a proposal/voting module that dispatches to them.

Pipeline:
- Scan: Lexical extraction of module, function and struct facts
- Classify: Strict or broad governability policy per function
- Catalog: Ordered actions with shared dispatch parameters
- Generate: Governance and governance-token Move modules
"""

__version__ = "0.1.0"
__author__ = "movegov Contributors"
