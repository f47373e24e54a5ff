"""Lexical scanner for Move contract source text.

Extracts structural facts with independent, pattern-based extractors:
- Module header (``module pkg::name {`` or ``module pkg::name;``)
- Public functions with parameters, return type and body
- Structs with abilities and fields
- Constants, event structs and ``use`` imports

This is deliberately not a parser. Known limits:
- Struct field blocks are matched non-greedily, so a ``}`` inside a field
  block ends it early (Move field lists contain no braces in practice).
- Parameter lists end at the first ``)``.
- Positional structs (``struct S(u64)``) and ``use ... as alias`` are ignored.
"""

import logging
import re

from movegov.analyzers.base import FactSource, ModuleHeaderNotFoundError
from movegov.analyzers.descriptions import describe_function
from movegov.models.contract import (
    ConstantDef,
    ContractFacts,
    EventStruct,
    FieldInfo,
    FunctionInfo,
    ImportedModule,
    ModuleInfo,
    ParameterInfo,
    StructInfo,
)

logger = logging.getLogger(__name__)

# Comments are masked with spaces so match offsets still index the raw text.
# Byte-string literals are matched first so "//" inside them survives.
_COMMENT_OR_STRING = re.compile(r'[bx]?"(?:\\.|[^"\\])*"|//[^\n]*|/\*[\s\S]*?\*/')

_ASSIGNMENT = re.compile(r"([A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*)\s*(?<![=!<>])=(?!=)")
_MUTATING_CALL = re.compile(r"([A-Za-z0-9_]+)::([A-Za-z0-9_]+)\(\s*&mut\s+([A-Za-z0-9_]+)")
_FIELD_LINE = re.compile(r"([A-Za-z0-9_]+)\s*:\s*(.+?),?\s*$")


def mask_comments(text: str) -> str:
    """Blank out comments while preserving offsets and newlines.

    Args:
        text: Raw Move source

    Returns:
        Text of identical length with comment characters replaced by spaces
    """

    def blank(match: re.Match[str]) -> str:
        token = match.group(0)
        if token.startswith(("//", "/*")):
            return re.sub(r"[^\n]", " ", token)
        return token

    return _COMMENT_OR_STRING.sub(blank, text)


def mask_strings(text: str) -> str:
    """Blank out comments and string literal contents, keeping the quotes.

    Used for brace counting only; constant values are read from the
    comment-masked text.
    """

    def blank(match: re.Match[str]) -> str:
        token = match.group(0)
        if token.startswith(("//", "/*")):
            return re.sub(r"[^\n]", " ", token)
        quote = token.index('"')
        return token[: quote + 1] + " " * (len(token) - quote - 2) + '"'

    return _COMMENT_OR_STRING.sub(blank, text)


def split_parameters(parameter_text: str) -> list[str]:
    """Split a parameter list on top-level commas.

    Commas inside ``<...>`` belong to a generic type and do not split, so
    ``a: Table<K, V>, b: u64`` yields two parameters.

    Args:
        parameter_text: Text between a function's parentheses

    Returns:
        Trimmed, non-empty parameter declarations
    """
    parts: list[str] = []
    depth = 0
    current: list[str] = []

    for char in parameter_text:
        if char == "<":
            depth += 1
        elif char == ">":
            depth = max(depth - 1, 0)

        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    tail = "".join(current).strip()
    if tail:
        parts.append(tail)

    return [p for p in parts if p]


def parse_parameters(parameter_text: str) -> list[ParameterInfo]:
    """Parse a parameter list into ParameterInfo entries.

    Args:
        parameter_text: Text between a function's parentheses

    Returns:
        Parameters in declaration order; declarations without a ``:`` are skipped
    """
    if not parameter_text.strip():
        return []

    parameters: list[ParameterInfo] = []
    for declaration in split_parameters(parameter_text):
        name_part, sep, type_part = declaration.partition(":")
        if not sep:
            logger.debug("Skipping parameter without type: %r", declaration)
            continue

        name = " ".join(name_part.split())
        is_mutable = name.startswith("mut ")
        if is_mutable:
            name = name[4:].strip()

        parameters.append(
            ParameterInfo(
                name=name,
                type=" ".join(type_part.split()),
                is_mutable=is_mutable,
            )
        )

    return parameters


def parse_struct_fields(fields_text: str) -> list[FieldInfo]:
    """Parse a struct field block.

    Fields may sit one per line or several per line separated by commas.
    Unparsable fragments are skipped.

    Args:
        fields_text: Text between a struct's braces

    Returns:
        Fields in declaration order
    """
    fields: list[FieldInfo] = []

    for chunk in split_parameters(fields_text.replace("\n", ",")):
        chunk = chunk.strip()
        if not chunk or chunk.startswith("//"):
            continue

        match = _FIELD_LINE.match(chunk)
        if match:
            fields.append(FieldInfo(name=match.group(1), type=match.group(2).strip()))

    return fields


def extract_block(text: str, open_brace: int) -> str | None:
    """Return the text inside a balanced ``{...}`` block.

    Braces inside string literals are not counted.

    Args:
        text: Comment-masked source
        open_brace: Index of the opening brace

    Returns:
        Block contents without the outer braces, or None if unbalanced
    """
    scan = mask_strings(text)
    depth = 0
    for index in range(open_brace, len(scan)):
        char = scan[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[open_brace + 1 : index]
    return None


def analyze_modifications(body: str) -> list[str]:
    """Find identifiers a function body appears to mutate.

    Looks for assignment targets (``a.b = ...``) and ``&mut x`` arguments
    passed to module calls (``table::add(&mut x, ...)``).

    Args:
        body: Function body text

    Returns:
        Unique targets in first-seen order
    """
    modifies: list[str] = []

    for match in _ASSIGNMENT.finditer(body):
        target = match.group(1)
        if target not in modifies:
            modifies.append(target)

    for match in _MUTATING_CALL.finditer(body):
        target = match.group(3)
        if target not in modifies:
            modifies.append(target)

    return modifies


def parse_import_symbols(symbols_text: str) -> tuple[str, ...]:
    """Parse the symbol part of a ``use`` declaration.

    ``{Self, String}`` yields ``("Self", "String")``; ``UID`` yields ``("UID",)``.
    """
    symbols_text = symbols_text.strip()
    braces = re.search(r"\{([^}]*)\}", symbols_text)
    if braces:
        return tuple(s.strip() for s in braces.group(1).split(",") if s.strip())
    return (symbols_text,)


class MoveSourceScanner(FactSource[str]):
    """Extracts contract facts from Move source text with regular expressions.

    The module header is the only required fact; every other extractor
    degrades to an empty result when nothing matches.
    """

    MODULE_PATTERN = re.compile(r"\bmodule\s+([A-Za-z0-9_]+)::([A-Za-z0-9_]+)\s*[{;]")

    FUNCTION_PATTERN = re.compile(
        r"\bpublic\s+(entry\s+)?fun\s+([A-Za-z0-9_]+)\s*"
        r"(<[^(]*?>)?\s*"  # type parameters
        r"\(([^)]*)\)\s*"  # parameter list
        r"(?::\s*([^{;]+?))?\s*"  # optional return type
        r"(?:acquires\s+[A-Za-z0-9_,\s<>:]+?)?\s*\{"  # optional acquires list, then body
    )

    STRUCT_PATTERN = re.compile(
        r"\bstruct\s+([A-Za-z0-9_]+)\s*(?:<[^>{]*>)?\s*"
        r"(?:has\s+([A-Za-z0-9_,\s]+?))?\s*\{([\s\S]*?)\}"
    )

    CONSTANT_PATTERN = re.compile(
        r"\bconst\s+([A-Za-z_][A-Za-z0-9_]*)\s*:\s*([^=;]+?)\s*=\s*([^;]+);"
    )

    IMPORT_PATTERN = re.compile(
        r"\buse\s+([A-Za-z0-9_]+)::([A-Za-z0-9_]+)(?:::([A-Za-z0-9_{}:,\s]+?))?\s*;"
    )

    def __init__(self) -> None:
        super().__init__("source-text")

    def extract(self, data: str) -> ContractFacts:
        """Scan contract source into facts.

        Args:
            data: Raw Move source text

        Returns:
            ContractFacts for the first module in the text

        Raises:
            ModuleHeaderNotFoundError: If no module header is present
        """
        masked = mask_comments(data)
        module = self.extract_module_info(masked)

        structs = self.find_structs(masked)
        facts = ContractFacts(
            module=module,
            functions=self.find_functions(masked, data),
            structs=structs,
            events=[
                EventStruct(name=s.name, fields=list(s.fields)) for s in structs if s.is_event
            ],
            constants=self.find_constants(masked),
            imports=self.find_imports(masked),
            source=data,
        )

        logger.debug(
            "Scanned %s: %d functions, %d structs, %d constants, %d imports",
            module.qualified_name,
            len(facts.functions),
            len(facts.structs),
            len(facts.constants),
            len(facts.imports),
        )
        return facts

    def extract_module_info(self, text: str) -> ModuleInfo:
        """Locate the module header.

        Raises:
            ModuleHeaderNotFoundError: If no header matches
        """
        match = self.MODULE_PATTERN.search(text)
        if not match:
            raise ModuleHeaderNotFoundError()
        return ModuleInfo(package_name=match.group(1), module_name=match.group(2))

    def find_functions(self, masked: str, raw: str | None = None) -> list[FunctionInfo]:
        """Find public functions and their bodies.

        Args:
            masked: Comment-masked source
            raw: Original source, used for doc comments (defaults to masked)

        Returns:
            Functions in declaration order
        """
        raw = raw if raw is not None else masked
        functions: list[FunctionInfo] = []

        for match in self.FUNCTION_PATTERN.finditer(masked):
            name = match.group(2)
            body = extract_block(masked, match.end() - 1)
            if body is None:
                logger.debug("Unbalanced body for function %s; treating as empty", name)
                body = ""

            return_type = match.group(5)
            functions.append(
                FunctionInfo(
                    name=name,
                    parameters=parse_parameters(match.group(4)),
                    is_entry=match.group(1) is not None,
                    type_parameters=match.group(3),
                    return_type=" ".join(return_type.split()) if return_type else None,
                    body=body,
                    modifies=analyze_modifications(body),
                    description=describe_function(name, raw, match.start(), body),
                )
            )

        return functions

    def find_structs(self, masked: str) -> list[StructInfo]:
        """Find struct declarations with abilities and fields."""
        structs: list[StructInfo] = []

        for match in self.STRUCT_PATTERN.finditer(masked):
            abilities_text = match.group(2) or ""
            abilities = [a.strip() for a in abilities_text.split(",") if a.strip()]
            structs.append(
                StructInfo(
                    name=match.group(1),
                    abilities=abilities,
                    fields=parse_struct_fields(match.group(3)),
                )
            )

        return structs

    def find_constants(self, masked: str) -> list[ConstantDef]:
        """Find ``const`` declarations."""
        return [
            ConstantDef(
                name=match.group(1),
                type=" ".join(match.group(2).split()),
                value=match.group(3).strip(),
            )
            for match in self.CONSTANT_PATTERN.finditer(masked)
        ]

    def find_imports(self, masked: str) -> list[ImportedModule]:
        """Find ``use`` declarations."""
        imports: list[ImportedModule] = []

        for match in self.IMPORT_PATTERN.finditer(masked):
            symbols = match.group(3)
            imports.append(
                ImportedModule(
                    package=match.group(1),
                    module=match.group(2),
                    symbols=parse_import_symbols(symbols) if symbols else ("*",),
                )
            )

        return imports


def scan_contract(contract_code: str) -> ContractFacts:
    """Scan Move source text into contract facts.

    Convenience function for one-off scans.

    Args:
        contract_code: Raw Move source text

    Returns:
        Extracted facts

    Raises:
        ModuleHeaderNotFoundError: If no module header is present
    """
    return MoveSourceScanner().extract(contract_code)


def extract_module_info(contract_code: str) -> ModuleInfo:
    """Return only the module identity of a contract.

    Raises:
        ModuleHeaderNotFoundError: If no module header is present
    """
    return MoveSourceScanner().extract_module_info(mask_comments(contract_code))
