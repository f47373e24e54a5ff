"""Jinja2 filters for rendering Move source.

The governance templates only loop over pre-shaped context; these filters
do the small string transforms the templates and context builder share.
"""

import re

from movegov.models.contract import ParameterInfo

_IDENTIFIER = re.compile(r"(?<![A-Za-z0-9_:])([A-Za-z_][A-Za-z0-9_]*)\b(?!\s*::)")


def variant_name(action_name: str) -> str:
    """Turn an action name into its union variant tag.

    Examples:
        >>> variant_name("set_value")
        'Set_value'
        >>> variant_name("increment")
        'Increment'
    """
    return action_name[:1].upper() + action_name[1:]


def qualify_type(
    type_text: str,
    module_name: str,
    local_types: tuple[str, ...] | list[str],
) -> str:
    """Prefix the analyzed module's own struct names with the module name.

    Types declared by the governed module are not in scope inside the
    generated governance module, so ``&AdminCap`` becomes
    ``&counter::AdminCap``. Already-qualified paths and framework types
    are left untouched.

    Args:
        type_text: Move type text
        module_name: Name of the governed module
        local_types: Struct names declared by that module

    Returns:
        Type text with local struct names qualified

    Examples:
        >>> qualify_type("&AdminCap", "counter", ["AdminCap"])
        '&counter::AdminCap'
        >>> qualify_type("vector<Item>", "shop", ["Item"])
        'vector<shop::Item>'
    """
    if not local_types:
        return type_text

    local = set(local_types)

    def qualify(match: re.Match[str]) -> str:
        name = match.group(1)
        return f"{module_name}::{name}" if name in local else name

    return _IDENTIFIER.sub(qualify, type_text)


def join_fields(
    parameters: list[ParameterInfo],
    module_name: str = "",
    local_types: tuple[str, ...] = (),
) -> str:
    """Render ``name: type`` pairs joined by commas.

    Examples:
        >>> join_fields([ParameterInfo("v", "u64"), ParameterInfo("flag", "bool")])
        'v: u64, flag: bool'
    """
    return ", ".join(
        f"{p.name}: {qualify_type(p.type, module_name, local_types)}" for p in parameters
    )


def move_string(text: str | None) -> str:
    """Collapse text onto one line so it can sit inside a ``//`` comment."""
    if not text:
        return ""
    return " ".join(text.split())
