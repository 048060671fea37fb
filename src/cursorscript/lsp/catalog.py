"""
Built-in symbol catalog for CursorScript LSP.

Every function, constant and namespace the CursorScript runtime provides is
listed here once. The catalog is built at import time and exposed only as a
tuple plus a read-only name index; nothing in the process can mutate it.
Built-ins carry line 0, so they are never offered as definition targets.
"""

from types import MappingProxyType
from typing import Optional

from cursorscript.lsp.symbols import SymbolInfo, SymbolKind


def _function(name: str, params: str, doc: str) -> SymbolInfo:
    """A top-level built-in function, completed as a call snippet."""
    return SymbolInfo(
        name=name,
        kind=SymbolKind.FUNCTION,
        detail=f"{name}({params})",
        documentation=doc,
        insert_text=f"{name}($1)" if params else f"{name}()",
    )


def _constant(name: str, type_hint: str, doc: str) -> SymbolInfo:
    return SymbolInfo(
        name=name,
        kind=SymbolKind.CONSTANT,
        detail=f"(constant: {type_hint})",
        documentation=doc,
    )


def _member(namespace: str, name: str, params: Optional[str], doc: str) -> SymbolInfo:
    """A namespace member; ``params=None`` marks a property rather than a method."""
    if params is None:
        return SymbolInfo(
            name=name,
            kind=SymbolKind.PROPERTY,
            detail=f"{namespace}.{name}",
            documentation=doc,
        )
    return SymbolInfo(
        name=name,
        kind=SymbolKind.FUNCTION,
        detail=f"{namespace}.{name}({params})",
        documentation=doc,
    )


def _namespace(name: str, doc: str, members: list[tuple[str, Optional[str], str]]) -> SymbolInfo:
    return SymbolInfo(
        name=name,
        kind=SymbolKind.MODULE,
        detail=f"namespace {name}",
        documentation=doc,
        members=tuple(_member(name, *member) for member in members),
    )


GLOBAL_SYMBOLS: tuple[SymbolInfo, ...] = (
    # Values
    _constant("true", "boolean", "Boolean true."),
    _constant("false", "boolean", "Boolean false."),
    _constant("null", "null", "The absence of a value."),
    # I/O
    _function("print", "...values", "Write the values to standard output, separated by spaces."),
    _function("input", "prompt", "Read one line from standard input after showing `prompt`."),
    # Conversion and inspection
    _function("len", "value", "Length of a string, array or object."),
    _function("str", "value", "Convert a value to its string form."),
    _function("num", "value", "Parse a string as a number."),
    _function("typeof", "value", "Name of the runtime type of `value`."),
    _function("range", "start, end", "Array of the integers from `start` up to, not including, `end`."),
    _function("exit", "code", "Stop the script with the given exit code."),
    # Namespaces
    _namespace(
        "Math",
        "Mathematical functions and constants.",
        [
            ("PI", None, "Ratio of a circle's circumference to its diameter."),
            ("E", None, "Euler's number."),
            ("abs", "n", "Absolute value of `n`."),
            ("floor", "n", "Largest integer less than or equal to `n`."),
            ("ceil", "n", "Smallest integer greater than or equal to `n`."),
            ("round", "n", "`n` rounded to the nearest integer."),
            ("sqrt", "n", "Square root of `n`."),
            ("pow", "base, exponent", "`base` raised to `exponent`."),
            ("min", "a, b", "The smaller of `a` and `b`."),
            ("max", "a, b", "The larger of `a` and `b`."),
            ("sin", "n", "Sine of `n` radians."),
            ("cos", "n", "Cosine of `n` radians."),
            ("random", "", "Pseudo-random number in [0, 1)."),
        ],
    ),
    _namespace(
        "Window",
        "Terminal window control.",
        [
            ("create", "width, height, title", "Open a drawing window."),
            ("clear", "color", "Fill the window with `color`."),
        ],
    ),
    _namespace(
        "String",
        "String manipulation helpers.",
        [
            ("upper", "s", "`s` converted to upper case."),
            ("lower", "s", "`s` converted to lower case."),
            ("trim", "s", "`s` without leading and trailing whitespace."),
            ("split", "s, separator", "Array of the pieces of `s` between separators."),
            ("contains", "s, part", "Whether `part` occurs in `s`."),
            ("replace", "s, old, new", "`s` with every `old` replaced by `new`."),
        ],
    ),
    _namespace(
        "Array",
        "Array helpers.",
        [
            ("push", "array, value", "Append `value` to the end of `array`."),
            ("pop", "array", "Remove and return the last element of `array`."),
            ("join", "array, separator", "Concatenate the elements with `separator`."),
            ("reverse", "array", "Reverse `array` in place."),
            ("sort", "array", "Sort `array` in place."),
        ],
    ),
    _namespace(
        "Time",
        "Clocks and delays.",
        [
            ("now", "", "Milliseconds since the Unix epoch."),
            ("sleep", "ms", "Pause the script for `ms` milliseconds."),
        ],
    ),
    _namespace(
        "File",
        "File system access.",
        [
            ("read", "path", "Contents of the file at `path`."),
            ("write", "path, contents", "Replace the file at `path` with `contents`."),
            ("exists", "path", "Whether a file exists at `path`."),
        ],
    ),
)

# Read-only name index over the catalog
GLOBAL_INDEX: MappingProxyType = MappingProxyType(
    {symbol.name: symbol for symbol in GLOBAL_SYMBOLS}
)


def lookup_global(name: str) -> Optional[SymbolInfo]:
    """Look up a built-in symbol by name."""
    return GLOBAL_INDEX.get(name)


def resolve_symbol(name: str, local_symbols: list[SymbolInfo]) -> Optional[SymbolInfo]:
    """
    Resolve a name against the document's symbols, then the catalog.

    The first local declaration with the name wins over a built-in of the
    same name.
    """
    for symbol in local_symbols:
        if symbol.name == name:
            return symbol
    return lookup_global(name)
