"""
SQL dialects for the WHERE clause compiler.

A dialect only decides how selectors and typed placeholders are spelled.
Every placeholder template holds exactly one ``?``.
"""

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class SQLDialect:
    """
    Rendering templates for one SQL engine.

    Attributes:
        name: Dialect name
        identifier_quote: Quote character for dedicated column names
        json_selector: Template with ``{column}`` and ``{key}`` for JSON metadata lookups
        boolean_placeholder: Placeholder that binds a "true"/"false" string as boolean
        number_placeholder: Placeholder that binds a decimal string as a number
        date_placeholder: Placeholder that binds a date string as a date
        text_search: Template with ``{placeholder}``, ``{column}`` (quoted key)
            and ``{selector}`` for the containment predicate
    """
    name: str
    identifier_quote: str
    json_selector: str
    boolean_placeholder: str
    number_placeholder: str
    date_placeholder: str
    text_search: str

    def quote(self, identifier: str) -> str:
        q = self.identifier_quote
        return f"{q}{identifier}{q}"


HANA = SQLDialect(
    name="hana",
    identifier_quote='"',
    json_selector="JSON_VALUE({column}, '$.{key}')",
    boolean_placeholder="TO_BOOLEAN(?)",
    number_placeholder="TO_DOUBLE(?)",
    date_placeholder="TO_DATE(?)",
    text_search="SCORE({placeholder} IN ({column} EXACT SEARCH MODE 'text')) > 0",
)

# json_extract returns 1/0 for JSON booleans, so booleans compare as integers.
SQLITE = SQLDialect(
    name="sqlite",
    identifier_quote='"',
    json_selector="json_extract({column}, '$.{key}')",
    boolean_placeholder="(? = 'true')",
    number_placeholder="CAST(? AS REAL)",
    date_placeholder="date(?)",
    text_search="instr({selector}, {placeholder}) > 0",
)

DIALECTS = MappingProxyType({d.name: d for d in (HANA, SQLITE)})


def get_dialect(name: str) -> SQLDialect:
    """Look up a dialect by name."""
    try:
        return DIALECTS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown SQL dialect {name!r}; expected one of {sorted(DIALECTS)}") from None
