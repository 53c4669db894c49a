"""JSON encoding of request and response bodies.

Attribute names are PascalCase in the database and camelCase on the wire, eg.
`ProfilePicture` <-> `profilePicture`. Numbers are `Decimal` in the database.

"""
import json
from decimal import Decimal
from typing import Any, Dict, Mapping


class JSONEncoder(json.JSONEncoder):
    """JSON encoder that handles the types returned by DynamoDB."""

    def default(self, o: Any) -> Any:
        """Serialize types that the default encoder can't."""
        if isinstance(o, Decimal):
            if o == o.to_integral_value():
                return int(o)
            return float(o)
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        return super().default(o)


def dumps(obj: Any) -> str:
    """Serialize an object to a JSON string."""
    return json.dumps(obj, cls=JSONEncoder)


def loads(s: str) -> Any:
    """Deserialize a JSON string.

    Floats are parsed as `Decimal`, because DynamoDB doesn't accept floats.

    Raises:
        ValueError if the string is not valid JSON.

    """
    return json.loads(s, parse_float=Decimal)


def to_camel(name: str) -> str:
    """Convert a PascalCase name to camelCase."""
    return name[:1].lower() + name[1:]


def to_pascal(name: str) -> str:
    """Convert a camelCase name to PascalCase."""
    return name[:1].upper() + name[1:]


def camelize(obj: Any, deep: bool = False) -> Any:
    """Convert the keys of a mapping to camelCase.

    Args:
        obj: A mapping, a list of mappings or any other value which is
            returned unchanged.
        deep: Whether to convert the keys of nested mappings as well. Nested
            mappings of stored entities may hold client-defined keys, so
            those are left alone by default.

    Returns:
        The converted object.

    """
    if isinstance(obj, Mapping):
        return {to_camel(k): camelize(v, deep) if deep else v
                for k, v in obj.items()}
    if isinstance(obj, list):
        return [camelize(o, deep) for o in obj]
    return obj


def pascalize(obj: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert the top level keys of a request body to PascalCase."""
    return {to_pascal(k): v for k, v in obj.items()}
