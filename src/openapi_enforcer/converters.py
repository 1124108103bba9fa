"""Value conversion utilities for openapi-enforcer.

:class:`ValueConverter` holds the auto-format coercion table shared by the
Enforcer, the Materializer and the request parameter mapper: loosely typed
input (usually strings) is coerced toward a schema's declared type and format.
It also serializes native values back into JSON friendly ones and normalizes
numpy/pandas array-likes into plain lists.
"""

import base64
import math
from collections.abc import Mapping, MutableSequence
from datetime import date, datetime, time, timezone
from typing import Any

import numpy as np
import pandas as pd

from .formats import BINARY_RX, is_byte, parse_date, parse_date_time
from .schema.models import SchemaNode
from .schema.types import resolve_ref, schema_type


def _int_to_bytes(value: int) -> bytes:
    if value < 0:
        raise ValueError(f"Can not convert negative number to bytes: {value}")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


class ValueConverter:
    """Utility class for type coercion and serialization."""

    @staticmethod
    def to_boolean(value: Any) -> bool:
        """``""``, ``"false"`` and ``"0"`` are false, other strings are true."""
        if isinstance(value, str):
            return value.strip().lower() not in ("", "false", "0")
        return bool(value)

    @staticmethod
    def to_integer(value: Any) -> int:
        """Numeric text and floats are truncated toward zero (``"1.2"`` -> 1).

        Raises:
            ValueError: If the value is not numeric
        """
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                value = float(text)
        if isinstance(value, (float, np.floating)):
            if not math.isfinite(value):
                raise ValueError(f"Can not convert {value} to an integer")
            return int(value)
        if isinstance(value, np.integer):
            return int(value)
        raise TypeError(f"Can not convert {type(value).__name__} to an integer")

    @staticmethod
    def to_number(value: Any) -> int | float:
        """Integral text keeps an int (``"5"`` -> 5), other numeric text becomes
        a float.

        Raises:
            ValueError: If the value is not numeric
        """
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, np.generic):
            return value.item()
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                return float(text)
        raise TypeError(f"Can not convert {type(value).__name__} to a number")

    @staticmethod
    def to_string(value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (date, datetime)):
            return ValueConverter.serialize(value)
        if isinstance(value, (bytes, bytearray)):
            return base64.b64encode(bytes(value)).decode("ascii")
        return str(value)

    @staticmethod
    def to_binary(value: Any) -> bytes:
        """Binary digit text (``"00000001"``), integers and booleans to bytes.

        Raises:
            ValueError: If the text is not made of 8-digit binary groups
        """
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, bool):
            return bytes([int(value)])
        if isinstance(value, int):
            return _int_to_bytes(value)
        if isinstance(value, str):
            if BINARY_RX.match(value) is None:
                raise ValueError(f"Invalid binary string: {value}")
            return bytes(int(value[i : i + 8], 2) for i in range(0, len(value), 8))
        raise TypeError(f"Can not convert {type(value).__name__} to binary")

    @staticmethod
    def to_byte(value: Any) -> bytes:
        """Base64 text, integers and booleans to bytes.

        Raises:
            ValueError: If the text is not base64
        """
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, bool):
            return bytes([int(value)])
        if isinstance(value, int):
            return _int_to_bytes(value)
        if isinstance(value, str):
            if not is_byte(value):
                raise ValueError(f"Invalid base64 string: {value}")
            return base64.b64decode(value)
        raise TypeError(f"Can not convert {type(value).__name__} to bytes")

    @staticmethod
    def to_date(value: Any) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            text = value.strip()
            if "T" in text.upper():
                return parse_date_time(text).date()
            return parse_date(text)
        raise TypeError(f"Can not convert {type(value).__name__} to a date")

    @staticmethod
    def to_date_time(value: Any) -> datetime:
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        if isinstance(value, str):
            text = value.strip()
            if "T" not in text.upper():
                return ValueConverter.to_date_time(parse_date(text))
            return parse_date_time(text)
        raise TypeError(f"Can not convert {type(value).__name__} to a date-time")

    @staticmethod
    def convert(value: Any, type_: str | None, format: str | None = None) -> Any:
        """Coerce ``value`` toward a type/format.

        Raises:
            ValueError: If the value can't be converted
            TypeError: If the value's type can't be converted
        """
        if type_ == "boolean":
            return ValueConverter.to_boolean(value)
        elif type_ == "integer":
            return ValueConverter.to_integer(value)
        elif type_ == "number":
            return ValueConverter.to_number(value)
        elif type_ == "string":
            if format == "binary":
                return ValueConverter.to_binary(value)
            elif format == "byte":
                return ValueConverter.to_byte(value)
            elif format == "date":
                return ValueConverter.to_date(value)
            elif format == "date-time":
                return ValueConverter.to_date_time(value)
            return ValueConverter.to_string(value)
        return value

    @staticmethod
    def auto_format(
        value: Any,
        schema: SchemaNode,
        definitions: Mapping[str, SchemaNode] | None = None,
    ) -> Any:
        """Best-effort coercion of a scalar toward the schema's type/format.

        Containers and None are returned untouched, and so is any value that
        can't be converted, leaving validation to report the mismatch.
        """
        if value is None or isinstance(value, (Mapping, list)):
            return value
        definitions = definitions or {}
        resolved = resolve_ref(schema, definitions)
        if resolved is None:
            return value
        target = schema_type(resolved, definitions)
        try:
            return ValueConverter.convert(value, target, resolved.format)
        except (TypeError, ValueError, OverflowError):
            return value

    @staticmethod
    def normalize_array(value: Any) -> Any:
        """Turn numpy/pandas array-likes into plain lists.

        DataFrames become a list of row records.
        """
        if isinstance(value, pd.DataFrame):
            return value.replace({pd.NaT: None}).to_dict("records")
        if isinstance(value, pd.Series):
            return value.replace({pd.NaT: None}).tolist()
        if isinstance(value, np.ndarray):
            return value.tolist()
        return value

    @staticmethod
    def serialize(value: Any, format: str | None = None) -> Any:
        """Serialize native values for JSON compatibility.

        Dates become ISO text (UTC date-times with a ``Z`` suffix), bytes become
        base64 text, or binary digit text when ``format`` is ``binary``.
        """
        if isinstance(value, Mapping):
            return {k: ValueConverter.serialize(v) for k, v in value.items()}
        if isinstance(value, (pd.DataFrame, pd.Series, np.ndarray)):
            return ValueConverter.serialize(ValueConverter.normalize_array(value))
        if isinstance(value, (list, tuple, MutableSequence)):
            return [ValueConverter.serialize(item) for item in value]
        if isinstance(value, datetime):
            text = value.isoformat()
            return text[:-6] + "Z" if text.endswith("+00:00") else text
        if isinstance(value, (date, time)):
            return value.isoformat()
        if isinstance(value, (bytes, bytearray)):
            if format == "binary":
                return "".join(f"{b:08b}" for b in value)
            return base64.b64encode(bytes(value)).decode("ascii")
        if isinstance(value, np.generic):
            return value.item()
        return value
