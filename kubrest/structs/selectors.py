"""
Label & field selectors: both for the API queries and for local matching.

The selectors can be given either as ready-to-use strings (passed as is),
or as mappings of keys to criteria:

* ``{'app': 'nginx'}`` -- the label equals the value (``app=nginx``).
* ``{'app': PRESENT}`` -- the label exists with any value (``app``).
* ``{'app': ABSENT}`` -- the label does not exist (``!app``).
* ``{'app': ['a', 'b']}`` -- the label is one of the values (``app in (a,b)``).

The field selectors support only the equality of values.
"""
import enum
from typing import Collection, Mapping, Optional, Union


class MetaFilterToken(enum.Enum):
    """ Tokens for filtering by labels. """
    PRESENT = enum.auto()
    ABSENT = enum.auto()


# For exporting to the top-level package.
ABSENT = MetaFilterToken.ABSENT
PRESENT = MetaFilterToken.PRESENT

LabelCriterion = Union[str, MetaFilterToken, Collection[str]]
LabelFilter = Mapping[str, LabelCriterion]
LabelSelector = Union[str, LabelFilter]
FieldSelector = Union[str, Mapping[str, str]]


def build_label_selector(labels: Optional[LabelSelector]) -> Optional[str]:
    if labels is None:
        return None
    if isinstance(labels, str):
        return labels

    parts = []
    for key, value in labels.items():
        if value is PRESENT:
            parts.append(key)
        elif value is ABSENT:
            parts.append(f'!{key}')
        elif isinstance(value, str):
            parts.append(f'{key}={value}')
        elif isinstance(value, Collection):
            parts.append(f'{key} in ({",".join(value)})')
        else:
            raise TypeError(f"Unsupported label criterion for {key!r}: {value!r}")
    return ','.join(parts) or None


def build_field_selector(fields: Optional[FieldSelector]) -> Optional[str]:
    if fields is None:
        return None
    if isinstance(fields, str):
        return fields
    return ','.join(f'{key}={value}' for key, value in fields.items()) or None


def match_labels(
        labels: Mapping[str, str],
        criteria: Optional[LabelFilter],
) -> bool:
    """
    Check if the object's labels satisfy all the criteria of the filter.
    """
    if not criteria:
        return True

    for key, value in criteria.items():
        if value is ABSENT:
            if key in labels:
                return False
        elif key not in labels:
            return False
        elif value is PRESENT:
            continue
        elif isinstance(value, str):
            if labels[key] != value:
                return False
        elif labels[key] not in value:
            return False
    return True
