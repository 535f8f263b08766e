from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from pydantic import JsonValue, TypeAdapter, ValidationError

from geofilter.errors import InvalidRecordError, RecordDecodeError
from geofilter.models.models import UserRecord
from geofilter.utils.constants import GEONUM_FIELD

Options = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]

_RECORD_ADAPTER = TypeAdapter(Dict[str, JsonValue])


def build_record(cell_id: str, options: Optional[Options] = None) -> UserRecord:
    """Record for a user placed in `cell_id`; any caller-supplied geonum is replaced."""
    mapping = dict(options or {})
    mapping.pop(GEONUM_FIELD, None)
    try:
        return UserRecord(geonum=cell_id, options=mapping)
    except ValidationError as e:
        raise InvalidRecordError(f"Unsupported user options: {e}") from e


def encode_record(record: UserRecord) -> str:
    return _RECORD_ADAPTER.dump_json(record.as_mapping()).decode("utf-8")


def decode_record(user_id: str, raw: Union[str, bytes]) -> UserRecord:
    try:
        mapping = _RECORD_ADAPTER.validate_json(raw)
    except ValidationError as e:
        raise RecordDecodeError(user_id, "not a JSON object of option values") from e
    geonum = mapping.pop(GEONUM_FIELD, None)
    if not isinstance(geonum, str) or not geonum:
        raise RecordDecodeError(user_id, f"missing or invalid {GEONUM_FIELD} field")
    try:
        return UserRecord(geonum=geonum, options=mapping)
    except ValidationError as e:
        raise RecordDecodeError(user_id, str(e)) from e
