class GeofilterError(Exception):
    """Base class for errors raised by geofilter."""


class CodecError(GeofilterError, ValueError):
    """Invalid coordinates, precision or cell id handed to the geocodec."""


class InvalidRecordError(GeofilterError, ValueError):
    """User options that cannot be stored as a record."""


class RecordDecodeError(GeofilterError):
    """A stored user record could not be decoded."""

    def __init__(self, user_id: str, reason: str):
        super().__init__(f"Cannot decode record for user {user_id!r}: {reason}")
        self.user_id = user_id
        self.reason = reason
