"""Error codes emitted by field validators."""

REQUIRED = "required"
IS_NULL = "isNull"
INVALID_TYPE = "invalidType"
INVALID = "invalid"
NOT_IN_SCHEMA = "notInSchema"
KEY_NOT_IN_SCHEMA = "keyNotInSchema"

MIN_STRING = "minString"
MAX_STRING = "maxString"
MIN_NUMBER = "minNumber"
MAX_NUMBER = "maxNumber"
MIN_INTEGER = "minInteger"
MAX_INTEGER = "maxInteger"
MIN_DATE = "minDate"
MAX_DATE = "maxDate"
MIN_ARRAY = "minArray"
MAX_ARRAY = "maxArray"
