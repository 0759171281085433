# backend/heyu_booking/schemas/common.py

from pydantic.alias_generators import to_camel

# Wire format is camelCase (selectedDate, nameCn, ...), Python side snake_case
CAMEL_CONFIG = {
    "from_attributes": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}
