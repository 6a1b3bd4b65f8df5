"""Line item model: the editable list of priced quote rows."""
import uuid
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from quote_engine.services.rate_table import SystemKey
from quote_engine.utils.validators import sanitize_float, sanitize_string


class LineItemCategory(str, Enum):
    """Grouping used for pricing display and the quote document."""
    INITIATION = "initiation"
    PROFESSIONAL_SERVICE = "professional_service"
    OTHER = "other"


# Unit-of-measure labels; AREA_UOM marks rows whose quantity follows the survey area
AREA_UOM = "SQ M."
UOM_OPTIONS = (AREA_UOM, "Days", "Lump Sum", "Hours", "Each")

QUICK_ADD_PRESETS = {
    "travel": ("Travel / Transport", "Lump Sum"),
    "equipment": ("Equipment Rental", "Days"),
    "permits": ("Permits / Fees", "Lump Sum"),
}

MAX_DESCRIPTION_LENGTH = 500


def new_line_id() -> str:
    """Generate a row id for a non-standard line."""
    return f"li-{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class LineItem:
    """A single priced row. Rows with a system_key are regenerable from parameters."""
    id: str
    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    uom: str = AREA_UOM
    category: LineItemCategory = LineItemCategory.PROFESSIONAL_SERVICE
    system_key: Optional[SystemKey] = None

    @property
    def amount(self) -> float:
        return self.quantity * self.unit_price

    @property
    def is_standard(self) -> bool:
        return self.system_key is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "description": self.description,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "uom": self.uom,
            "category": self.category.value,
        }
        if self.system_key is not None:
            data["systemKey"] = self.system_key.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        """
        Build a LineItem from request or submitted JSON.

        Accepts both camelCase (unitPrice) and snake_case (unit_price) keys.
        Negative or non-numeric quantities and prices become 0, unknown
        categories fall back to professional_service, unknown system keys
        are dropped (the row becomes a custom row).
        """
        unit_price = data.get("unitPrice", data.get("unit_price"))
        system_key = data.get("systemKey", data.get("system_key"))
        try:
            system_key = SystemKey(system_key) if system_key else None
        except ValueError:
            system_key = None
        try:
            category = LineItemCategory(data.get("category") or LineItemCategory.PROFESSIONAL_SERVICE)
        except ValueError:
            category = LineItemCategory.PROFESSIONAL_SERVICE

        description = data.get("description")
        return cls(
            id=str(data.get("id") or new_line_id()),
            description="" if description is None else str(description)[:MAX_DESCRIPTION_LENGTH],
            quantity=sanitize_float(data.get("quantity"), default=0.0, min_value=0.0),
            unit_price=sanitize_float(unit_price, default=0.0, min_value=0.0),
            uom=sanitize_string(data.get("uom"), max_length=50, default=AREA_UOM),
            category=category,
            system_key=system_key,
        )

    @classmethod
    def from_draft_dict(cls, data: Dict[str, Any]) -> "LineItem":
        """
        Rebuild a row written by to_dict() exactly as it was saved.

        Nothing is clamped, trimmed or defaulted beyond the dataclass
        defaults for absent keys.

        Raises:
            KeyError: If the row has no id
            ValueError: If category or systemKey is not a known value
        """
        system_key = data.get("systemKey")
        return cls(
            id=str(data["id"]),
            description=data.get("description", ""),
            quantity=data.get("quantity", 0.0),
            unit_price=data.get("unitPrice", 0.0),
            uom=data.get("uom", AREA_UOM),
            category=LineItemCategory(data.get("category", LineItemCategory.PROFESSIONAL_SERVICE)),
            system_key=SystemKey(system_key) if system_key is not None else None,
        )


EDITABLE_FIELDS = frozenset(f.name for f in fields(LineItem)) - {"id"}


def create_empty_line(category: LineItemCategory = LineItemCategory.PROFESSIONAL_SERVICE) -> LineItem:
    """Create a blank row defaulted to the given category."""
    return LineItem(id=new_line_id(), category=LineItemCategory(category))


class LineItemList:
    """
    Ordered, id-addressed collection of line items.

    Every operation replaces rows rather than mutating them. Callers clamp
    quantity and unit_price to zero before calling update(); the list does
    not clamp on their behalf (validation is a separate concern).
    """

    def __init__(self, items: Optional[List[LineItem]] = None):
        self._items: List[LineItem] = list(items or [])

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other):
        if isinstance(other, LineItemList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    @property
    def items(self) -> List[LineItem]:
        return list(self._items)

    def get(self, item_id: str) -> LineItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise KeyError(f"Line item not found: {item_id}")

    def add(self, category: LineItemCategory = LineItemCategory.PROFESSIONAL_SERVICE) -> LineItem:
        """Append an empty row of the given category and return it."""
        item = create_empty_line(category)
        self._items.append(item)
        return item

    def add_quick(self, description: str, uom: str) -> LineItem:
        """Append an 'other' row pre-filled with a description and UOM."""
        item = replace(create_empty_line(LineItemCategory.OTHER), description=description, uom=uom)
        self._items.append(item)
        return item

    def add_preset(self, preset: str) -> LineItem:
        """Append one of the QUICK_ADD_PRESETS rows (travel, equipment, permits)."""
        description, uom = QUICK_ADD_PRESETS[preset]
        return self.add_quick(description, uom)

    def update(self, item_id: str, field: str, value: Any) -> LineItem:
        """
        Replace one field of a row.

        Raises:
            KeyError: If the row or the field does not exist
        """
        if field not in EDITABLE_FIELDS:
            raise KeyError(f"Unknown line item field: {field}")
        if field == "category":
            value = LineItemCategory(value)
        elif field == "system_key" and value is not None:
            value = SystemKey(value)

        for index, item in enumerate(self._items):
            if item.id == item_id:
                updated = replace(item, **{field: value})
                self._items[index] = updated
                return updated
        raise KeyError(f"Line item not found: {item_id}")

    def remove(self, item_id: str) -> bool:
        """Remove a row by id. Returns False if no row matched."""
        original_count = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        return len(self._items) < original_count

    def replace_all(self, items: List[LineItem]) -> None:
        self._items = list(items)

    def by_category(self, category: LineItemCategory) -> List[LineItem]:
        category = LineItemCategory(category)
        return [item for item in self._items if item.category == category]

    def to_list(self) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in self._items]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "LineItemList":
        return cls([LineItem.from_dict(entry) for entry in data or []])
