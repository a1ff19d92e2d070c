from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional

from lunch_menus.fetch.utils import normalize_price_human


class Dish(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    number: int = Field(0, alias="cislo", description="Serial number printed on the menu, 0 if absent")
    name: str = Field(alias="nazev", min_length=1)
    description: str = Field("", alias="popis")
    price_without_soup: int = Field(0, alias="cena_bez_polevky", description="Price in CZK, 0 if unknown")
    price_with_soup: int = Field(0, alias="cena_s_polevkou", description="Price in CZK, 0 if unknown")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("number", "price_without_soup", "price_with_soup", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> int:
        # Unknown or unparseable values mean "unknown", never a validation failure.
        parsed = normalize_price_human(value)
        return parsed if parsed is not None else 0


class DayMenu(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    day_label: str = Field(alias="den", min_length=1, description="Day name as found on the source page")
    soups: List[str] = Field(default_factory=list, alias="polevky")
    main_dishes: List[Dish] = Field(default_factory=list, alias="hlavni_chody")

    @field_validator("day_label", mode="before")
    @classmethod
    def _strip_label(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("soups", mode="before")
    @classmethod
    def _clean_soups(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [s.strip() for s in value if isinstance(s, str) and s.strip()]
        return value


class WeeklyMenu(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    days: List[DayMenu] = Field(default_factory=list, alias="poledni_nabidka")

    @property
    def is_empty(self) -> bool:
        return not self.days

    def to_document(self) -> Dict[str, Any]:
        """JSON document as persisted by the menu store."""
        return self.model_dump(by_alias=True)


class AddRestaurantRequest(BaseModel):
    url: str


class AddRestaurantResponse(BaseModel):
    success: bool
    restaurant_id: Optional[int] = None
    menu_saved: bool = False


class RefreshStats(BaseModel):
    total: int = 0
    updated: int = 0
    failed: int = 0
    skipped: int = 0
