import pytest
from pydantic import ValidationError

from lunch_menus.schemas import DayMenu, Dish, WeeklyMenu


class TestSchemaValidation:
    """Unit tests for the menu data model"""

    def test_dish_defaults(self):
        dish = Dish(name="Řízek")
        assert dish.number == 0
        assert dish.description == ""
        assert dish.price_without_soup == 0
        assert dish.price_with_soup == 0

    def test_dish_from_document_keys(self):
        dish = Dish.model_validate({
            "cislo": 1,
            "nazev": "Guláš s pěti",
            "popis": "",
            "cena_bez_polevky": 150,
            "cena_s_polevkou": 0,
        })
        assert dish == Dish(number=1, name="Guláš s pěti", price_without_soup=150)

    def test_both_prices_zero_is_valid(self):
        dish = Dish.model_validate({"nazev": "Polévka dne", "cena_bez_polevky": 0, "cena_s_polevkou": 0})
        assert dish.price_without_soup == 0 and dish.price_with_soup == 0

    def test_price_text_coerced(self):
        dish = Dish.model_validate({"nazev": "Svíčková", "cena_bez_polevky": "159,-", "cena_s_polevkou": None})
        assert dish.price_without_soup == 159
        assert dish.price_with_soup == 0

    def test_unparseable_price_is_unknown(self):
        assert Dish(name="Sýr", price_without_soup="dle dohody").price_without_soup == 0

    def test_empty_dish_name_rejected(self):
        with pytest.raises(ValidationError):
            Dish(name="   ")

    def test_empty_day_label_rejected(self):
        with pytest.raises(ValidationError):
            DayMenu(day_label="")

    def test_soups_cleaned(self):
        day = DayMenu.model_validate({"den": " Pondělí ", "polevky": ["Zelňačka", "", None], "hlavni_chody": []})
        assert day.day_label == "Pondělí"
        assert day.soups == ["Zelňačka"]

    def test_models_are_immutable(self):
        menu = WeeklyMenu(days=[DayMenu(day_label="Pondělí")])
        with pytest.raises(ValidationError):
            menu.days = []

    def test_empty_weekly_menu(self):
        assert WeeklyMenu().is_empty
        assert WeeklyMenu.model_validate({"poledni_nabidka": []}).is_empty

    def test_document_uses_stored_keys(self):
        menu = WeeklyMenu(days=[
            DayMenu(day_label="Pondělí", soups=["Zelňačka"], main_dishes=[Dish(number=1, name="Guláš", price_without_soup=120)])
        ])
        assert menu.to_document() == {
            "poledni_nabidka": [{
                "den": "Pondělí",
                "polevky": ["Zelňačka"],
                "hlavni_chody": [{
                    "cislo": 1,
                    "nazev": "Guláš",
                    "popis": "",
                    "cena_bez_polevky": 120,
                    "cena_s_polevkou": 0,
                }],
            }]
        }
        assert WeeklyMenu.model_validate(menu.to_document()) == menu
