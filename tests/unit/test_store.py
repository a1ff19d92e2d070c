import os

from lunch_menus.schemas import DayMenu, Dish, WeeklyMenu
from lunch_menus.store.db import MenuStore

WEEK = "2026-10-19"

MENU = WeeklyMenu(days=[
    DayMenu(day_label="Pondělí", soups=["Kulajda"], main_dishes=[Dish(number=1, name="Svíčková", price_without_soup=159)])
])


class TestMenuStore:
    """Unit tests for the SQLite menu store"""

    def test_init_creates_directory(self, tmp_path):
        """init_db creates missing parent directories"""
        path = tmp_path / "nested" / "menus.sqlite"
        MenuStore(str(path)).init_db()
        assert os.path.exists(path)

    def test_init_is_repeatable(self, store):
        """Running init_db twice keeps existing data"""
        store.upsert_restaurant("u-lipy.cz", "https://u-lipy.cz/menu")
        store.init_db()
        assert len(store.list_restaurants()) == 1

    def test_upsert_by_domain(self, store):
        """A second URL on the same domain reuses the restaurant"""
        first = store.upsert_restaurant("u-lipy.cz", "https://u-lipy.cz/menu")
        second = store.upsert_restaurant("u-lipy.cz", "https://www.u-lipy.cz/poledni")
        assert first == second

        restaurants = store.list_restaurants()
        assert restaurants == [
            {"id": first, "domain": "u-lipy.cz", "full_url": "https://u-lipy.cz/menu", "name": "u-lipy.cz"}
        ]

    def test_insert_and_list_menus(self, store):
        """Menus are stored under their document keys and listed with their restaurant"""
        restaurant_id = store.upsert_restaurant("u-lipy.cz", "https://u-lipy.cz/menu", name="U Lípy")
        store.insert_menu(restaurant_id, WEEK, MENU)

        menus = store.list_menus(WEEK)
        assert len(menus) == 1
        assert menus[0]["data"] == MENU.to_document()
        assert menus[0]["restaurant"]["name"] == "U Lípy"
        assert WeeklyMenu.model_validate(menus[0]["data"]) == MENU

    def test_list_menus_filters_week(self, store):
        """Only menus of the requested week are returned"""
        restaurant_id = store.upsert_restaurant("u-lipy.cz", "https://u-lipy.cz/menu")
        store.insert_menu(restaurant_id, "2026-10-12", MENU)
        assert store.list_menus(WEEK) == []

    def test_list_menus_filters_restaurants(self, store):
        """Only menus of the requested restaurants are returned"""
        lipa = store.upsert_restaurant("u-lipy.cz", "https://u-lipy.cz/menu")
        bistro = store.upsert_restaurant("bistro-nadrazi.cz", "https://bistro-nadrazi.cz/")
        store.insert_menu(lipa, WEEK, MENU)
        store.insert_menu(bistro, WEEK, MENU)

        assert [m["restaurant_id"] for m in store.list_menus(WEEK, [bistro])] == [bistro]
        assert {m["restaurant_id"] for m in store.list_menus(WEEK, [lipa, bistro])} == {lipa, bistro}
        assert len(store.list_menus(WEEK)) == 2
        assert store.list_menus(WEEK, []) == []
        assert store.list_menus(WEEK, [999]) == []

    def test_delete_menus_for_week(self, store):
        """Replacing a week's menu leaves one row"""
        restaurant_id = store.upsert_restaurant("u-lipy.cz", "https://u-lipy.cz/menu")
        store.insert_menu(restaurant_id, WEEK, WeeklyMenu())
        store.delete_menus_for_week(restaurant_id, WEEK)
        store.insert_menu(restaurant_id, WEEK, MENU)

        menus = store.list_menus(WEEK)
        assert len(menus) == 1
        assert menus[0]["data"] == MENU.to_document()

    def test_delete_restaurant_cascades(self, store):
        """Deleting a restaurant removes its menus"""
        restaurant_id = store.upsert_restaurant("u-lipy.cz", "https://u-lipy.cz/menu")
        store.insert_menu(restaurant_id, WEEK, MENU)

        assert store.delete_restaurant(restaurant_id) is True
        assert store.list_menus(WEEK) == []
        assert store.delete_restaurant(restaurant_id) is False

    def test_stats(self, store):
        """Stats count restaurants and menus"""
        restaurant_id = store.upsert_restaurant("u-lipy.cz", "https://u-lipy.cz/menu")
        store.insert_menu(restaurant_id, WEEK, MENU)

        stats = store.get_stats()
        assert stats["restaurants"] == 1
        assert stats["menus"] == 1
        assert stats["database_path"] == store.database_path
