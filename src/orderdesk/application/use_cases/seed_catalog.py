from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from orderdesk.application.ports.repositories import (
    CategoryRepository,
    DuplicateCategoryNameError,
    MenuRepository,
)
from orderdesk.domain.menu.entities import CategoryDraft, MenuItemDraft

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    CategoryDraft(name="soup", display_name="국물요리 (Soup Dishes)", sort_order=1),
    CategoryDraft(name="noodles", display_name="면류 (Noodles)", sort_order=2),
    CategoryDraft(name="rice", display_name="밥류 (Rice Dishes)", sort_order=3),
    CategoryDraft(name="meat", display_name="고기요리 (Meat Dishes)", sort_order=4),
    CategoryDraft(name="appetizer", display_name="안주/전류 (Appetizers)", sort_order=5),
    CategoryDraft(name="hotpot", display_name="전골류 (Hot Pot)", sort_order=6),
]

_MENU_ROWS = [
    ("곰탕", 140000, "gomtang.jpg", "soup"),
    ("순두부찌개", 140000, "soondubu.jpg", "soup"),
    ("갈비탕", 198000, "galbitang.jpg", "soup"),
    ("비지찌개", 140000, "biji.jpg", "soup"),
    ("순어탕", 140000, "soonuh.jpg", "soup"),
    ("해장국", 140000, "haejangguk.jpg", "soup"),
    ("김치찌개", 140000, "kimchi.jpg", "soup"),
    ("안주국", 140000, "anjuguk.jpg", "soup"),
    ("콩국수", 140000, "kongguksu.jpg", "noodles"),
    ("물냉면", 140000, "mulnaengmyeon.jpg", "noodles"),
    ("비빔냉면", 140000, "bibimnaengmyeon.jpg", "noodles"),
    ("해물라면", 140000, "haemul-ramen.jpg", "noodles"),
    ("비빔밥", 120000, "bibimbap.jpg", "rice"),
    ("뚝불고기", 190000, "dduk-bulgogi.jpg", "meat"),
    ("제육볶음", 140000, "jeyuk.jpg", "meat"),
    ("오삼불고기", 450000, "osam-bulgogi.jpg", "meat"),
    ("보쌈", 400000, "bossam.jpg", "meat"),
    ("차돌박이", 1700000, "chadolbagi.jpg", "meat"),
    ("군만두", 70000, "gunmandu.jpg", "appetizer"),
    ("감자전", 140000, "gamjajeon.jpg", "appetizer"),
    ("해물파전", 250000, "haemul-pajeon.jpg", "appetizer"),
    ("만두전골", 400000, "mandu-jeongol.jpg", "hotpot"),
    ("두부전골", 300000, "dubu-jeongol.jpg", "hotpot"),
    ("비석불고기전골", 400000, "biseok-bulgogi.jpg", "hotpot"),
]

DEFAULT_MENU = [
    MenuItemDraft(name=name, price=price, image=f"/api/menu-images/{image}", category=category)
    for name, price, image, category in _MENU_ROWS
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SeedResult:
    categories_created: int
    menu_items_created: int


class SeedCatalog:
    """Insert missing default categories and, on an empty catalog, the default menu."""

    def __init__(
        self,
        category_repository: CategoryRepository,
        menu_repository: MenuRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._category_repository = category_repository
        self._menu_repository = menu_repository
        self._clock = clock

    def execute(self) -> SeedResult:
        now = self._clock()
        existing_names = {category.name for category in self._category_repository.list_all()}
        categories_created = 0
        for draft in DEFAULT_CATEGORIES:
            if draft.name in existing_names:
                continue
            try:
                self._category_repository.create(draft, now)
            except DuplicateCategoryNameError:
                continue
            categories_created += 1

        menu_items_created = 0
        if not self._menu_repository.list_items():
            for item_draft in DEFAULT_MENU:
                self._menu_repository.create(item_draft)
                menu_items_created += 1

        logger.info(
            "catalog_seeded",
            extra={"count": categories_created + menu_items_created},
        )
        return SeedResult(
            categories_created=categories_created,
            menu_items_created=menu_items_created,
        )
