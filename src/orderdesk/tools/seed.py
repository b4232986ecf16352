from __future__ import annotations

from orderdesk.application.use_cases.seed_catalog import SeedCatalog
from orderdesk.infrastructure.container import get_container


def main() -> None:
    container = get_container()
    result = SeedCatalog(
        category_repository=container.category_repository,
        menu_repository=container.menu_repository,
    ).execute()
    print(
        f"seeded backend={container.backend} categories={result.categories_created} "
        f"menu_items={result.menu_items_created}"
    )


if __name__ == "__main__":
    main()
