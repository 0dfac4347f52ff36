import logging

from storefront.core.config import get_settings
from storefront.core.db import session_scope
from storefront.models import Brand, Category

logger = logging.getLogger(__name__)


def ensure_default_catalog() -> None:
    """Seed the configured default categories and brands that do not exist yet."""

    settings = get_settings()
    if not settings.DEFAULT_CATEGORIES and not settings.DEFAULT_BRANDS:
        logger.debug("Default catalog bootstrap skipped: nothing configured")
        return

    with session_scope() as db:
        for model, names in ((Category, settings.DEFAULT_CATEGORIES), (Brand, settings.DEFAULT_BRANDS)):
            existing = {name for (name,) in db.query(model.name).filter(model.name.in_(names))}
            missing = [name for name in names if name not in existing]
            if not missing:
                continue
            db.add_all(model(name=name) for name in missing)
            logger.info("Seeded %s %s rows: %s", len(missing), model.__tablename__, ", ".join(missing))
