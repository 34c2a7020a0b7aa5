from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from app.core.refs import CityRef, LocationRef, VariantRef
from app.db.models import City, Location, Product, Variant


class CatalogRepository:
    """Admin database: locations, cities, products and variants."""

    source = "admin"

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def locations(self) -> list[LocationRef]:
        db = self.session_factory()
        try:
            stmt = (
                select(
                    Location.id.label("id"),
                    Location.display_name.label("display_name"),
                    Location.city_id.label("city_id"),
                    City.name.label("city_name"),
                )
                .join(City, City.id == Location.city_id)
                .order_by(Location.id)
            )
            return [
                LocationRef(id=r.id, display_name=r.display_name, city_id=r.city_id, city_name=r.city_name)
                for r in db.execute(stmt).all()
            ]
        finally:
            db.close()

    def cities(self) -> list[CityRef]:
        db = self.session_factory()
        try:
            rows = db.execute(select(City.id.label("id"), City.name.label("name")).order_by(City.id)).all()
            return [CityRef(id=r.id, name=r.name) for r in rows]
        finally:
            db.close()

    def variants(self) -> list[VariantRef]:
        db = self.session_factory()
        try:
            # outer join: a variant whose product row is gone still needs its title
            stmt = (
                select(
                    Variant.id.label("id"),
                    Variant.title.label("title"),
                    Variant.product_id.label("product_id"),
                    Variant.unit_weight.label("unit_weight"),
                    Product.name.label("product_name"),
                )
                .outerjoin(Product, Product.id == Variant.product_id)
                .order_by(Variant.id)
            )
            return [
                VariantRef(
                    id=r.id,
                    title=r.title,
                    product_id=r.product_id,
                    product_name=r.product_name,
                    unit_weight=float(r.unit_weight) if r.unit_weight is not None else None,
                )
                for r in db.execute(stmt).all()
            ]
        finally:
            db.close()
