from dataclasses import dataclass

from app.db.data_files import read_json_list
from app.models.booking import ExperienceType
from app.models.catalog import Package, Tour

BOOKING_KINDS = ("tour", "package")


@dataclass
class CatalogItem:
    kind: str             # tour|package
    slug: str
    title: str
    base_price: float

    @property
    def experience_type(self) -> str:
        return ExperienceType.TOUR.value if self.kind == "tour" else ExperienceType.SAFARI.value


def get_tours() -> list[Tour]:
    return [Tour(**t) for t in read_json_list("tours")]


def get_packages() -> list[Package]:
    # cheapest first
    return sorted((Package(**p) for p in read_json_list("packages")), key=lambda p: p.priceFrom)


def get_tour(slug: str) -> Tour | None:
    return next((t for t in get_tours() if t.slug == slug), None)


def get_package(slug: str) -> Package | None:
    return next((p for p in get_packages() if p.slug == slug), None)


def resolve_item(kind: str, slug: str) -> CatalogItem | None:
    if kind == "tour":
        t = get_tour(slug)
        return CatalogItem("tour", t.slug, t.title, t.basePrice) if t else None
    p = get_package(slug)
    return CatalogItem("package", p.slug, p.title, p.priceFrom) if p else None
