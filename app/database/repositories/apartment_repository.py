from typing import Any

from psycopg.rows import dict_row

from app.cache.expiring_cache import ExpiringCache
from app.database.connection import get_connection
from app.exports.models import Apartment, Building

_APARTMENT_COLUMNS = """
    a.id AS apartment_id,
    a.name AS apartment_name,
    o.id AS object_id,
    o.name AS object_name,
    o.street,
    o.zip_code,
    o.company_id
"""


def _to_apartment(row: dict[str, Any]) -> Apartment:
    building = Building(
        id=str(row["object_id"]),
        name=row["object_name"],
        street=row["street"] or "",
        company_id=str(row["company_id"]),
        zip_code=row["zip_code"],
    )
    return Apartment(
        id=str(row["apartment_id"]),
        name=row["apartment_name"],
        building=building,
    )


class ApartmentRepository:
    """Read access to apartments joined with their owning building (objects table)."""

    def __init__(self, cache: ExpiringCache[str, tuple[Apartment, ...]] | None = None) -> None:
        self._cache = cache if cache is not None else ExpiringCache(ttl_seconds=0)

    def list_by_building(self, building_id: str) -> list[Apartment]:
        """Return all apartments of a building ordered by name.

        Empty list if the building has no apartments or does not exist.
        """
        apartments = self._cache.get_or_load(
            building_id, lambda: tuple(self._fetch_by_building(building_id))
        )
        return list(apartments)

    def find_by_id(self, apartment_id: str) -> Apartment | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_APARTMENT_COLUMNS}
                    FROM apartments a
                    JOIN objects o ON o.id = a.object_id
                    WHERE a.id = %s
                    """,
                    (apartment_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_apartment(row)

    def _fetch_by_building(self, building_id: str) -> list[Apartment]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_APARTMENT_COLUMNS}
                    FROM apartments a
                    JOIN objects o ON o.id = a.object_id
                    WHERE a.object_id = %s
                    ORDER BY a.name, a.id
                    """,
                    (building_id,),
                )
                rows = cur.fetchall()
        return [_to_apartment(row) for row in rows]
