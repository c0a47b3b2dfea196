"""PostgreSQL candidate source reading the storefront catalog schema."""

from __future__ import annotations

import logging
from typing import List

import psycopg
from psycopg.rows import dict_row

from storefront_search.errors import SourceConfigError
from storefront_search.models import Candidate
from storefront_search.sources.base import CandidateSource

logger = logging.getLogger(__name__)

PRODUCTS_QUERY = """
SELECT
    p."id"::text AS id,
    p."slug" AS slug,
    p."basePriceMinor" AS base_price_minor,
    p."isFeatured" AS is_featured,
    p."salesCount" AS sales_count,
    p."reviewCount" AS review_count,
    p."avgRating" AS avg_rating,
    (
        SELECT ma."url"
        FROM "ProductMedia" pm
        JOIN "MediaAsset" ma ON ma."id" = pm."mediaId"
        WHERE pm."productId" = p."id"
        ORDER BY pm."isThumb" DESC, pm."position" ASC
        LIMIT 1
    ) AS image_url,
    COALESCE(
        (
            SELECT json_agg(json_build_object(
                'locale', pt."locale"::text,
                'name', pt."name",
                'description', pt."description"
            ))
            FROM "ProductTranslation" pt
            WHERE pt."productId" = p."id"
        ),
        '[]'::json
    ) AS translations,
    json_build_object(
        'slug', c."slug",
        'names', COALESCE(
            (
                SELECT json_object_agg(ct."locale"::text, ct."name")
                FROM "CategoryTranslation" ct
                WHERE ct."categoryId" = c."id"
            ),
            '{}'::json
        )
    ) AS category,
    COALESCE(
        (
            SELECT json_agg(json_build_object(
                'type', t."type"::text,
                'slug', t."slug",
                'labels', COALESCE(
                    (
                        SELECT json_object_agg(tt."locale"::text, tt."label")
                        FROM "TagTranslation" tt
                        WHERE tt."tagId" = t."id"
                    ),
                    '{}'::json
                )
            ))
            FROM "ProductTag" ptag
            JOIN "Tag" t ON t."id" = ptag."tagId"
            WHERE ptag."productId" = p."id" AND t."isActive" = true
        ),
        '[]'::json
    ) AS tags,
    COALESCE(
        (
            SELECT json_agg(json_build_object(
                'stock', pv."stock",
                'is_active', pv."isActive",
                'size', CASE WHEN s."id" IS NULL THEN NULL ELSE json_build_object(
                    'code', s."code",
                    'labels', COALESCE(
                        (
                            SELECT json_object_agg(st."locale"::text, st."label")
                            FROM "SizeTranslation" st
                            WHERE st."sizeId" = s."id"
                        ),
                        '{}'::json
                    )
                ) END,
                'color', CASE WHEN col."id" IS NULL THEN NULL ELSE json_build_object(
                    'code', col."code",
                    'hex', col."hex",
                    'labels', COALESCE(
                        (
                            SELECT json_object_agg(colt."locale"::text, colt."label")
                            FROM "ColorTranslation" colt
                            WHERE colt."colorId" = col."id"
                        ),
                        '{}'::json
                    )
                ) END
            ))
            FROM "ProductVariant" pv
            LEFT JOIN "Size" s ON s."id" = pv."sizeId"
            LEFT JOIN "Color" col ON col."id" = pv."colorId"
            WHERE pv."productId" = p."id"
        ),
        '[]'::json
    ) AS variants
FROM "Product" p
JOIN "Category" c ON c."id" = p."categoryId"
WHERE p."status" = 'PUBLISHED'
  AND p."isActive" = true
  AND p."deletedAt" IS NULL
ORDER BY p."isFeatured" DESC, p."createdAt" DESC, p."id" ASC
"""


class PostgresCandidateSource(CandidateSource):
    name = "postgres"

    def __init__(self, database_url: str | None, connect_timeout: int = 10) -> None:
        if not database_url:
            raise SourceConfigError("DATABASE_URL is required for the postgres candidate source")
        self.database_url = database_url
        self.connect_timeout = connect_timeout

    async def fetch_candidates(self) -> List[Candidate]:
        conn = await psycopg.AsyncConnection.connect(
            self.database_url,
            autocommit=True,
            connect_timeout=self.connect_timeout,
            row_factory=dict_row,
        )
        try:
            async with conn.cursor() as cur:
                await cur.execute(PRODUCTS_QUERY)
                rows = await cur.fetchall()
        finally:
            await conn.close()
        logger.debug("Fetched %s product rows from postgres", len(rows))
        return self._parse_records(rows)
