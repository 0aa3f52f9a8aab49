"""Repository read helpers shared by the catalogue, cart and order queries."""

import math

from protean.exceptions import ValidationError

BATCH_SIZE = 100


def fetch_all(repo, **filters):
    """Return every record matching ``filters``, reading in batches.

    Protean querysets cap each read, so larger collections are walked with
    ``offset``/``limit`` until a short batch comes back.
    """
    records = []
    offset = 0
    while True:
        queryset = repo._dao.query.filter(**filters) if filters else repo._dao.query
        batch = queryset.offset(offset).limit(BATCH_SIZE).all().items
        records.extend(batch)
        if len(batch) < BATCH_SIZE:
            return records
        offset += BATCH_SIZE


def paginate(records, page=1, limit=20):
    """Slice ``records`` into a page envelope."""
    if page < 1 or limit < 1:
        raise ValidationError({"page": ["Page and limit must be positive"]})

    total = len(records)
    total_pages = math.ceil(total / limit) if total else 0
    start = (page - 1) * limit
    return {
        "docs": records[start : start + limit],
        "total_docs": total,
        "limit": limit,
        "page": page,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
