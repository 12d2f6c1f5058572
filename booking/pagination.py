import math


def pagination_envelope(page: int, limit: int, total: int) -> dict:
    return {'page': page, 'limit': limit, 'total': total, 'pages': math.ceil(total / limit) if limit else 0}
