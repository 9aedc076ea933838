# Cache key scheme shared by the entity repositories and the derived views

import math


class CacheKeyGenerator:
    @staticmethod
    def listing(entity_type):
        return f"{entity_type}s"

    @staticmethod
    def entity(entity_type, entity_id):
        return f"{entity_type}:{entity_id}"

    @staticmethod
    def genre(genre):
        return f"genre:{genre.strip().lower()}"

    @staticmethod
    def price_range(min_price, max_price):
        return f"price:{CacheKeyGenerator._number(min_price)}-{CacheKeyGenerator._number(max_price)}"

    @staticmethod
    def search(term):
        return f"search:{term.strip().lower()}"

    @staticmethod
    def _number(value):
        # 10 and 10.0 must share a key
        value = float(value)
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
