from buildings_api.models.building import Building

__all__ = [
    "Building",
]
