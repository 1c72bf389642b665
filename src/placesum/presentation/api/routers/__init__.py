from placesum.presentation.api.routers.places import router as places_router

__all__ = [
    "places_router",
]
