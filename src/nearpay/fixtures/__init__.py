from nearpay.fixtures.catalogue import (
    CHAT_TEMPLATES,
    DEMO_CENTER,
    REQUEST_CATEGORIES,
    REQUEST_DESCRIPTIONS,
    DemoCatalogue,
    build_demo_catalogue,
)

__all__ = [
    "CHAT_TEMPLATES",
    "DEMO_CENTER",
    "REQUEST_CATEGORIES",
    "REQUEST_DESCRIPTIONS",
    "DemoCatalogue",
    "build_demo_catalogue",
]
