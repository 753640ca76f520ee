"""DI area classification for ``di.xml`` files and class names."""

from __future__ import annotations

from typing import Optional

GLOBAL = "global"
FRONTEND = "frontend"
ADMINHTML = "adminhtml"
WEBAPI_REST = "webapi_rest"
WEBAPI_SOAP = "webapi_soap"
CRONTAB = "crontab"
GRAPHQL = "graphql"

AREA_DIRS = (
    ("/etc/frontend/", FRONTEND),
    ("/etc/adminhtml/", ADMINHTML),
    ("/etc/webapi_rest/", WEBAPI_REST),
    ("/etc/webapi_soap/", WEBAPI_SOAP),
    ("/etc/crontab/", CRONTAB),
    ("/etc/graphql/", GRAPHQL),
)

ADMINHTML_PATTERNS = (
    "\\Block\\Adminhtml\\",
    "\\Controller\\Adminhtml\\",
    "\\Ui\\Component\\",
    "\\Adminhtml\\",
)

FRONTEND_PATTERNS = (
    "\\ViewModel\\",
    "\\Controller\\Customer\\",
    "\\Controller\\Checkout\\",
    "\\Controller\\Catalog\\",
    "\\Controller\\Cart\\",
    "\\Frontend\\",
)


def get_scope(file_path: str) -> str:
    """Return the DI area of a ``di.xml`` path; first matching ``/etc/<area>/`` wins."""

    normalized = file_path.replace("\\", "/")
    for directory, area in AREA_DIRS:
        if directory in normalized:
            return area
    return GLOBAL


def is_global(file_path: str) -> bool:
    return get_scope(file_path) == GLOBAL


def detect_class_area(class_name: str) -> Optional[str]:
    """Suggest ``adminhtml`` or ``frontend`` for a class from naming conventions."""

    if any(pattern in class_name for pattern in ADMINHTML_PATTERNS):
        return ADMINHTML
    if "\\Block\\" in class_name and "\\Adminhtml\\" not in class_name:
        return FRONTEND
    if any(pattern in class_name for pattern in FRONTEND_PATTERNS):
        return FRONTEND
    return None
