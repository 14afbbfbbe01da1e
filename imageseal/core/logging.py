import logging
from logging import Logger

from .config import get_settings

# الطبقات تُرسم داخل مجمّع خيوط، لذا يظهر اسم الخيط في كل سطر
LOG_FORMAT = "[%(levelname)s] %(asctime)s | %(name)s | %(threadName)s | %(message)s"


def configure_logging(component: str | None = None) -> Logger:
    """
    تهيئة مسجل الخدمة مرة واحدة وإرجاع مسجل المكوّن المطلوب.

    المستوى يُقرأ من ``Settings.log_level``، ومسجلات المكونات (``api`` و ``pdf`` ...)
    أبناء للمسجل الرئيسي فتشاركه المعالج نفسه.
    """
    settings = get_settings()
    root = logging.getLogger(settings.app_name)
    if not root.handlers:
        root.setLevel(settings.log_level.upper())
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.propagate = False
    return root.getChild(component) if component else root
