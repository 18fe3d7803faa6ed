import logging

from ledger.models import Notice

logger = logging.getLogger("ledger.notice")


def notify(title: str, description: str = "") -> Notice:
    """Record a system notice. Alerting handlers attach to the ``ledger.notice`` logger."""
    notice = Notice.objects.create(title=title, description=description)
    logger.warning("%s: %s", title, description)
    return notice
