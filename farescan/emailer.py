"""Send the price report by mail with yagmail."""
import logging
from pathlib import Path
from typing import Sequence

import yagmail

from .config import settings


def send_report(subject: str, html_body: str, attachments: Sequence[Path] = ()) -> bool:
    """Mail the rendered report (and optional files such as the flat CSV). Returns False when not configured."""
    if not settings.email_configured():
        logging.warning("Report not mailed: SRC_MAIL, SRC_PWD and DST_MAIL must all be set.")
        return False
    existing = [str(path) for path in attachments if Path(path).exists()]
    yag = yagmail.SMTP(settings.src_mail, settings.src_pwd, port=587, smtp_starttls=True, smtp_ssl=False)
    try:
        yag.send(to=settings.dst_mail, subject=subject, contents=html_body, attachments=existing or None)
    finally:
        yag.close()
    logging.info("Report mailed to %s with %d attachment(s)", settings.dst_mail, len(existing))
    return True
