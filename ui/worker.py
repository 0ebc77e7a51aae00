import logging
import threading
import tkinter as tk
from typing import Callable

from services.backend import OperationResult, UNEXPECTED_ERROR_MESSAGE

logger = logging.getLogger(__name__)


def run_in_background(widget, fn: Callable[[], OperationResult], on_done: Callable[[OperationResult], None]):
    """Run fn on a daemon thread and hand its result to on_done on the Tk thread.

    on_done is skipped if the widget was destroyed while fn ran. Anything fn
    raises becomes a generic error result.
    """

    def work():
        try:
            result = fn()
        except Exception:
            logger.exception("Background task failed")
            result = OperationResult.failure(UNEXPECTED_ERROR_MESSAGE, "unexpected")

        def deliver():
            if widget.winfo_exists():
                on_done(result)

        try:
            widget.after(0, deliver)
        except (RuntimeError, tk.TclError):
            logger.debug("Widget gone before background result arrived")

    threading.Thread(target=work, daemon=True).start()
