"""Logging setup and the error helper used around settings I/O.

Engine code logs through named loggers and routes failures it cannot
recover from (unreadable or malformed config files) through loggerRaise.
"""
import sys
import logging
import traceback
from PyQt5.QtWidgets import QMessageBox

# Running from a source checkout re-raises straight away; frozen builds report first
DEBUG_MODE = not getattr(sys, 'frozen', False)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_main_window = None

def set_main_window(window):
    """Register the host window that owns error dialogs (None to detach)"""
    global _main_window
    _main_window = window

def configure_logging(level=logging.WARNING):
    """Install the console handler for the engine's named loggers

    Args:
        level: Root logging level (warnings and errors only by default)
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

def loggerRaise(e: Exception, user_message: str = None, title: str = "Error"):
    """Report an engine failure, then re-raise it

    Args:
        e: The exception being reported
        user_message: Short description for the dialog, e.g. "Error loading config"
        title: Dialog title

    From a source checkout the exception propagates untouched. Frozen
    builds log the traceback first and show a critical dialog on the
    registered host window (or log that no window is attached).
    """
    if DEBUG_MODE:
        raise e

    logger = logging.getLogger('FrameComposer')
    logger.error(f"{user_message or type(e).__name__}\n{traceback.format_exc()}")

    message = user_message if user_message else str(e)
    if _main_window:
        QMessageBox.critical(_main_window, title, message)
    else:
        logger.error(f"Error popup (no window): {title} - {message}")

    raise e
