# dialog.py - PicViewer Folder Selection Dialog
"""
Native folder picker used when no root folder is configured
"""

import logging

from errors import DialogFailed

logger = logging.getLogger("picviewer.dialog")


def select_root_folder(title: str = "Select Picture Folder") -> str:
    """Ask the user for a folder; returns "" when the dialog is cancelled"""
    try:
        import tkinter
        from tkinter import filedialog
    except ImportError as e:
        raise DialogFailed(f"folder dialog unavailable: {e}") from e

    try:
        root = tkinter.Tk()
    except tkinter.TclError as e:
        raise DialogFailed(f"could not open folder dialog: {e}") from e

    try:
        root.withdraw()
        selection = filedialog.askdirectory(parent=root, title=title, mustexist=True)
    except tkinter.TclError as e:
        raise DialogFailed(f"folder dialog failed: {e}") from e
    finally:
        root.destroy()

    if not selection:
        logger.info("Folder selection cancelled")
        return ""

    logger.info(f"Selected root folder: {selection}")
    return str(selection)
