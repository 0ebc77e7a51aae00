import logging
import os
import sys
import customtkinter as ctk

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from database.budget_dao import BudgetDAO
from database.user_dao import UserDAO

from services.auth_service import IdentitySession
from services.backend import SQLiteAuthBackend, SQLiteDataBackend

from ui.app_window import AppWindow
from utils.app_config import get_db_folder, get_setting, set_setting
from utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def main():
    # ── Bootstrap: logging and DB folder from pre-DB config ───────────────────
    configure_logging(get_setting("log_level"))
    db_folder = get_db_folder()

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open(db_folder=db_folder)
    logger.info("Opened database at %s", db.db_path)

    # ── DAOs ─────────────────────────────────────────────────────────────────
    user_dao = UserDAO(db)
    tx_dao = TransactionDAO(db)
    budget_dao = BudgetDAO(db)

    # ── Backends & session ───────────────────────────────────────────────────
    auth = SQLiteAuthBackend(db, user_dao)
    data_backend = SQLiteDataBackend(tx_dao, budget_dao, auth)
    session = IdentitySession(auth)

    # ── Appearance ───────────────────────────────────────────────────────────
    ctk.set_appearance_mode(get_setting("appearance_mode") or "system")
    ctk.set_default_color_theme("blue")
    date_format = db.get_setting("date_format", "MM/DD/YYYY")

    # ── Launch UI ────────────────────────────────────────────────────────────
    app = AppWindow(
        session=session,
        data_backend=data_backend,
        initial_email=get_setting("last_email") or "",
        date_format=date_format,
    )

    # Remember the last email on close
    def on_close():
        set_setting("last_email", app.last_email)
        app.close()
        session.close()
        db.close()
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_close)
    app.mainloop()


if __name__ == "__main__":
    main()
