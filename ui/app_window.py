import logging
import tkinter as tk
from typing import Optional

import customtkinter as ctk
from models.budget import Budget
from models.transaction import Transaction
from models.user import User
from services.auth_service import IdentitySession, submit_credentials
from services.backend import DataBackend, OperationResult
from services.financial_store import FinancialDataStore
from ui.components.alert_banner import AlertBanner
from ui.components.auth_form import AuthForm
from ui.components.transaction_form import TransactionForm
from ui.tabs.budgets_tab import BudgetsTab
from ui.tabs.dashboard_tab import DashboardTab
from ui.tabs.transactions_tab import TransactionsTab
from ui.worker import run_in_background
from utils.constants import APP_NAME, APP_WIDTH, APP_HEIGHT

logger = logging.getLogger(__name__)


_REFRESH_SCOPES: dict[str, set[str]] = {
    "transaction": {"dashboard", "transactions", "budgets"},
    "budget":      {"budgets"},
    "full":        {"dashboard", "transactions", "budgets"},
}

_PAGES = ["Dashboard", "Transactions", "Budget"]


class AppWindow(ctk.CTk):
    """Top-level window. Shows the auth form while signed out and the
    sidebar layout while signed in; owns the FinancialDataStore for the
    signed-in user.
    """

    def __init__(
        self,
        session: IdentitySession,
        data_backend: DataBackend,
        initial_email: str = "",
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._session = session
        self._data_backend = data_backend
        self._initial_email = initial_email
        self._date_format = date_format
        self._store: FinancialDataStore | None = None
        self._unsubscribe_store = None
        self._root_frame: ctk.CTkFrame | None = None

        self.title(APP_NAME)
        self.minsize(APP_WIDTH, APP_HEIGHT)
        self.geometry(f"{APP_WIDTH}x{APP_HEIGHT}")
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self._show_loading()
        self._unsubscribe_session = session.subscribe(lambda user: self._marshal(self._on_user, user))
        run_in_background(self, self._restore_session, self._on_restored)

    @property
    def last_email(self) -> str:
        user = self._session.current_user
        return user.email if user else self._initial_email

    def close(self):
        self._unsubscribe_session()
        self._close_store()

    # ── Session ──────────────────────────────────────────────────────────────

    def _restore_session(self) -> OperationResult[Optional[User]]:
        return OperationResult.success(self._session.restore())

    def _on_restored(self, result: OperationResult):
        # The session listener handles the success path.
        if result.error:
            self._on_user(None)

    def _marshal(self, fn, *args):
        """Run fn on the Tk thread; listeners may fire from worker threads."""
        try:
            self.after(0, lambda: fn(*args))
        except (RuntimeError, tk.TclError):
            logger.debug("Window gone before notification arrived")

    def _on_user(self, user: Optional[User]):
        if not self.winfo_exists():
            return
        if user is None:
            self._close_store()
            self._show_auth()
            return
        if self._store and self._store.user_id == user.id:
            return
        self._close_store()
        self._initial_email = user.email
        store = FinancialDataStore(self._data_backend, user.id)
        self._store = store
        self._unsubscribe_store = store.subscribe(
            lambda scope: self._marshal(self._on_store_change, store, scope)
        )
        logger.info("Signed in as %s", user.email)
        self._show_main(user)
        self._load(store)

    def _close_store(self):
        if self._unsubscribe_store:
            self._unsubscribe_store()
            self._unsubscribe_store = None
        if self._store:
            self._store.close()
            self._store = None

    def _sign_out(self):
        def run():
            self._session.sign_out()
            return OperationResult.success()

        run_in_background(self, run, self._on_mutation_result)

    # ── Screens ──────────────────────────────────────────────────────────────

    def _replace_root(self) -> ctk.CTkFrame:
        if self._root_frame is not None:
            self._root_frame.destroy()
        self._root_frame = ctk.CTkFrame(self, fg_color="transparent", corner_radius=0)
        self._root_frame.grid(row=0, column=0, sticky="nsew")
        return self._root_frame

    def _show_loading(self):
        frame = self._replace_root()
        ctk.CTkLabel(frame, text="Loading…", text_color="gray60", font=ctk.CTkFont(size=16)).place(
            relx=0.5, rely=0.5, anchor="center"
        )

    def _show_auth(self):
        frame = self._replace_root()
        AuthForm(
            frame,
            submit=lambda email, pw, confirm, sign_up: submit_credentials(
                self._session, email, pw, confirm, sign_up
            ),
            initial_email=self._initial_email,
        ).place(relx=0.5, rely=0.5, anchor="center")

    def _show_main(self, user: User):
        frame = self._replace_root()
        frame.grid_columnconfigure(1, weight=1)
        frame.grid_rowconfigure(0, weight=1)

        self._build_sidebar(frame)

        content = ctk.CTkFrame(frame, fg_color="transparent")
        content.grid(row=0, column=1, sticky="nsew")
        content.grid_columnconfigure(0, weight=1)
        content.grid_rowconfigure(2, weight=1)

        self._build_header(content, user)
        self._banner_frame = ctk.CTkFrame(content, fg_color="transparent", height=0)
        self._banner_frame.grid(row=1, column=0, sticky="ew", padx=8)
        self._build_pages(content)
        self._select_page("Dashboard")

    def _build_sidebar(self, parent):
        sidebar = ctk.CTkFrame(parent, width=180, corner_radius=0, fg_color=("gray85", "gray15"))
        sidebar.grid(row=0, column=0, sticky="ns")
        sidebar.grid_propagate(False)

        ctk.CTkLabel(sidebar, text=APP_NAME, font=ctk.CTkFont(size=20, weight="bold")).pack(
            padx=16, pady=(20, 24), anchor="w"
        )
        self._nav_buttons: dict[str, ctk.CTkButton] = {}
        for name in _PAGES:
            btn = ctk.CTkButton(
                sidebar, text=name, anchor="w", height=36,
                fg_color="transparent", text_color=("gray10", "gray90"),
                hover_color=("gray75", "gray25"),
                command=lambda n=name: self._select_page(n),
            )
            btn.pack(fill="x", padx=8, pady=2)
            self._nav_buttons[name] = btn

    def _build_header(self, parent, user: User):
        header = ctk.CTkFrame(parent, fg_color=("gray90", "gray17"), corner_radius=0, height=48)
        header.grid(row=0, column=0, sticky="ew")
        header.grid_propagate(False)

        self._page_title = ctk.CTkLabel(header, text="", font=ctk.CTkFont(size=16, weight="bold"))
        self._page_title.pack(side="left", padx=16)
        ctk.CTkButton(
            header, text="Sign Out", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._sign_out,
        ).pack(side="right", padx=(4, 12))
        ctk.CTkLabel(header, text=user.email, text_color="gray60").pack(side="right", padx=8)
        self._status_label = ctk.CTkLabel(header, text="Loading your data…", text_color="gray60")
        self._status_label.pack(side="right", padx=8)

    def _build_pages(self, parent):
        pages = ctk.CTkFrame(parent, fg_color="transparent")
        pages.grid(row=2, column=0, sticky="nsew")
        pages.grid_columnconfigure(0, weight=1)
        pages.grid_rowconfigure(0, weight=1)

        self._dashboard_tab = DashboardTab(
            pages,
            on_add_transaction=self._open_add_transaction,
            on_retry_load=lambda: self._store and self._load(self._store),
            date_format=self._date_format,
        )
        self._transactions_tab = TransactionsTab(
            pages,
            on_add=self._open_add_transaction,
            on_edit=self._open_edit_transaction,
            on_delete=self._delete_transaction,
            date_format=self._date_format,
        )
        self._budgets_tab = BudgetsTab(
            pages,
            on_add=self._add_budget,
            on_update=self._update_budget,
            on_delete=self._delete_budget,
        )
        self._pages = {
            "Dashboard": self._dashboard_tab,
            "Transactions": self._transactions_tab,
            "Budget": self._budgets_tab,
        }
        for page in self._pages.values():
            page.grid(row=0, column=0, sticky="nsew")

    def _select_page(self, name: str):
        self._pages[name].tkraise()
        self._page_title.configure(text=name)
        for n, btn in self._nav_buttons.items():
            btn.configure(fg_color=("gray75", "gray25") if n == name else "transparent")

    # ── Store ────────────────────────────────────────────────────────────────

    def _load(self, store: FinancialDataStore):
        if store is self._store:
            self._status_label.configure(text="Loading your data…")
        run_in_background(self, store.load, lambda _result: None)

    def _on_store_change(self, store: FinancialDataStore, scope: str):
        if store is not self._store or store.closed:
            return
        if scope == "full":
            self._status_label.configure(text="")
        self.notify_tabs_refresh(scope)

    def notify_tabs_refresh(self, scope: str = "full"):
        store = self._store
        if store is None:
            return
        tabs = _REFRESH_SCOPES.get(scope, _REFRESH_SCOPES["full"])
        if "dashboard"    in tabs: self._dashboard_tab.show(store.dashboard, store.load_error)
        if "transactions" in tabs: self._transactions_tab.show(store.transactions)
        if "budgets"      in tabs: self._budgets_tab.show(store.budget_statuses())

    # ── Actions ──────────────────────────────────────────────────────────────

    def _open_add_transaction(self):
        store = self._store
        if store is None:
            return
        form = TransactionForm(self, on_submit=store.add_transaction, date_format=self._date_format)
        self.wait_window(form)

    def _open_edit_transaction(self, tx: Transaction):
        store = self._store
        if store is None:
            return
        form = TransactionForm(
            self,
            on_submit=lambda fields: store.update_transaction(tx.id, fields),
            transaction=tx,
            date_format=self._date_format,
        )
        self.wait_window(form)

    def _delete_transaction(self, tx: Transaction):
        store = self._store
        if store is not None:
            run_in_background(self, lambda: store.delete_transaction(tx.id), self._on_mutation_result)

    def _add_budget(self, fields: dict) -> OperationResult[Budget]:
        store = self._store
        if store is None:
            return OperationResult.failure("Not authenticated")
        return store.add_budget(fields)

    def _update_budget(self, budget: Budget, fields: dict) -> OperationResult[Budget]:
        store = self._store
        if store is None:
            return OperationResult.failure("Not authenticated")
        return store.update_budget(budget.id, fields)

    def _delete_budget(self, budget: Budget):
        store = self._store
        if store is not None:
            run_in_background(self, lambda: store.delete_budget(budget.id), self._on_mutation_result)

    def _on_mutation_result(self, result: OperationResult):
        if result.error:
            self._show_error(result.error.message)

    def _show_error(self, message: str):
        frame = getattr(self, "_banner_frame", None)
        if frame is None or not frame.winfo_exists():
            return
        for w in frame.winfo_children():
            w.destroy()
        AlertBanner(frame, message=message, severity="error").pack(fill="x", pady=2)
