import customtkinter as ctk
from models.transaction import Transaction
from services.aggregation import filter_transactions, sort_transactions
from ui.components.confirm_dialog import ConfirmDialog
from utils.constants import TRANSACTION_FILTERS, TRANSACTION_SORTS, TYPE_COLORS
from utils.currency import format_currency
from utils.date_helpers import format_display_date


_MAX_RENDERED_ROWS = 100


class TransactionsTab(ctk.CTkFrame):
    """Full transaction list with client-side filter and sort."""

    def __init__(
        self,
        master,
        on_add,      # callable()
        on_edit,     # callable(Transaction)
        on_delete,   # callable(Transaction)
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._on_add = on_add
        self._on_edit = on_edit
        self._on_delete = on_delete
        self._date_format = date_format
        self._transactions: list[Transaction] = []

        self._filter_var = ctk.StringVar(value="all")
        self._sort_var = ctk.StringVar(value="date")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        self._build_header()
        self._build_list()

    def show(self, transactions: list[Transaction]):
        self._transactions = transactions
        self._render()

    # ── Layout ───────────────────────────────────────────────────────────────

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkLabel(bar, text="Show:").pack(side="left", padx=(12, 4), pady=8)
        ctk.CTkSegmentedButton(
            bar, values=TRANSACTION_FILTERS, variable=self._filter_var,
            command=lambda _: self._render(),
        ).pack(side="left", padx=(0, 16))

        ctk.CTkLabel(bar, text="Sort by:").pack(side="left", padx=(0, 4))
        ctk.CTkSegmentedButton(
            bar, values=TRANSACTION_SORTS, variable=self._sort_var,
            command=lambda _: self._render(),
        ).pack(side="left")

        ctk.CTkButton(bar, text="+ Add Transaction", command=self._on_add).pack(
            side="right", padx=8
        )

    def _build_header(self):
        hdr = ctk.CTkFrame(self, fg_color=("gray82", "gray22"), corner_radius=0)
        hdr.grid(row=1, column=0, sticky="ew", padx=8, pady=(4, 0))
        cols = [("Date", 85), ("Type", 72), ("Category", 130),
                ("Description", 220), ("Amount", 110), ("Actions", 100)]
        for i, (label, width) in enumerate(cols):
            ctk.CTkLabel(
                hdr, text=label, width=width, anchor="w", font=ctk.CTkFont(weight="bold"),
            ).grid(row=0, column=i, padx=4, pady=4, sticky="w")

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=2, column=0, sticky="nsew", padx=8, pady=(0, 8))
        self._scroll.grid_columnconfigure(0, weight=1)

    # ── Rendering ────────────────────────────────────────────────────────────

    def _render(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        rows = sort_transactions(
            filter_transactions(self._transactions, self._filter_var.get()),
            self._sort_var.get(),
        )
        if not rows:
            ctk.CTkLabel(self._scroll, text="No transactions found", text_color="gray60").grid(
                row=0, column=0, pady=20
            )
            return

        for idx, tx in enumerate(rows[:_MAX_RENDERED_ROWS]):
            self._add_row(idx, tx)

        if len(rows) > _MAX_RENDERED_ROWS:
            ctk.CTkLabel(
                self._scroll,
                text=f"Showing {_MAX_RENDERED_ROWS} of {len(rows)} transactions. Use the filter to narrow results.",
                text_color="gray60",
                font=ctk.CTkFont(size=11),
            ).grid(row=_MAX_RENDERED_ROWS, column=0, pady=8)

    def _add_row(self, idx: int, tx: Transaction):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
        row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)

        color = TYPE_COLORS[tx.type]
        ctk.CTkLabel(
            row, text=format_display_date(tx.date, self._date_format), width=85, anchor="w",
        ).grid(row=0, column=0, padx=4, pady=4)
        ctk.CTkLabel(row, text=tx.type.title(), width=72, anchor="w", text_color=color).grid(
            row=0, column=1, padx=4
        )
        ctk.CTkLabel(row, text=tx.category or "—", width=130, anchor="w").grid(row=0, column=2, padx=4)
        ctk.CTkLabel(row, text=tx.description or "—", width=220, anchor="w").grid(row=0, column=3, padx=4)
        sign = "+" if tx.is_income else "-"
        ctk.CTkLabel(
            row, text=f"{sign}{format_currency(tx.amount)}", width=110, anchor="e", text_color=color,
        ).grid(row=0, column=4, padx=4)

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=5, padx=(4, 6))
        ctk.CTkButton(
            acts, text="Edit", width=44, height=24,
            command=lambda t=tx: self._on_edit(t),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Del", width=38, height=24,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda t=tx: self._confirm_delete(t),
        ).pack(side="left")

    def _confirm_delete(self, tx: Transaction):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            "Delete Transaction",
            f"Delete this {tx.type} of {format_currency(tx.amount)} ({tx.description})?",
            confirm_text="Delete",
        )
        if dlg.result:
            self._on_delete(tx)
