import customtkinter as ctk
from typing import Callable
from models.budget import Budget, BudgetStatus, BUDGET_PERIODS
from services.backend import OperationResult
from services.validation import validate_budget
from ui.components.budget_form import BudgetForm
from ui.components.confirm_dialog import ConfirmDialog
from ui.worker import run_in_background
from utils.constants import TYPE_COLORS
from utils.currency import format_currency


class BudgetsTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        on_add: Callable[[dict], OperationResult],
        on_update: Callable[[Budget, dict], OperationResult],
        on_delete,   # callable(Budget)
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._on_add = on_add
        self._on_update = on_update
        self._on_delete = on_delete
        self._adding = False

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        self._build_add_form()
        self._build_list()

    def show(self, statuses: list[BudgetStatus]):
        for w in self._scroll.winfo_children():
            w.destroy()

        if not statuses:
            ctk.CTkLabel(
                self._scroll,
                text="No budgets yet. Click '+ Add Budget' to create one.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return

        for idx, status in enumerate(statuses):
            self._add_budget_card(idx, status)

    # ── Toolbar & add form ───────────────────────────────────────────────────

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, text="Budgets", font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=12, pady=6)
        self._toggle_btn = ctk.CTkButton(bar, text="+ Add Budget", command=self._toggle_add_form)
        self._toggle_btn.pack(side="right", padx=8)

    def _build_add_form(self):
        form = ctk.CTkFrame(self, fg_color=("gray90", "gray20"), corner_radius=8)
        self._add_frame = form

        self._cat_var = ctk.StringVar()
        ctk.CTkEntry(form, textvariable=self._cat_var, width=160, placeholder_text="Category").grid(
            row=0, column=0, padx=(12, 4), pady=10
        )
        self._amount_var = ctk.StringVar()
        ctk.CTkEntry(form, textvariable=self._amount_var, width=110, placeholder_text="Amount").grid(
            row=0, column=1, padx=4
        )
        self._period_var = ctk.StringVar(value=BUDGET_PERIODS[0])
        ctk.CTkSegmentedButton(form, values=list(BUDGET_PERIODS), variable=self._period_var).grid(
            row=0, column=2, padx=4
        )
        self._save_btn = ctk.CTkButton(form, text="Save", width=70, command=self._on_save_new)
        self._save_btn.grid(row=0, column=3, padx=(8, 12))

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(form, textvariable=self._error_var, text_color="#F44336", anchor="w").grid(
            row=1, column=0, columnspan=4, padx=12, pady=(0, 6), sticky="w"
        )

    def _toggle_add_form(self):
        self._adding = not self._adding
        if self._adding:
            self._add_frame.grid(row=1, column=0, sticky="ew", padx=8, pady=(6, 0))
            self._toggle_btn.configure(text="Cancel")
        else:
            self._add_frame.grid_forget()
            self._toggle_btn.configure(text="+ Add Budget")
            self._error_var.set("")

    def _on_save_new(self):
        try:
            fields = validate_budget(self._cat_var.get(), self._amount_var.get(), self._period_var.get())
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self._error_var.set("")
        self._save_btn.configure(state="disabled")
        run_in_background(self, lambda: self._on_add(fields), self._on_add_result)

    def _on_add_result(self, result: OperationResult):
        self._save_btn.configure(state="normal")
        if result.error:
            self._error_var.set(result.error.message)
            return
        self._cat_var.set("")
        self._amount_var.set("")
        self._period_var.set(BUDGET_PERIODS[0])
        self._toggle_add_form()

    # ── Cards ────────────────────────────────────────────────────────────────

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=2, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _add_budget_card(self, idx: int, status: BudgetStatus):
        b = status.budget
        card = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        card.grid(row=idx, column=0, sticky="ew", padx=4, pady=4)
        card.grid_columnconfigure(0, weight=1)

        hdr = ctk.CTkFrame(card, fg_color="transparent")
        hdr.grid(row=0, column=0, sticky="ew", padx=12, pady=(10, 4))
        hdr.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            hdr, text=f"{b.category}  ({b.period})",
            font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w")

        color = TYPE_COLORS["expense"] if status.is_over_budget else TYPE_COLORS["income"]
        ctk.CTkLabel(hdr, text=f"{status.percentage:.1f}%", text_color=color).grid(
            row=0, column=1, padx=(8, 0)
        )
        ctk.CTkButton(
            hdr, text="Edit", width=50, height=24,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda budget=b: self._open_edit(budget),
        ).grid(row=0, column=2, padx=(8, 0))
        ctk.CTkButton(
            hdr, text="Del", width=38, height=24,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda budget=b: self._confirm_delete(budget),
        ).grid(row=0, column=3, padx=(4, 0))

        ctk.CTkLabel(
            card,
            text=f"Spent: {format_currency(status.spent)}  /  Limit: {format_currency(b.amount)}",
            text_color="gray60", anchor="w",
        ).grid(row=1, column=0, padx=12, sticky="ew")

        bar = ctk.CTkProgressBar(card, progress_color=color)
        bar.grid(row=2, column=0, padx=12, pady=(4, 4), sticky="ew")
        bar.set(status.bar_fraction)

        if status.is_over_budget:
            ctk.CTkLabel(
                card, text=f"Over budget by {format_currency(status.overage)}",
                text_color=TYPE_COLORS["expense"], anchor="w",
            ).grid(row=3, column=0, padx=12, pady=(0, 10), sticky="w")
        else:
            ctk.CTkLabel(
                card, text=f"Remaining: {format_currency(status.remaining)}",
                text_color="gray60", anchor="w",
            ).grid(row=3, column=0, padx=12, pady=(0, 10), sticky="w")

    def _open_edit(self, budget: Budget):
        form = BudgetForm(
            self.winfo_toplevel(),
            on_submit=lambda fields: self._on_update(budget, fields),
            budget=budget,
        )
        self.wait_window(form)

    def _confirm_delete(self, budget: Budget):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            "Delete Budget",
            f"Delete the {budget.period} budget for '{budget.category}'?",
            confirm_text="Delete",
        )
        if dlg.result:
            self._on_delete(budget)
