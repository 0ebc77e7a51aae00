import customtkinter as ctk
from typing import Callable
from models.budget import Budget, BUDGET_PERIODS
from services.backend import OperationResult
from services.validation import validate_budget
from ui.components.confirm_dialog import center_over_master
from ui.worker import run_in_background


class BudgetForm(ctk.CTkToplevel):
    """Add a budget, or edit an existing one's category, amount or period."""

    def __init__(
        self,
        master,
        on_submit: Callable[[dict], OperationResult],
        budget: Budget | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._on_submit = on_submit
        self.saved = False

        self.title("Edit Budget" if budget else "Add Budget")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        ctk.CTkLabel(self, text="Category:").grid(row=r, column=0, padx=(16, 8), pady=(16, 4), sticky="e")
        self._cat_var = ctk.StringVar(value=budget.category if budget else "")
        ctk.CTkEntry(self, textvariable=self._cat_var, width=200).grid(
            row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
        )
        r += 1

        ctk.CTkLabel(self, text="Amount:").grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
        self._amount_var = ctk.StringVar(value=f"{budget.amount:.2f}" if budget else "")
        ctk.CTkEntry(self, textvariable=self._amount_var, width=200).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        ctk.CTkLabel(self, text="Period:").grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
        self._period_var = ctk.StringVar(value=budget.period if budget else BUDGET_PERIODS[0])
        ctk.CTkSegmentedButton(self, values=list(BUDGET_PERIODS), variable=self._period_var).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="w"
        )
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=280, anchor="w",
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            buttons, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        self._save_btn = ctk.CTkButton(buttons, text="Save", width=90, command=self._on_save)
        self._save_btn.pack(side="right")

        self.transient(master)
        self.grab_set()
        center_over_master(self)

    def _on_save(self):
        try:
            fields = validate_budget(self._cat_var.get(), self._amount_var.get(), self._period_var.get())
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self._save_btn.configure(state="disabled")
        run_in_background(self, lambda: self._on_submit(fields), self._on_result)

    def _on_result(self, result: OperationResult):
        if result.error:
            self._save_btn.configure(state="normal")
            self._error_var.set(result.error.message)
            return
        self.saved = True
        self.destroy()
