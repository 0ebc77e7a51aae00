import customtkinter as ctk
from typing import Callable
from models.transaction import Transaction
from services.backend import OperationResult
from services.validation import validate_transaction
from ui.components.confirm_dialog import center_over_master
from ui.components.date_picker import DatePickerWidget
from ui.worker import run_in_background
from utils.constants import DEFAULT_CATEGORIES, TYPE_COLORS
from utils.date_helpers import today_str


class TransactionForm(ctk.CTkToplevel):
    """Add or edit an income/expense transaction.

    on_submit receives the validated fields and returns the store's
    OperationResult; it runs off the Tk thread.
    """

    _last_date: str = today_str()  # reset to today on each app launch

    def __init__(
        self,
        master,
        on_submit: Callable[[dict], OperationResult],
        transaction: Transaction | None = None,
        initial_type: str = "expense",
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._on_submit = on_submit
        self._transaction = transaction
        self.saved = False

        tx = transaction
        self.title("Edit Transaction" if tx else "Add Transaction")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        # Type toggle
        self._label("Type:", r)
        self._type_var = ctk.StringVar(value=tx.type if tx else initial_type)
        ctk.CTkSegmentedButton(
            self, values=["income", "expense"], variable=self._type_var,
            command=lambda _: self._on_type_change(),
        ).grid(row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="w")
        r += 1

        # Amount
        self._label("Amount:", r)
        self._amount_var = ctk.StringVar(value=f"{tx.amount:.2f}" if tx else "")
        ctk.CTkEntry(self, textvariable=self._amount_var, width=200, placeholder_text="0").grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        # Category; free text is allowed so an edited record keeps a custom label
        self._label("Category:", r)
        self._cat_var = ctk.StringVar(value=tx.category if tx else "")
        self._cat_combo = ctk.CTkComboBox(
            self, values=self._category_choices(), variable=self._cat_var, width=200,
        )
        self._cat_combo.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        # Description
        self._label("Description:", r)
        self._desc_var = ctk.StringVar(value=tx.description if tx else "")
        ctk.CTkEntry(
            self, textvariable=self._desc_var, width=200, placeholder_text="Enter description"
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        # Date
        self._label("Date:", r)
        self._date_picker = DatePickerWidget(
            self,
            initial_date=tx.date if tx else TransactionForm._last_date,
            date_format=date_format,
        )
        self._date_picker.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color=TYPE_COLORS["expense"], wraplength=280, anchor="w",
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
        self._save_btn = ctk.CTkButton(
            buttons, text="Save" if tx else "Add Transaction", width=130, command=self._on_save,
        )
        self._save_btn.pack(side="right")

        self.transient(master)
        self.grab_set()
        center_over_master(self)

    def _label(self, text, row):
        ctk.CTkLabel(self, text=text).grid(
            row=row, column=0, padx=(16, 8), pady=(16 if row == 0 else 4, 4), sticky="e"
        )

    def _category_choices(self) -> list[str]:
        return list(DEFAULT_CATEGORIES.get(self._type_var.get(), []))

    def _on_type_change(self):
        choices = self._category_choices()
        self._cat_combo.configure(values=choices)
        if self._cat_var.get() not in choices:
            self._cat_var.set("")

    def _on_save(self):
        try:
            fields = validate_transaction(
                self._type_var.get(),
                self._amount_var.get(),
                self._cat_var.get(),
                self._desc_var.get(),
                self._date_picker.get(),
            )
        except ValueError as e:
            self._error_var.set(str(e))
            return

        self._error_var.set("")
        self._save_btn.configure(state="disabled", text="Saving…")
        run_in_background(self, lambda: self._on_submit(fields), self._on_result)

    def _on_result(self, result: OperationResult):
        if result.error:
            self._save_btn.configure(state="normal", text="Save" if self._transaction else "Add Transaction")
            self._error_var.set(result.error.message)
            return
        TransactionForm._last_date = self._date_picker.get()
        self.saved = True
        self.destroy()
