import customtkinter as ctk
from typing import Callable
from ui.worker import run_in_background
from services.backend import OperationResult
from utils.constants import APP_NAME


class AuthForm(ctk.CTkFrame):
    """Sign-in / sign-up card.

    submit(email, password, confirm_password, sign_up) validates and calls the
    auth collaborator, returning an error message or None; it runs off the Tk
    thread. A successful sign-in is observed through the session, not here.
    """

    def __init__(
        self,
        master,
        submit: Callable[[str, str, str | None, bool], str | None],
        initial_email: str = "",
        **kwargs,
    ):
        super().__init__(master, corner_radius=16, **kwargs)
        self._submit = submit
        self._sign_up = False

        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(self, text=APP_NAME, font=ctk.CTkFont(size=26, weight="bold")).grid(
            row=0, column=0, padx=40, pady=(32, 2)
        )
        self._subtitle = ctk.CTkLabel(self, text="Welcome back", text_color="gray60")
        self._subtitle.grid(row=1, column=0, pady=(0, 16))

        self._error_var = ctk.StringVar()
        self._error_label = ctk.CTkLabel(
            self, textvariable=self._error_var, text_color="#F44336", wraplength=300,
        )
        self._error_label.grid(row=2, column=0, padx=40, sticky="ew")

        self._email_var = ctk.StringVar(value=initial_email)
        ctk.CTkEntry(
            self, textvariable=self._email_var, placeholder_text="Email address", width=300,
        ).grid(row=3, column=0, padx=40, pady=6)

        pw_row = ctk.CTkFrame(self, fg_color="transparent")
        pw_row.grid(row=4, column=0, padx=40, pady=6)
        self._password_var = ctk.StringVar()
        self._password_entry = ctk.CTkEntry(
            pw_row, textvariable=self._password_var, placeholder_text="Password", show="•", width=256,
        )
        self._password_entry.pack(side="left")
        self._show_var = ctk.BooleanVar(value=False)
        ctk.CTkCheckBox(
            pw_row, text="👁", width=40, variable=self._show_var, command=self._toggle_show,
        ).pack(side="left", padx=(4, 0))

        self._confirm_var = ctk.StringVar()
        self._confirm_entry = ctk.CTkEntry(
            self, textvariable=self._confirm_var, placeholder_text="Confirm password", show="•", width=300,
        )

        self._submit_btn = ctk.CTkButton(self, text="Sign In", width=300, command=self._on_submit)
        self._submit_btn.grid(row=6, column=0, padx=40, pady=(16, 8))

        self._mode_btn = ctk.CTkButton(
            self, text="Need an account? Sign Up", fg_color="transparent",
            text_color=("#1f6aa5", "#5aa9e6"), hover=False, command=self._toggle_mode,
        )
        self._mode_btn.grid(row=7, column=0, pady=(0, 24))

        for entry in (self._password_entry, self._confirm_entry):
            entry.bind("<Return>", lambda _: self._on_submit())

    def _toggle_show(self):
        self._password_entry.configure(show="" if self._show_var.get() else "•")

    def _toggle_mode(self):
        self._sign_up = not self._sign_up
        self._error_var.set("")
        if self._sign_up:
            self._subtitle.configure(text="Create your account")
            self._confirm_entry.grid(row=5, column=0, padx=40, pady=6)
            self._submit_btn.configure(text="Create Account")
            self._mode_btn.configure(text="Already have an account? Sign In")
        else:
            self._subtitle.configure(text="Welcome back")
            self._confirm_entry.grid_forget()
            self._submit_btn.configure(text="Sign In")
            self._mode_btn.configure(text="Need an account? Sign Up")

    def _on_submit(self):
        if str(self._submit_btn.cget("state")) == "disabled":
            return
        self._error_var.set("")
        self._submit_btn.configure(state="disabled")
        email = self._email_var.get()
        password = self._password_var.get()
        confirm = self._confirm_var.get() if self._sign_up else None
        sign_up = self._sign_up

        def call():
            message = self._submit(email, password, confirm, sign_up)
            return OperationResult.failure(message) if message else OperationResult.success()

        run_in_background(self, call, self._on_result)

    def _on_result(self, result: OperationResult):
        self._submit_btn.configure(state="normal")
        if result.error:
            self._error_var.set(result.error.message)
