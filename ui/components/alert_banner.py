import customtkinter as ctk
from utils.constants import SEVERITY_COLORS


class AlertBanner(ctk.CTkFrame):
    """Dismissible coloured strip for non-blocking messages, with an optional action button."""

    def __init__(self, master, message: str, severity: str = "info",
                 action_text: str | None = None, action_cmd=None, **kwargs):
        color = SEVERITY_COLORS.get(severity, SEVERITY_COLORS["info"])
        super().__init__(master, fg_color=color, corner_radius=6, **kwargs)
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self, text=message, text_color="white",
            anchor="w", padx=10, pady=6, wraplength=700, justify="left",
        ).grid(row=0, column=0, sticky="ew")

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.grid(row=0, column=1, padx=(0, 4))

        if action_text and action_cmd:
            ctk.CTkButton(
                actions, text=action_text, width=60, height=24,
                fg_color="transparent", border_width=1, border_color="white",
                text_color="white", command=self._run_action(action_cmd),
            ).pack(side="left", padx=2)

        ctk.CTkButton(
            actions, text="✕", width=28, height=24,
            fg_color="transparent", text_color="white",
            command=self.destroy,
        ).pack(side="left")

    def _run_action(self, action_cmd):
        def run():
            self.destroy()
            action_cmd()
        return run
