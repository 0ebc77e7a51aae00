import customtkinter as ctk
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg

from models.dashboard import DashboardData
from ui.components.alert_banner import AlertBanner
from utils.constants import CHART_COLORS, TYPE_COLORS
from utils.currency import format_currency
from utils.date_helpers import format_display_date


class DashboardTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        on_add_transaction,   # callable, opens the transaction form
        on_retry_load,        # callable, re-runs the store load
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._on_add_transaction = on_add_transaction
        self._on_retry_load = on_retry_load
        self._date_format = date_format

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self._build_header()
        self._build_summary_cards()
        self._build_charts()
        self._build_recent()

    def _build_header(self):
        header = ctk.CTkFrame(self, fg_color="transparent")
        header.grid(row=0, column=0, sticky="ew", padx=16, pady=(12, 0))
        header.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            header, text="Welcome back!", font=ctk.CTkFont(size=20, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w")
        ctk.CTkButton(header, text="+ Add Transaction", command=self._on_add_transaction).grid(
            row=0, column=1
        )
        self._banner_area = ctk.CTkFrame(header, fg_color="transparent", height=0)
        self._banner_area.grid(row=1, column=0, columnspan=2, sticky="ew", pady=(6, 0))

    def _build_summary_cards(self):
        self._card_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._card_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=12)
        self._card_frame.grid_columnconfigure((0, 1, 2, 3), weight=1)

    def _build_charts(self):
        charts = ctk.CTkFrame(self, fg_color="transparent")
        charts.grid(row=2, column=0, sticky="ew", padx=16)
        charts.grid_columnconfigure((0, 1), weight=1)

        bar_outer = ctk.CTkFrame(charts, fg_color=("gray90", "gray20"), corner_radius=8)
        bar_outer.grid(row=0, column=0, sticky="nsew", padx=(0, 8))
        ctk.CTkLabel(bar_outer, text="Monthly Spending", font=ctk.CTkFont(size=13, weight="bold")).pack(
            pady=(10, 0)
        )
        self._bar_fig = Figure(figsize=(4.5, 2.6), dpi=80, tight_layout=True)
        self._bar_ax = self._bar_fig.add_subplot(111)
        self._bar_mpl = FigureCanvasTkAgg(self._bar_fig, master=bar_outer)
        self._bar_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))

        pie_outer = ctk.CTkFrame(charts, fg_color=("gray90", "gray20"), corner_radius=8)
        pie_outer.grid(row=0, column=1, sticky="nsew", padx=(8, 0))
        ctk.CTkLabel(pie_outer, text="Expenses by Category", font=ctk.CTkFont(size=13, weight="bold")).pack(
            pady=(10, 0)
        )
        self._pie_fig = Figure(figsize=(4.5, 2.6), dpi=80, tight_layout=True)
        self._pie_ax = self._pie_fig.add_subplot(111)
        self._pie_mpl = FigureCanvasTkAgg(self._pie_fig, master=pie_outer)
        self._pie_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))

    def _build_recent(self):
        self._recent_frame = ctk.CTkScrollableFrame(self, label_text="Recent Transactions", height=180)
        self._recent_frame.grid(row=3, column=0, sticky="nsew", padx=16, pady=12)
        self._recent_frame.grid_columnconfigure(1, weight=1)

    # ── Rendering ────────────────────────────────────────────────────────────

    def show(self, data: DashboardData, load_error: str | None = None):
        for w in self._banner_area.winfo_children():
            w.destroy()
        if load_error:
            AlertBanner(
                self._banner_area,
                message=f"Could not load your data: {load_error}",
                severity="error",
                action_text="Retry",
                action_cmd=self._on_retry_load,
            ).pack(fill="x")

        for w in self._card_frame.winfo_children():
            w.destroy()
        cards = [
            ("Total Balance",    data.balance,          _sign_color(data.balance)),
            ("Monthly Income",   data.monthly_income,   TYPE_COLORS["income"]),
            ("Monthly Expenses", data.monthly_expenses, TYPE_COLORS["expense"]),
            ("Net Monthly",      data.monthly_net,      _sign_color(data.monthly_net)),
        ]
        for i, (label, value, color) in enumerate(cards):
            self._make_card(i, label, value, color)

        self._draw_bar_chart(data)
        self._draw_pie_chart(data)
        self._draw_recent(data)

    def _make_card(self, col, label, value, color):
        card = ctk.CTkFrame(self._card_frame, fg_color=("gray90", "gray20"), corner_radius=10)
        card.grid(row=0, column=col, padx=6, sticky="ew")
        card.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(card, text=label, font=ctk.CTkFont(size=12), text_color="gray60").grid(
            row=0, column=0, pady=(12, 0), padx=16
        )
        ctk.CTkLabel(
            card, text=format_currency(value),
            font=ctk.CTkFont(size=20, weight="bold"), text_color=color,
        ).grid(row=1, column=0, pady=(4, 12), padx=16)

    def _style_ax(self, ax, fig):
        is_dark = ctk.get_appearance_mode() == "Dark"
        bg = "#2b2b2b" if is_dark else "#e4e4e4"
        fg = "#aaaaaa" if is_dark else "#444444"
        fig.patch.set_facecolor(bg)
        ax.set_facecolor(bg)
        ax.tick_params(colors=fg, labelsize=8)
        for spine in ax.spines.values():
            spine.set_edgecolor(fg)
        return fg

    def _draw_bar_chart(self, data: DashboardData):
        ax = self._bar_ax
        ax.clear()
        self._style_ax(ax, self._bar_fig)
        x = list(range(len(data.monthly_spending)))
        ax.bar(x, [m.amount for m in data.monthly_spending], 0.6, color=CHART_COLORS[0])
        ax.set_xticks(x)
        ax.set_xticklabels([m.label for m in data.monthly_spending])
        ax.yaxis.set_major_formatter(
            lambda v, _: f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"
        )
        self._bar_mpl.draw_idle()

    def _draw_pie_chart(self, data: DashboardData):
        ax = self._pie_ax
        ax.clear()
        fg = self._style_ax(ax, self._pie_fig)
        totals = [c for c in data.expenses_by_category if c.amount > 0]
        if not totals:
            ax.text(0.5, 0.5, "No expenses yet", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            ax.set_axis_off()
            self._pie_mpl.draw_idle()
            return
        ax.pie(
            [c.amount for c in totals],
            labels=[c.category for c in totals],
            colors=[CHART_COLORS[i % len(CHART_COLORS)] for i in range(len(totals))],
            autopct="%1.0f%%",
            startangle=90,
            textprops={"color": fg, "fontsize": 8},
        )
        ax.axis("equal")
        self._pie_mpl.draw_idle()

    def _draw_recent(self, data: DashboardData):
        for w in self._recent_frame.winfo_children():
            w.destroy()
        if not data.recent_transactions:
            ctk.CTkLabel(self._recent_frame, text="No transactions yet.", text_color="gray60").grid(
                row=0, column=0, columnspan=3, pady=20
            )
            return
        for idx, tx in enumerate(data.recent_transactions):
            bg = ("gray90", "gray20") if idx % 2 == 0 else ("gray86", "gray24")
            row = ctk.CTkFrame(self._recent_frame, fg_color=bg, corner_radius=4)
            row.grid(row=idx, column=0, columnspan=3, sticky="ew", pady=1)
            row.grid_columnconfigure(1, weight=1)
            ctk.CTkLabel(
                row, text=format_display_date(tx.date, self._date_format), width=85, anchor="w",
            ).grid(row=0, column=0, padx=6, pady=3)
            ctk.CTkLabel(row, text=f"{tx.description}  ·  {tx.category}", anchor="w").grid(
                row=0, column=1, padx=4, sticky="ew"
            )
            sign = "+" if tx.is_income else "-"
            ctk.CTkLabel(
                row, text=f"{sign}{format_currency(tx.amount)}",
                text_color=TYPE_COLORS[tx.type], anchor="e", width=110,
            ).grid(row=0, column=2, padx=6)


def _sign_color(value: float) -> str:
    return TYPE_COLORS["income"] if value >= 0 else TYPE_COLORS["expense"]
