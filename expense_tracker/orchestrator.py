"""
Workspace Orchestrator

Ties the stores and the aggregation functions together for one signed-in
user. The flows that used to live in the screens are here:
1. Dashboard (stats, recent expenses, category chart)
2. Expense list (search and category filter)
3. Reports (monthly, by category, trends)

DESIGN DECISION: The workspace holds no numbers of its own. Every view
reads a fresh snapshot from the stores and hands it to a pure function in
``expense_tracker.reports``, with ``now`` taken from one injectable clock.
"""

from datetime import datetime
from typing import Callable, Optional

from expense_tracker.audit import AuditLogger, configure_logging, get_logger
from expense_tracker.config import AppSettings, get_settings
from expense_tracker.identity import AuthService, Session
from expense_tracker.models import Expense, utc_now
from expense_tracker.reports import (
    CategoryReport,
    CategoryTotal,
    ComparisonPeriod,
    DashboardStats,
    LookbackWindow,
    MonthlyReport,
    MonthTrend,
    PeriodSummary,
    category_chart,
    category_report,
    compare_periods,
    dashboard_stats,
    monthly_report,
    monthly_trends,
    recent_expenses,
    search_expenses,
)
from expense_tracker.services.storage import KeyValueStorage, create_storage
from expense_tracker.stores import CategoryStore, ExpenseStore, SettingsStore


logger = get_logger(__name__)


class UserWorkspace:
    """
    The three stores of one session plus the views built on them.

    Usage:
        workspace = open_workspace(session)
        workspace.expenses.add({"description": "Tea", ...})
        stats = workspace.dashboard()
    """

    def __init__(
        self,
        session: Session,
        expenses: ExpenseStore,
        categories: CategoryStore,
        settings: SettingsStore,
        recent_limit: int = 5,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session = session
        self.expenses = expenses
        self.categories = categories
        self.settings = settings
        self._recent_limit = recent_limit
        self._clock = clock

    @property
    def is_loading(self) -> bool:
        return (
            self.expenses.is_loading
            or self.categories.is_loading
            or self.settings.is_loading
        )

    def load(self) -> None:
        """Load (or seed) every store up front."""
        self.categories.load()
        self.expenses.load()
        self.settings.get()

    # -- dashboard -----------------------------------------------------------

    def dashboard(self) -> DashboardStats:
        return dashboard_stats(
            self.expenses.list(),
            self.settings.get().monthly_budget,
            self._clock(),
        )

    def recent(self, limit: Optional[int] = None) -> list[Expense]:
        return recent_expenses(self.expenses.list(), limit or self._recent_limit)

    def chart(self, window: LookbackWindow = LookbackWindow.LAST_MONTH) -> list[CategoryTotal]:
        return category_chart(
            self.expenses.list(), self.categories.list(), window, self._clock()
        )

    def search(self, term: str = "", category_id: Optional[str] = None) -> list[Expense]:
        return search_expenses(self.expenses.list(), term, category_id)

    # -- reports -------------------------------------------------------------

    def compare(self, period: ComparisonPeriod = ComparisonPeriod.MONTH) -> PeriodSummary:
        return compare_periods(
            self.expenses.list(), self.categories.list(), period, self._clock()
        )

    def monthly_report(self, year: Optional[int] = None, month: Optional[int] = None) -> MonthlyReport:
        """Report for a calendar month, defaulting to the current one."""
        now = self._clock()
        return monthly_report(
            self.expenses.list(),
            self.categories.list(),
            year or now.year,
            month or now.month,
        )

    def category_report(self, year: Optional[int] = None) -> CategoryReport:
        return category_report(
            self.expenses.list(),
            self.categories.list(),
            year or self._clock().year,
        )

    def trends(self, year: Optional[int] = None) -> list[MonthTrend]:
        return monthly_trends(self.expenses.list(), year or self._clock().year)


def open_workspace(
    session: Session,
    storage: Optional[KeyValueStorage] = None,
    audit_logger: Optional[AuditLogger] = None,
    app_settings: Optional[AppSettings] = None,
    clock: Callable[[], datetime] = utc_now,
) -> UserWorkspace:
    """
    Factory function to create the stores for a session.

    Args:
        session: The signed-in user; every key is namespaced by its id
        storage: Backend to use. Defaults to the configured backend.
        audit_logger: Shared audit logger. Defaults to local-only logging.
        app_settings: Defaults to the cached application settings.
        clock: Source of ``now`` for seeding, exports and views.
    """
    app_settings = app_settings or get_settings().app
    if storage is None:
        storage = create_storage(app_settings)
    audit_logger = audit_logger or AuditLogger()

    expenses = ExpenseStore(
        storage,
        session,
        audit_logger,
        seed_sample_data=app_settings.seed_sample_data,
        clock=clock,
    )
    categories = CategoryStore(storage, session, audit_logger)
    settings = SettingsStore(
        storage,
        session,
        expenses,
        categories,
        audit_logger,
        export_dir=app_settings.export_dir,
        clock=clock,
    )

    logger.info("workspace_opened", user_id=session.user_id, backend=type(storage).__name__)
    return UserWorkspace(
        session,
        expenses,
        categories,
        settings,
        recent_limit=app_settings.recent_expenses_limit,
        clock=clock,
    )


def create_app_components(
    storage: Optional[KeyValueStorage] = None,
) -> tuple[AuthService, KeyValueStorage, AuditLogger]:
    """
    Factory function for the process-wide pieces: storage, audit logging
    and the auth service. Call ``open_workspace`` once a session exists.
    """
    app_settings = get_settings().app
    configure_logging(app_settings.log_level)

    if storage is None:
        storage = create_storage(app_settings)
    audit_logger = AuditLogger()
    return AuthService(storage, audit_logger), storage, audit_logger
