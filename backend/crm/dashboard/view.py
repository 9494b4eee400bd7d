"""
Terminal rendition of the internal dashboard.

The view confirms its token (GET /auth/me) before it fetches anything, then
loads the executive metrics and the first page of leads side by side. Writes
(recording a payment, attaching a referral code) re-poll on success. API
failures are shown as an error line; nothing here raises ApiError to the
caller, so a polling loop keeps running through outages.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal, InvalidOperation

from crm.dashboard.client import ApiClient, ApiError
from crm.utils import utcnow

logger = logging.getLogger(__name__)

LEADS_PER_PAGE = 10

LEAD_COLUMNS = (
    ("company_name", "Company", 28),
    ("contact_name", "Contact", 20),
    ("status", "Status", 12),
    ("source", "Source", 9),
    ("referral_code", "Referral", 13),
    ("estimated_value", "Est. value", 12),
)


def _cell(value, width: int) -> str:
    text = "-" if value in (None, "") else str(value)
    if len(text) > width:
        text = text[:width - 1] + "…"
    return text.ljust(width)


def _money(value) -> str:
    try:
        return f"{Decimal(str(value or 0)):,.2f}"
    except InvalidOperation:
        return str(value)


class DashboardView:
    def __init__(self, client: ApiClient, write=print):
        self.client = client
        self.write = write
        self.user: dict | None = None
        self.metrics: dict = {}
        self.leads: list = []
        self.error: str | None = None
        self.notice: str | None = None
        self.refreshed_at = None

    # ─── Loading ─────────────────────────────────────────────────────────

    def authenticate(self) -> bool:
        try:
            self.user = self.client.current_user()
        except ApiError as e:
            self.user = None
            self.error = f"Authentication failed: {e.message}"
            logger.warning("Dashboard authentication failed: %s", e.message)
            return False
        logger.info("Dashboard authenticated as %s", self.user.get("email"))
        return True

    def refresh(self) -> bool:
        """Fetch metrics and leads in parallel and re-render. False if anything failed."""
        if self.user is None and not self.authenticate():
            self.render()
            return False

        errors = []
        with ThreadPoolExecutor(max_workers=2) as pool:
            metrics_call = pool.submit(self.client.dashboard_metrics)
            leads_call = pool.submit(self.client.list_leads, page=1, limit=LEADS_PER_PAGE)

            try:
                self.metrics = metrics_call.result()
            except ApiError as e:
                errors.append(f"Failed to load dashboard statistics: {e.message}")
            try:
                self.leads = leads_call.result().get("leads", [])
            except ApiError as e:
                errors.append(f"Failed to load leads data: {e.message}")

        self.error = "; ".join(errors) or None
        if self.error:
            logger.warning("Dashboard refresh incomplete: %s", self.error)
        else:
            self.refreshed_at = utcnow()
        self.render()
        return self.error is None

    # ─── Writes ──────────────────────────────────────────────────────────

    def record_payment(self, lead_id, amount) -> bool:
        if not lead_id:
            return self._fail("Please select a lead")
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            value = Decimal("0")
        if not value.is_finite() or value <= 0:
            return self._fail("Please enter a valid amount")

        try:
            result = self.client.record_payment(lead_id, value)
        except ApiError as e:
            return self._fail(e.message or "Failed to record payment")

        self.notice = (
            f"Payment recorded successfully (commission {_money(result.get('commission_calculated'))})"
        )
        self.refresh()
        return True

    def attach_referral_code(self, lead_id, code: str) -> bool:
        if not lead_id or not (code or "").strip():
            return self._fail("Please fill in all fields")
        try:
            self.client.update_lead(lead_id, {"referral_code": code.strip().upper()})
        except ApiError as e:
            return self._fail(e.message or "Failed to record referral code")

        self.notice = "Referral code recorded successfully"
        self.refresh()
        return True

    def _fail(self, message: str) -> bool:
        self.error = message
        self.notice = None
        self.render()
        return False

    # ─── Rendering ───────────────────────────────────────────────────────

    def summary(self) -> dict:
        performance = self.metrics.get("performance") or {}
        financial = self.metrics.get("financial") or {}
        return {
            "Total leads": performance.get("total_leads") or 0,
            "Active referrals": performance.get("active_referrals") or 0,
            "Converted leads": performance.get("converted_leads") or 0,
            "Partner payouts": _money(financial.get("total_commission")),
        }

    def lead_table(self) -> list[str]:
        header = " ".join(_cell(title, width) for _, title, width in LEAD_COLUMNS)
        lines = [header, "-" * len(header)]
        if not self.leads:
            lines.append("No leads yet")
        for lead in self.leads:
            lines.append(" ".join(_cell(lead.get(key), width) for key, _, width in LEAD_COLUMNS))
        return lines

    def render(self) -> str:
        lines = []
        if self.user:
            lines.append(f"Internal dashboard — {self.user.get('name') or self.user.get('email')}")
        if self.refreshed_at:
            lines.append(f"Updated {self.refreshed_at:%Y-%m-%d %H:%M:%S} UTC")
        lines.append("  ".join(f"{label}: {value}" for label, value in self.summary().items()))
        lines.append("")
        lines.extend(self.lead_table())
        if self.notice:
            lines.append(f"OK: {self.notice}")
        if self.error:
            lines.append(f"ERROR: {self.error}")

        text = "\n".join(lines)
        self.write(text)
        return text
