"""
Streamlit Frontend for the Mess Bill Calculator

This is the screen the mess manager uses at the end of every month.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Nothing is calculated until "Calculate Bills" is pressed
3. Clear error messages in simple language
4. Results are read-only; edit the inputs and recalculate instead

All state lives in one MessSession kept in st.session_state.
"""

import asyncio
from datetime import date

import streamlit as st

from messbill.billing import CalculationError, CookChargeMode
from messbill.config import get_settings, validate_all_settings
from messbill.orchestrator import MessSession, create_session
from messbill.roster import RosterError
from messbill.services.notify import format_results_table
from messbill.services.storage import StorageError
from messbill.services.transfer import EXPORT_FILENAME, ImportFormatError


st.set_page_config(
    page_title="Mess Calculator",
    page_icon="🧮",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_session() -> MessSession:
    """Get or create the session for this browser tab."""
    if "mess_session" not in st.session_state:
        session = create_session(use_storage=True)
        try:
            run_async(session.load())
        except (StorageError, RosterError) as e:
            st.warning(f"Saved data could not be loaded: {e}")
        st.session_state.mess_session = session
        st.session_state.outcome = None
    return st.session_state.mess_session


def main():
    """Main application entry point."""
    session = get_session()
    settings = get_settings().app

    st.sidebar.title(f"🧮 {settings.mess_name}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🧾 Calculate", "🕘 History", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Add members and record their meals
        2. Enter the month's expenses
        3. Press Calculate Bills
        """
    )

    if page == "🧾 Calculate":
        render_calculate_page(session)
    elif page == "🕘 History":
        render_history_page(session)
    elif page == "⚙️ Settings":
        render_settings_page()


def record_export(session: MessSession):
    """Audit the export once the download is actually clicked."""
    run_async(session.export_members())


def render_members_section(session: MessSession):
    """Member management: add, edit, remove, import, export."""
    st.subheader("👥 Members")

    col1, col2, col3 = st.columns([4, 1, 1])
    with col1:
        new_name = st.text_input("Member name", key="new_member_name")
    with col2:
        guest_only = st.checkbox("Guest Only", key="new_member_guest")
    with col3:
        if st.button("➕ Add"):
            try:
                run_async(session.add_member(new_name, is_guest_only=guest_only))
                st.success("Member added")
                st.rerun()
            except (RosterError, StorageError) as e:
                st.error(str(e))

    if not len(session.roster):
        st.info("No members added yet")

    for member in session.members:
        cols = st.columns([3, 1, 1, 1, 1, 2, 1])
        label = member.name + (" · Guest Only" if member.is_guest_only else "")
        cols[0].markdown(f"**{label}**")

        meals = member.meals
        if not member.is_guest_only:
            meals = cols[1].number_input(
                "Meals", value=float(member.meals), min_value=0.0,
                step=1.0, key=f"meals_{member.name}",
            )
        deposits = cols[2].number_input(
            "Deposit", value=float(member.deposits), min_value=0.0,
            key=f"deposits_{member.name}",
        )
        guest = cols[3].number_input(
            "Guest ₹", value=float(member.guest), min_value=0.0,
            key=f"guest_{member.name}",
        )
        fine = cols[4].number_input(
            "Fine ₹", value=float(member.fine), min_value=0.0,
            key=f"fine_{member.name}",
        )
        email = cols[5].text_input(
            "Email", value=member.email or "", key=f"email_{member.name}",
        )

        changes = {}
        for field, value in (
            ("meals", meals), ("deposits", deposits),
            ("guest", guest), ("fine", fine),
        ):
            if value != getattr(member, field):
                changes[field] = value
        if (email or None) != member.email:
            changes["email"] = email
        if changes:
            try:
                run_async(session.update_member(member.name, **changes))
            except (RosterError, StorageError) as e:
                st.error(str(e))

        if cols[6].button("🗑️", key=f"remove_{member.name}"):
            try:
                run_async(session.remove_member(member.name))
                st.rerun()
            except (RosterError, StorageError) as e:
                st.error(str(e))

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "⬇️ Export",
            data=session.export_payload(),
            file_name=EXPORT_FILENAME,
            mime="application/json",
            on_click=record_export,
            args=(session,),
            disabled=not len(session.roster),
        )
    with col2:
        uploaded = st.file_uploader("⬆️ Import", type=["json"])
        if uploaded is not None and st.button("Import members"):
            try:
                run_async(session.import_members(uploaded.read()))
                st.success("Data imported successfully")
                st.rerun()
            except (ImportFormatError, RosterError) as e:
                st.error(str(e))


def render_expenses_section(session: MessSession):
    """Expense inputs including the dual cook-charge fields."""
    st.subheader("💸 Expenses")
    current = session.expenses

    col1, col2 = st.columns(2)
    with col1:
        rice = st.number_input("Rice Cost (₹)", value=current.rice_cost, min_value=0.0)
        marketing = st.number_input("Marketing Cost (₹)", value=current.marketing_cost, min_value=0.0)
        gas = st.number_input("Gas Cost (₹)", value=current.gas_cost, min_value=0.0)
        bound_meal = st.number_input(
            "Bound Meal (Minimum Meals)", value=current.bound_meal, min_value=0.0,
        )
    with col2:
        paper = st.number_input("Paper Cost (₹)", value=current.paper_cost, min_value=0.0)
        others = st.number_input("Other Costs (₹)", value=current.other_costs, min_value=0.0)

        charge = session.cook_charge
        total_label = "Total Cook Charge (₹)"
        if charge.is_derived(CookChargeMode.TOTAL) and charge.total > 0:
            total_label += " · auto-calculated"
        per_head_label = "Cook Rate per Head (₹)"
        if charge.is_derived(CookChargeMode.PER_HEAD) and charge.per_head > 0:
            per_head_label += " · auto-calculated"

        cook_total = st.number_input(total_label, value=charge.total, min_value=0.0)
        cook_per_head = st.number_input(per_head_label, value=charge.per_head, min_value=0.0)

    session.set_expenses(
        rice_cost=rice,
        marketing_cost=marketing,
        gas_cost=gas,
        paper_cost=paper,
        other_costs=others,
        bound_meal=bound_meal,
    )
    if cook_total != charge.total:
        session.set_cook_charge_total(cook_total)
        st.rerun()
    elif cook_per_head != charge.per_head:
        session.set_cook_charge_per_head(cook_per_head)
        st.rerun()


def render_results(session: MessSession):
    """Overview metrics, per-member bills and the email action."""
    outcome = st.session_state.outcome
    if outcome is None:
        return

    overview = outcome.overview
    st.markdown("---")
    st.subheader("📊 Calculation Overview")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Members", overview.total_members)
    c2.metric("Total Meals", f"{overview.total_meals:g}")
    c3.metric("Meal Rate", f"₹{overview.meal_rate:.2f}")
    c4.metric("Establishment Charge", f"₹{overview.establishment_charge:.2f}")

    st.subheader("🧾 Individual Bills")
    for result in outcome.results:
        badges = []
        if result.is_guest_only:
            badges.append("Guest Only")
        if result.min_meals_applied:
            badges.append("Min. meals applied")
        title = result.name + (f" ({', '.join(badges)})" if badges else "")
        colour = "red" if result.outstanding > 0 else "green"
        with st.expander(f"{title}: ₹{result.outstanding:,}"):
            if not result.is_guest_only:
                st.write(f"Effective Meals: {result.effective_meals:g}")
                st.write(f"Meal Cost: ₹{result.meal_cost:.2f}")
                st.write(f"Establishment Charge: ₹{result.establishment_charge:.2f}")
            st.write(f"Guest Charges: ₹{result.guest:.2f}")
            if result.fine > 0:
                st.write(f"Fine: ₹{result.fine:.2f}")
            st.write(f"Deposits: ₹{result.deposits:.2f}")
            st.markdown(f"**Total Bill: ₹{result.total_bill:.2f}**")
            st.markdown(f"Outstanding: :{colour}[₹{result.outstanding:,}]")

    with st.expander("🖨️ Printable table"):
        st.code(format_results_table(outcome.results), language=None)

    st.subheader("✉️ Email Bills")
    month = st.text_input("Billing month", value=date.today().strftime("%B %Y"))
    if st.button("Send bill emails"):
        with st.spinner("Sending..."):
            sent = run_async(session.send_bill_emails(outcome, month))
        if not sent:
            st.info("No members have an email address.")
        for name, result in sent.items():
            if result.success:
                st.success(f"{name}: sent")
            else:
                st.error(f"{name}: {result.error}")


def render_calculate_page(session: MessSession):
    """Render the main calculation page."""
    st.title("🧮 Mess Calculator")
    st.markdown("Transparent hostel bill management & calculation")

    render_members_section(session)
    st.markdown("---")
    render_expenses_section(session)
    st.markdown("---")

    validation = session.validate()
    if validation.warnings or not validation.structure_valid:
        st.warning(session.validation_summary(validation))

    if st.button("🧮 Calculate Bills", type="primary"):
        try:
            st.session_state.outcome = run_async(session.calculate())
            st.success("Bills calculated successfully")
        except CalculationError as e:
            st.session_state.outcome = None
            st.error(str(e))

    render_results(session)


def render_history_page(session: MessSession):
    """Render the last calculations, newest first."""
    st.title("🕘 History")
    entries = session.history.entries
    if not entries:
        st.info("No calculations yet.")
        return

    for entry in entries:
        label = entry.recorded_at.strftime("%d %B %Y %H:%M")
        with st.expander(
            f"{label}: {len(entry.results)} members, meal rate ₹{entry.overview.meal_rate:.2f}"
        ):
            st.code(format_results_table(entry.results), language=None)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")
    status = validate_all_settings()

    services = [
        ("Local storage", "local_storage"),
        ("Google Sheets (Storage)", "google_sheets"),
        ("Email relay", "email_relay"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
