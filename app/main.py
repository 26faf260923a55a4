"""
Streamlit Frontend for PeerPay

A single screen with four tabs:
1. Transactions - balance, send a payment, history
2. Groups - create groups, add members, request money
3. Chatbot - scripted echo bot
4. Scan Receipt - simulated scan that deducts a random amount

The UI only forwards user intents to the ledger. Input checks here just
enable or disable buttons; the ledger re-validates everything.
"""

import streamlit as st

from peerpay.audit import AuditLogger, configure_logging
from peerpay.chatbot import Chatbot
from peerpay.config import get_settings, validate_all_settings
from peerpay.ledger import EmptyGroupError, LedgerModel, create_ledger, parse_amount
from peerpay.services.storage import InMemoryAuditStorage


# Page configuration
st.set_page_config(
    page_title="PeerPay",
    page_icon="💸",
    layout="centered",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)

# Audit events kept per session and shown under "Recent activity"
RECENT_ACTIVITY_LIMIT = 20

_ICON_EMOJI = {
    "red": "🔴",
    "green": "🟢",
    "blue": "🔵",
    "yellow": "🟡",
    "orange": "🟠",
}


def get_session():
    """Get or create this browser session's ledger, chatbot and audit trail."""
    if "ledger" not in st.session_state:
        audit_storage = InMemoryAuditStorage(max_events=RECENT_ACTIVITY_LIMIT)
        st.session_state.audit_storage = audit_storage
        st.session_state.ledger = create_ledger(audit_logger=AuditLogger(audit_storage))
        st.session_state.chatbot = Chatbot()
        st.session_state.scanned_amount = ""
    return st.session_state.ledger, st.session_state.chatbot


def main():
    """Main application entry point."""
    configure_logging(get_settings().app.log_level)

    status = validate_all_settings()
    if not all(status.get(name, False) for name in ("storage", "ledger", "app")):
        for name in ("storage", "ledger", "app"):
            if not status.get(name, False):
                st.error(f"❌ Invalid {name} settings: {status.get(f'{name}_error')}")
        st.stop()

    ledger, chatbot = get_session()

    transactions_tab, groups_tab, chat_tab, receipt_tab = st.tabs(
        ["💲 Transactions", "👥 Groups", "💬 Chatbot", "🧾 Scan Receipt"]
    )
    with transactions_tab:
        render_transactions_tab(ledger)
    with groups_tab:
        render_groups_tab(ledger)
    with chat_tab:
        render_chatbot_tab(chatbot)
    with receipt_tab:
        render_receipt_tab(ledger)


def render_transactions_tab(ledger: LedgerModel):
    st.markdown(
        f'<div class="big-number">Balance: ${ledger.balance:.2f}</div>',
        unsafe_allow_html=True,
    )

    amount_text = st.text_input("Enter amount", key="payment_amount")
    description = st.text_input("Enter description", key="payment_description")

    amount = parse_amount(amount_text)
    can_send = amount is not None and 0 < amount <= ledger.balance
    if st.button("Send Payment", type="primary", disabled=not can_send):
        ledger.send_payment(amount_text, description)
        st.rerun()

    st.markdown("---")
    for transaction in ledger.transactions:
        emoji = _ICON_EMOJI[transaction.type.icon_color]
        st.markdown(
            f"{emoji} **{transaction.description}**  \n"
            f"${transaction.amount:.2f}"
        )


def render_groups_tab(ledger: LedgerModel):
    st.subheader("Manage Groups")

    request_text = st.text_input("Request Amount", key="request_amount")

    for index, group in enumerate(ledger.groups):
        with st.container(border=True):
            st.markdown(f"**{group.name}**")
            st.caption(f"Members: {', '.join(group.members)}")

            member_name = st.text_input("New Member Name", key=f"member_{group.id}")
            col1, col2 = st.columns(2)
            with col1:
                if st.button("Add Member to Group", key=f"add_{group.id}"):
                    ledger.add_member_to_group(index, member_name)
                    st.rerun()
            with col2:
                if st.button("Request Money from Group", key=f"request_{group.id}"):
                    try:
                        ledger.request_money_from_group(index, request_text)
                    except EmptyGroupError as e:
                        st.warning(str(e))
                    else:
                        st.rerun()

    new_group_name = st.text_input("New Group Name", key="new_group_name")
    if st.button("Create Group"):
        ledger.create_group(new_group_name)
        st.rerun()


def render_chatbot_tab(chatbot: Chatbot):
    st.subheader("Chatbot")
    st.info(chatbot.response)

    with st.form("chat_form", clear_on_submit=True):
        message = st.text_input("Type your message...")
        if st.form_submit_button("Send"):
            chatbot.send(message)
            st.rerun()


def render_receipt_tab(ledger: LedgerModel):
    st.subheader("Scan Receipt")
    st.markdown(f"Scanned amount: ${st.session_state.scanned_amount}")

    if st.button("Simulate Receipt Scan", type="primary"):
        transaction = ledger.scan_receipt()
        st.session_state.scanned_amount = f"{transaction.amount:.2f}"
        st.rerun()

    with st.expander("🔍 Recent activity"):
        for event in st.session_state.audit_storage.get_recent_events(limit=RECENT_ACTIVITY_LIMIT):
            st.caption(f"{event.timestamp:%H:%M:%S} {event.description}")


if __name__ == "__main__":
    main()
